"""Paginated product queries: filter, search, sort and windowing."""

import pytest

from factories import product_body


@pytest.fixture
def catalog(service):
    for i in range(1, 26):
        service.create_product(
            product_body(
                name=f"Item {i:02d}",
                sku=f"SKU-{i:02d}",
                category="even" if i % 2 == 0 else "odd",
                price=float(i),
            )
        )


class TestQueryProducts:
    def test_second_page_window(self, service, catalog):
        page = service.query_products({}, {"sort_by": "sku:asc", "page": 2, "limit": 10})

        assert [p.sku for p in page.items] == [f"SKU-{i:02d}" for i in range(11, 21)]
        assert page.total == 25
        assert page.page == 2
        assert page.limit == 10
        assert page.total_pages == 3

    def test_last_page_is_partial(self, service, catalog):
        page = service.query_products({}, {"sort_by": "sku:asc", "page": 3, "limit": 10})
        assert len(page.items) == 5

    def test_page_past_end_is_empty_not_error(self, service, catalog):
        page = service.query_products({}, {"page": 9, "limit": 10})

        assert page.items == []
        assert page.total == 25

    def test_defaults_when_options_missing(self, service, catalog):
        page = service.query_products()

        assert page.page == 1
        assert page.limit == 10
        assert len(page.items) == 10

    @pytest.mark.parametrize("bad", [0, -3, "abc", None])
    def test_invalid_limit_and_page_fall_back(self, service, catalog, bad):
        page = service.query_products({}, {"limit": bad, "page": bad})

        assert page.limit == 10
        assert page.page == 1

    def test_string_numbers_are_accepted(self, service, catalog):
        page = service.query_products({}, {"limit": "5", "page": "2"})
        assert (page.limit, page.page, page.total_pages) == (5, 2, 5)

    def test_fractional_limit_is_truncated(self, service, catalog):
        page = service.query_products({}, {"limit": "2.5", "page": 1.9})
        assert (page.limit, page.page, len(page.items)) == (2, 1, 2)

    def test_descending_sort(self, service, catalog):
        page = service.query_products({}, {"sort_by": "price:desc", "limit": 3})
        assert [p.price for p in page.items] == [25.0, 24.0, 23.0]

    def test_multiple_sort_keys(self, service, catalog):
        page = service.query_products(
            {}, {"sort_by": "category:asc,price:desc", "limit": 2}
        )
        assert [(p.category, p.price) for p in page.items] == [
            ("even", 24.0),
            ("even", 22.0),
        ]

    def test_filter_by_equality(self, service, catalog):
        page = service.query_products({"category": "even"}, {"limit": 50})

        assert page.total == 12
        assert all(p.category == "even" for p in page.items)

    def test_filter_by_membership(self, service, catalog):
        page = service.query_products({"sku": ["SKU-01", "SKU-07"]}, {})
        assert sorted(p.sku for p in page.items) == ["SKU-01", "SKU-07"]

    def test_search_defaults_to_name(self, service, catalog):
        page = service.query_products({}, {"search": "item 1", "limit": 50})
        assert page.total == 10  # Item 10..19

    def test_search_on_named_field(self, service, catalog):
        page = service.query_products(
            {}, {"search": "sku-2", "field_name": "sku", "limit": 50}
        )
        assert sorted(p.sku for p in page.items) == [
            f"SKU-{i}" for i in range(20, 26)
        ]

    def test_search_wildcards_are_literal(self, service, catalog):
        page = service.query_products({}, {"search": "%"})
        assert page.total == 0

    def test_empty_store(self, service):
        page = service.query_products({}, {})

        assert page.items == []
        assert page.total == 0
        assert page.total_pages == 0

    def test_unknown_field_is_rejected(self, service, catalog):
        with pytest.raises(ValueError):
            service.query_products({"colour": "red"}, {})
        with pytest.raises(ValueError):
            service.query_products({}, {"sort_by": "colour:asc"})
