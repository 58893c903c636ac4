"""SqlAlchemyProductStore batch semantics."""

import pytest
from sqlalchemy.exc import OperationalError, StatementError

from factories import product_body
from stockroom.repositories.product_store import FieldUpdate, _is_record_level


class TestBulkWrite:
    def test_unbindable_value_fails_only_its_record(self, store):
        a = store.create(product_body(sku="A"))
        b = store.create(product_body(sku="B", price=2))

        result = store.bulk_write(
            [
                FieldUpdate(product_id=a.id, fields={"name": {"x": 1}}),
                FieldUpdate(product_id=b.id, fields={"price": 3}),
            ]
        )

        assert [f.index for f in result.failures] == [0]
        assert result.matched_count == 1
        refreshed = {p.id: p for p in store.find_many([a.id, b.id])}
        assert refreshed[a.id].name == "Espresso beans"
        assert refreshed[b.id].price == 3

    def test_stop_on_first_failure_when_asked(self, store):
        a = store.create(product_body())

        with pytest.raises(StatementError):
            store.bulk_write(
                [FieldUpdate(product_id=a.id, fields={"price": -1})],
                continue_on_error=False,
            )


class TestInsertMany:
    def test_rejected_rows_are_returned_not_raised(self, store):
        outcome = store.insert_many(
            [
                product_body(sku="A", name={"x": 1}),
                product_body(sku="B", price=-3),
                product_body(sku="C"),
            ]
        )

        assert [p.sku for p in outcome.inserted] == ["C"]
        assert [f.index for f in outcome.failures] == [0, 1]


class TestRecordLevelClassification:
    def test_connection_failure_aborts(self):
        exc = OperationalError("UPDATE products", {}, Exception("connection reset"))
        assert not _is_record_level(exc)

    def test_conversion_failure_is_record_level(self):
        exc = StatementError(
            "could not convert", "UPDATE products", {}, ValueError("bad float")
        )
        assert _is_record_level(exc)
