"""Business logic for product records: CRUD, paging and bulk operations."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from stockroom.api.schemas.product import ProductPage, ProductRead
from stockroom.core.errors import NotFoundError
from stockroom.db.models.product import Product
from stockroom.repositories.product_store import FieldUpdate, ProductStore

logger = logging.getLogger(__name__)

# Only these fields may be touched by a bulk update, with their coercions
BULK_UPDATE_FIELDS = {
    "price": lambda value: _to_number(value, "price"),
    "cost": lambda value: _to_number(value, "cost"),
    "stock_quantity": lambda value: _to_whole_number(value, "stock_quantity"),
}

# Incoming aliases accepted from import sources and API payloads
FIELD_ALIASES = {"supplier": "supplier_id"}


def _writable(body: Mapping[str, Any]) -> dict[str, Any]:
    """Keep the known, caller-writable fields of ``body``."""
    values: dict[str, Any] = {}
    for key, value in body.items():
        key = FIELD_ALIASES.get(key, key)
        if key in Product.WRITABLE_FIELDS:
            values[key] = value
    ignored = set(body) - set(values) - set(FIELD_ALIASES)
    if ignored:
        logger.debug(f"Ignoring unknown product fields: {sorted(ignored)}")
    return values


def _to_number(value: Any, field_name: str) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"{field_name} is required")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} must be a number, got {value!r}") from None
    if math.isnan(number) or math.isinf(number):
        raise ValueError(f"{field_name} must be a finite number, got {value!r}")
    return number


def _to_whole_number(value: Any, field_name: str) -> int:
    number = _to_number(value, field_name)
    if not number.is_integer():
        raise ValueError(f"{field_name} must be a whole number, got {value!r}")
    return int(number)


def _to_categories(value: Any) -> list[str]:
    """Normalise a raw categories cell to a list of strings.

    A single value becomes a one-element list; lists and tuples are kept.
    """
    if value is None or value == "" or value == []:
        return []
    items = list(value) if isinstance(value, (list, tuple)) else [value]
    categories = []
    for item in items:
        if isinstance(item, bool) or not isinstance(item, (str, int, float)):
            raise ValueError(f"categories must be text, got {value!r}")
        categories.append(str(item))
    return categories


def shape_import_record(record: Mapping[str, Any]) -> dict[str, Any]:
    """Turn a raw import row into a canonical product creation record.

    Missing optional fields get their catalog defaults. price, cost and
    stock_quantity are required and coerced to numbers. low_stock_threshold
    is only set when the row carries a value, so an empty cell stays unset
    rather than becoming zero.

    Raises:
        ValueError: when a required number is missing or not numeric, or
            categories is not text.
    """
    shaped = {
        "name": record.get("name"),
        "description": record.get("description") or "",
        "barcode": record.get("barcode") or None,
        "price": _to_number(record.get("price"), "price"),
        "cost": _to_number(record.get("cost"), "cost"),
        "stock_quantity": _to_whole_number(
            record.get("stock_quantity"), "stock_quantity"
        ),
        "unit": record.get("unit") or "pcs",
        "sku": record.get("sku") or "",
        "category": record.get("category") or "",
        "categories": _to_categories(record.get("categories")),
        "supplier_id": record.get("supplier_id") or record.get("supplier") or None,
    }

    threshold = record.get("low_stock_threshold")
    if threshold is not None and threshold != "":
        shaped["low_stock_threshold"] = _to_number(threshold, "low_stock_threshold")

    return shaped


class ProductService:
    """Product operations over an injected ProductStore.

    Every operation takes plain data and returns plain data. Absence on
    update/delete raises NotFoundError; other store failures propagate.
    """

    def __init__(self, store: ProductStore) -> None:
        self.store = store

    def create_product(self, product_body: Mapping[str, Any]) -> ProductRead:
        """Persist a new product; unset fields take the schema defaults."""
        try:
            product = self.store.create(_writable(product_body))
        except SQLAlchemyError as e:
            logger.error(f"Database error creating product: {e}", exc_info=True)
            raise

        logger.info(f"Created product {product.id}")
        return ProductRead.model_validate(product)

    def query_products(
        self,
        filter: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> ProductPage:
        """Return one page of products.

        Args:
            filter: field -> value equality conditions (lists mean "any of").
            options: ``sort_by`` ("field:asc|desc", comma separated),
                ``limit`` (default 10), ``page`` (default 1), ``search``
                and ``field_name`` (field searched, default ``name``).
        """
        result = self.store.paginated_query(filter or {}, options or {})
        return ProductPage(
            items=[ProductRead.model_validate(p) for p in result.items],
            total=result.total,
            page=result.page,
            limit=result.limit,
            total_pages=result.total_pages,
        )

    def get_product_by_id(self, product_id: str) -> ProductRead | None:
        product = self.store.find_by_id(product_id)
        if product is None:
            return None
        return ProductRead.model_validate(product)

    def update_product_by_id(
        self, product_id: str, update_body: Mapping[str, Any]
    ) -> ProductRead:
        """Overwrite only the fields present in ``update_body``.

        Read-then-write without version checks: concurrent updates to the
        same product resolve as last writer wins.
        """
        product = self.store.find_by_id(product_id)
        if product is None:
            raise NotFoundError()

        for key, value in _writable(update_body).items():
            setattr(product, key, value)

        try:
            product = self.store.save(product)
        except SQLAlchemyError as e:
            logger.error(
                f"Database error updating product {product_id}: {e}", exc_info=True
            )
            raise

        logger.info(f"Updated product {product_id}")
        return ProductRead.model_validate(product)

    def delete_product_by_id(self, product_id: str) -> ProductRead:
        """Delete a product and return its last known state."""
        product = self.store.find_by_id(product_id)
        if product is None:
            raise NotFoundError()

        snapshot = ProductRead.model_validate(product)
        self.store.delete_one(product)

        logger.info(f"Deleted product {product_id}")
        return snapshot

    def get_all_products(self) -> list[ProductRead]:
        # Unbounded on purpose; use query_products for paged access
        return [ProductRead.model_validate(p) for p in self.store.find_all()]

    def bulk_update_products(
        self, products_to_update: Sequence[Mapping[str, Any]]
    ) -> list[ProductRead]:
        """Set price/cost/stock_quantity on many products in one batch.

        Only fields present in a record are written. The batch is unordered:
        a failing record does not stop the others. Returns the current state
        of every product whose id was given, in no particular order; unknown
        ids are silently absent from the result.
        """
        operations: list[FieldUpdate] = []
        product_ids: list[str] = []
        for record in products_to_update:
            product_id = record.get("id")
            if product_id is None:
                logger.warning("Skipping bulk update record without an id")
                continue
            product_ids.append(product_id)
            try:
                fields = {
                    name: coerce(record[name])
                    for name, coerce in BULK_UPDATE_FIELDS.items()
                    if name in record
                }
            except ValueError as e:
                logger.warning(f"Skipping bulk update of product {product_id}: {e}")
                continue
            operations.append(FieldUpdate(product_id=product_id, fields=fields))

        try:
            result = self.store.bulk_write(operations, continue_on_error=True)
        except SQLAlchemyError as e:
            logger.error(f"Database error during bulk update: {e}", exc_info=True)
            raise

        for failure in result.failures:
            logger.warning(
                f"Bulk update of product {operations[failure.index].product_id} "
                f"failed: {failure.message}"
            )
        logger.info(
            f"Bulk updated {result.matched_count} of {len(operations)} products"
        )

        return [
            ProductRead.model_validate(p) for p in self.store.find_many(product_ids)
        ]

    def bulk_add_products(
        self, products_to_add: Sequence[Mapping[str, Any]]
    ) -> dict[str, Any]:
        """Import many new products, keeping going past rejected rows.

        Returns ``success``, ``inserted_count`` and ``products``; ``errors``
        (``index`` into ``products_to_add`` plus the failure message) is only
        present when at least one record was rejected. Failures that are not
        about an individual record, such as a lost connection, propagate.
        """
        errors: list[dict[str, Any]] = []
        shaped: list[dict[str, Any]] = []
        positions: list[int] = []
        for index, record in enumerate(products_to_add):
            try:
                shaped.append(shape_import_record(record))
            except ValueError as e:
                errors.append({"index": index, "error": str(e)})
                continue
            positions.append(index)

        try:
            outcome = self.store.insert_many(shaped, continue_on_error=True)
        except SQLAlchemyError as e:
            logger.error(f"Database error during bulk import: {e}", exc_info=True)
            raise

        errors.extend(
            {"index": positions[failure.index], "error": failure.message}
            for failure in outcome.failures
        )

        result: dict[str, Any] = {
            "success": True,
            "inserted_count": len(outcome.inserted),
            "products": [ProductRead.model_validate(p) for p in outcome.inserted],
        }
        if errors:
            errors.sort(key=lambda item: item["index"])
            result["errors"] = errors
            logger.warning(
                f"Bulk import inserted {len(outcome.inserted)} products, "
                f"{len(errors)} rejected"
            )
        else:
            logger.info(f"Bulk import inserted {len(outcome.inserted)} products")
        return result
