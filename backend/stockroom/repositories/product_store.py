"""Persistence contract for products and its SQLAlchemy implementation."""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import String, cast, func, select, update
from sqlalchemy.exc import (
    DBAPIError,
    DataError,
    IntegrityError,
    InterfaceError,
    ProgrammingError,
    StatementError,
)
from sqlalchemy.orm import Session

from stockroom.db.models.product import Product

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
DEFAULT_PAGE = 1
DEFAULT_SORT = "created_at"
DEFAULT_SEARCH_FIELD = "name"

QUERYABLE_FIELDS = ("id", *Product.WRITABLE_FIELDS, "created_at", "updated_at")

# Driver wording for a value that cannot be bound (sqlite3, psycopg)
BIND_ERROR_MARKERS = ("binding parameter", "cannot adapt", "unsupported type")


@dataclass
class PageResult:
    items: list[Product]
    total: int
    page: int
    limit: int
    total_pages: int


@dataclass
class FieldUpdate:
    """Set-operation writing only ``fields`` on the product ``product_id``."""

    product_id: str
    fields: dict[str, Any]


@dataclass
class WriteFailure:
    index: int
    message: str


@dataclass
class BatchWriteResult:
    matched_count: int = 0
    failures: list[WriteFailure] = field(default_factory=list)


@dataclass
class BatchInsertOutcome:
    """Partial result of an unordered insert; returned instead of raised."""

    inserted: list[Product] = field(default_factory=list)
    failures: list[WriteFailure] = field(default_factory=list)


class ProductStore(ABC):
    """Operations the product service needs from its persistence layer."""

    @abstractmethod
    def create(self, values: Mapping[str, Any]) -> Product:
        """Persist a new product and return it with its assigned id."""

    @abstractmethod
    def find_by_id(self, product_id: str) -> Product | None:
        """Return the product or None when the id is unknown."""

    @abstractmethod
    def paginated_query(
        self, filter: Mapping[str, Any] | None, options: Mapping[str, Any] | None
    ) -> PageResult:
        """Apply filter, optional text search, sort and page windowing."""

    @abstractmethod
    def find_all(self) -> list[Product]:
        """Return every stored product."""

    @abstractmethod
    def find_many(self, product_ids: Iterable[str]) -> list[Product]:
        """Return the products whose id is in ``product_ids``."""

    @abstractmethod
    def save(self, product: Product) -> Product:
        """Persist changes made to a loaded product."""

    @abstractmethod
    def delete_one(self, product: Product) -> None:
        """Remove a loaded product."""

    @abstractmethod
    def bulk_write(
        self, updates: Sequence[FieldUpdate], continue_on_error: bool = True
    ) -> BatchWriteResult:
        """Apply independent set-operations as one batch."""

    @abstractmethod
    def insert_many(
        self, records: Sequence[Mapping[str, Any]], continue_on_error: bool = True
    ) -> BatchInsertOutcome:
        """Insert independent records as one batch."""


def _positive_int(value: Any, default: int) -> int:
    """Parse like JS parseInt: "2.5" gives 2, junk gives ``default``."""
    try:
        parsed = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    return parsed if parsed > 0 else default


def _column(name: str):
    if name not in QUERYABLE_FIELDS:
        raise ValueError(f"Unknown product field: {name!r}")
    return getattr(Product, name)


def _is_record_level(exc: StatementError) -> bool:
    """Whether ``exc`` is about one record's values rather than the database.

    Constraint violations, out-of-range data and values the driver cannot
    bind or convert only sink that record. Connection and other operational
    failures abort the batch.
    """
    if isinstance(exc, (IntegrityError, DataError)):
        return True
    if isinstance(exc, (ProgrammingError, InterfaceError)):
        message = str(exc.orig).lower()
        return any(marker in message for marker in BIND_ERROR_MARKERS)
    if isinstance(exc, DBAPIError):
        return False
    return isinstance(exc.orig, (ValueError, TypeError))


def _failure_message(exc: Exception) -> str:
    return str(getattr(exc, "orig", None) or exc)


class SqlAlchemyProductStore(ProductStore):
    """ProductStore backed by a SQLAlchemy session.

    Writes are flushed, never committed: the owner of the session decides the
    transaction boundary. Batch operations isolate each record in a SAVEPOINT
    so one rejected row does not undo the others.
    """

    def __init__(
        self, session: Session, default_limit: int = DEFAULT_LIMIT
    ) -> None:
        self.session = session
        self.default_limit = default_limit

    def create(self, values: Mapping[str, Any]) -> Product:
        product = Product(**values)
        self.session.add(product)
        self.session.flush()
        self.session.refresh(product)
        return product

    def find_by_id(self, product_id: str) -> Product | None:
        if product_id is None:
            return None
        return self.session.get(Product, product_id)

    def paginated_query(
        self, filter: Mapping[str, Any] | None, options: Mapping[str, Any] | None
    ) -> PageResult:
        options = options or {}
        limit = _positive_int(options.get("limit"), self.default_limit)
        page = _positive_int(options.get("page"), DEFAULT_PAGE)

        conditions = self._conditions(filter or {}, options)

        total = (
            self.session.scalar(
                select(func.count()).select_from(Product).where(*conditions)
            )
            or 0
        )

        query = (
            select(Product)
            .where(*conditions)
            .order_by(*self._ordering(options.get("sort_by")))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        items = list(self.session.scalars(query))

        return PageResult(
            items=items,
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        )

    def find_all(self) -> list[Product]:
        return list(self.session.scalars(select(Product)))

    def find_many(self, product_ids: Iterable[str]) -> list[Product]:
        ids = {product_id for product_id in product_ids if product_id is not None}
        if not ids:
            return []
        query = (
            select(Product)
            .where(Product.id.in_(ids))
            .execution_options(populate_existing=True)
        )
        return list(self.session.scalars(query))

    def save(self, product: Product) -> Product:
        self.session.add(product)
        self.session.flush()
        self.session.refresh(product)
        return product

    def delete_one(self, product: Product) -> None:
        self.session.delete(product)
        self.session.flush()

    def bulk_write(
        self, updates: Sequence[FieldUpdate], continue_on_error: bool = True
    ) -> BatchWriteResult:
        result = BatchWriteResult()
        for index, op in enumerate(updates):
            if not op.fields:
                continue
            stmt = (
                update(Product)
                .where(Product.id == op.product_id)
                .values(**op.fields)
                .execution_options(synchronize_session="fetch")
            )
            try:
                with self.session.begin_nested():
                    outcome = self.session.execute(stmt)
            except StatementError as exc:
                if not continue_on_error or not _is_record_level(exc):
                    raise
                result.failures.append(
                    WriteFailure(index=index, message=_failure_message(exc))
                )
                continue
            result.matched_count += outcome.rowcount or 0
        return result

    def insert_many(
        self, records: Sequence[Mapping[str, Any]], continue_on_error: bool = True
    ) -> BatchInsertOutcome:
        outcome = BatchInsertOutcome()
        for index, values in enumerate(records):
            product = Product(**values)
            try:
                with self.session.begin_nested():
                    self.session.add(product)
                    self.session.flush()
            except StatementError as exc:
                if not continue_on_error or not _is_record_level(exc):
                    raise
                logger.debug(f"Insert of record {index} rejected: {exc}")
                outcome.failures.append(
                    WriteFailure(index=index, message=_failure_message(exc))
                )
                continue
            outcome.inserted.append(product)

        for product in outcome.inserted:
            self.session.refresh(product)
        return outcome

    def _conditions(
        self, filter: Mapping[str, Any], options: Mapping[str, Any]
    ) -> list[Any]:
        conditions = []
        for name, value in filter.items():
            column = _column(name)
            if isinstance(value, (list, tuple, set, frozenset)):
                conditions.append(column.in_(list(value)))
            elif value is None:
                conditions.append(column.is_(None))
            else:
                conditions.append(column == value)

        search = options.get("search")
        if search:
            column = _column(options.get("field_name") or DEFAULT_SEARCH_FIELD)
            conditions.append(cast(column, String).icontains(search, autoescape=True))
        return conditions

    def _ordering(self, sort_by: str | None) -> list[Any]:
        ordering = []
        if sort_by:
            for option in sort_by.split(","):
                key, _, order = option.strip().partition(":")
                if not key:
                    continue
                column = _column(key)
                ordering.append(column.desc() if order == "desc" else column.asc())
        if not ordering:
            ordering.append(_column(DEFAULT_SORT).asc())
        # Stable windows when sort keys tie
        ordering.append(Product.id.asc())
        return ordering
