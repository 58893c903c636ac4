"""Persistence collaborators used by the service layer."""
from stockroom.repositories.product_store import (
    BatchInsertOutcome,
    BatchWriteResult,
    FieldUpdate,
    PageResult,
    ProductStore,
    SqlAlchemyProductStore,
    WriteFailure,
)

__all__ = [
    "BatchInsertOutcome",
    "BatchWriteResult",
    "FieldUpdate",
    "PageResult",
    "ProductStore",
    "SqlAlchemyProductStore",
    "WriteFailure",
]
