"""Database models package."""
from stockroom.db.models.product import Product
from stockroom.db.models.supplier import Supplier

__all__ = ["Product", "Supplier"]
