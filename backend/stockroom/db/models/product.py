"""SQLAlchemy model for product records."""

import uuid

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import DateTime

from stockroom.db.base import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    barcode = Column(String(64), unique=True)
    price = Column(Float, nullable=False, default=0)
    cost = Column(Float, nullable=False, default=0)
    stock_quantity = Column(Integer, nullable=False, default=0)
    unit = Column(String(32), nullable=False, default="pcs")
    sku = Column(String(64), nullable=False, default="", index=True)
    category = Column(String(128), nullable=False, default="")
    categories = Column(
        JSON().with_variant(JSONB, "postgresql"), nullable=False, default=list
    )
    supplier_id = Column(
        String(32), ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True
    )
    # NULL means no threshold configured, which is different from zero
    low_stock_threshold = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("cost >= 0", name="ck_products_cost_non_negative"),
        CheckConstraint(
            "stock_quantity >= 0", name="ck_products_stock_non_negative"
        ),
        CheckConstraint(
            "low_stock_threshold IS NULL OR low_stock_threshold >= 0",
            name="ck_products_threshold_non_negative",
        ),
    )

    # Columns callers may write; id and timestamps are owned by the store
    WRITABLE_FIELDS = (
        "name",
        "description",
        "barcode",
        "price",
        "cost",
        "stock_quantity",
        "unit",
        "sku",
        "category",
        "categories",
        "supplier_id",
        "low_stock_threshold",
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r}>"
