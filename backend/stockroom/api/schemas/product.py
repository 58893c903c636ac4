"""Pydantic models describing Product payloads."""

from datetime import datetime

from pydantic import BaseModel, Field


class ProductRead(BaseModel):
    id: str
    name: str
    description: str = ""
    barcode: str | None = None
    price: float
    cost: float
    stock_quantity: int
    unit: str = "pcs"
    sku: str = ""
    category: str = ""
    categories: list[str] = Field(default_factory=list)
    supplier_id: str | None = None
    low_stock_threshold: float | None = Field(
        None, description="Unset (None) is distinct from a zero threshold"
    )
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class ProductPage(BaseModel):
    items: list[ProductRead]
    total: int
    page: int
    limit: int
    total_pages: int
