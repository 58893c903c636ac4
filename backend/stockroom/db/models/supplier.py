"""SQLAlchemy model for suppliers referenced by products."""

import uuid

from sqlalchemy import Column, String, func
from sqlalchemy.types import DateTime

from stockroom.db.base import Base


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
