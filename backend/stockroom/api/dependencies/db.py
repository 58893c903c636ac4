"""Database session and service dependencies."""

from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from stockroom.core.config import get_settings
from stockroom.db.session import get_db
from stockroom.repositories.product_store import SqlAlchemyProductStore
from stockroom.services.product_service import ProductService


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency that yields a managed SQLAlchemy session."""
    yield from get_db()


def get_product_service(session: Session = Depends(get_session)) -> ProductService:
    """ProductService bound to the request's session."""
    store = SqlAlchemyProductStore(
        session, default_limit=get_settings().default_page_limit
    )
    return ProductService(store)
