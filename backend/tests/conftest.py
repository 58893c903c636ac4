"""Shared fixtures: an isolated in-memory SQLite database per test."""

from __future__ import annotations

import os
from collections.abc import Generator

# Must be set before stockroom.core.config builds its cached settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

import pytest  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from stockroom.db.base import Base  # noqa: E402
from stockroom.db.models import Product, Supplier  # noqa: E402,F401
from stockroom.db.session import build_engine  # noqa: E402
from stockroom.repositories.product_store import SqlAlchemyProductStore  # noqa: E402
from stockroom.services.product_service import ProductService  # noqa: E402


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def store(session: Session) -> SqlAlchemyProductStore:
    return SqlAlchemyProductStore(session)


@pytest.fixture
def service(store: SqlAlchemyProductStore) -> ProductService:
    return ProductService(store)


@pytest.fixture
def supplier(session: Session) -> Supplier:
    supplier = Supplier(name="Acme Wholesale")
    session.add(supplier)
    session.flush()
    return supplier
