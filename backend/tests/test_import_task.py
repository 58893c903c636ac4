"""Background bulk import task."""

import pytest
from sqlalchemy import select

from factories import import_row
from stockroom.db import session as db_session
from stockroom.db.models.product import Product
from stockroom.workers.tasks.import_products import import_products_task


@pytest.fixture
def worker_sessions(session_factory, monkeypatch):
    monkeypatch.setattr(db_session, "SessionLocal", session_factory)
    return session_factory


def test_task_commits_and_reports(worker_sessions):
    result = import_products_task.apply(
        args=([import_row(sku="A"), import_row(sku="B", name=None)],)
    ).get()

    assert result["success"] is True
    assert result["inserted_count"] == 1
    assert result["products"][0]["sku"] == "A"
    assert isinstance(result["products"][0]["created_at"], str)
    assert [e["index"] for e in result["errors"]] == [1]

    with worker_sessions() as check:
        assert check.scalars(select(Product.sku)).all() == ["A"]


def test_task_without_errors_omits_key(worker_sessions):
    result = import_products_task.apply(args=([import_row()],)).get()

    assert "errors" not in result
    assert result["inserted_count"] == 1
