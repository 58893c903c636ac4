"""Celery task running bulk product imports off the request path."""

from __future__ import annotations

import logging
from typing import Any

from stockroom.db import session as db_session
from stockroom.repositories.product_store import SqlAlchemyProductStore
from stockroom.services.product_service import ProductService
from stockroom.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="stockroom.workers.tasks.import_products")
def import_products_task(self, records: list[dict[str, Any]]) -> dict[str, Any]:
    """Insert already-parsed product rows and report the outcome.

    Rejected rows do not fail the task; they are listed under ``errors``.
    Anything else rolls the whole import back and re-raises.
    """
    session = db_session.SessionLocal()
    try:
        service = ProductService(SqlAlchemyProductStore(session))
        result = service.bulk_add_products(records)
        session.commit()
    except Exception as exc:
        session.rollback()
        logger.error(
            f"Import task {self.request.id} failed after rollback: {exc}",
            exc_info=True,
        )
        raise
    finally:
        session.close()

    logger.info(
        f"Import task {self.request.id} inserted {result['inserted_count']} "
        f"of {len(records)} products"
    )
    summary = {
        "success": result["success"],
        "inserted_count": result["inserted_count"],
        "products": [p.model_dump(mode="json") for p in result["products"]],
    }
    if "errors" in result:
        summary["errors"] = result["errors"]
    return summary
