"""Simple health and readiness endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, status
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from stockroom.core.config import get_settings
from stockroom.db import session as db_session
from stockroom.utils.redis_client import create_redis_client

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])

SERVICE_NAME = "stockroom-api"


@router.get("/live", summary="Liveness probe")
async def live() -> dict[str, str]:
    """Indicates API process is running."""
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/ready", summary="Readiness probe")
async def ready() -> dict[str, Any]:
    """Check the database and the import broker.

    Only the database decides readiness; an unreachable broker is reported
    but does not take the API out of rotation.
    """
    checks: dict[str, Any] = {
        "status": "ok",
        "service": SERVICE_NAME,
        "checks": {},
    }

    try:
        with db_session.engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        checks["checks"]["database"] = {
            "status": "healthy",
            "message": "Database connection successful",
        }
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        checks["status"] = "unhealthy"
        checks["checks"]["database"] = {
            "status": "unhealthy",
            "message": f"Database connection failed: {str(e)}",
        }

    settings = get_settings()
    broker_url = settings.celery_broker_url or settings.redis_url
    try:
        client = create_redis_client(
            broker_url, decode_responses=True, socket_connect_timeout=2
        )
        client.ping()
        client.close()
        checks["checks"]["broker"] = {
            "status": "healthy",
            "message": "Broker connection successful",
        }
    except (RedisError, OSError) as e:
        logger.warning(f"Broker health check failed: {e}")
        checks["checks"]["broker"] = {
            "status": "unhealthy",
            "message": f"Broker connection failed: {str(e)}",
        }

    if checks["status"] != "ok":
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=checks,
        )
    return checks
