"""FastAPI application bootstrap."""

import logging

from fastapi import FastAPI

from stockroom.api.errors import register_exception_handlers
from stockroom.api.routers import health
from stockroom.core.config import get_settings
from stockroom.core.logging_config import configure_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Instantiate the FastAPI app with error handling and health probes."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title=settings.app_name, version="0.1.0")
    register_exception_handlers(app)
    app.include_router(health.router)

    logger.info(f"{settings.app_name} API initialised")
    return app


app = create_app()
