"""Process-wide logging setup for the API and the Celery worker."""

from __future__ import annotations

import logging
import sys

from stockroom.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Attach a single stream handler to the root logger.

    Safe to call more than once; an existing stockroom handler is reused.
    """
    level_name = (level or get_settings().log_level).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    for handler in root.handlers:
        if getattr(handler, "_stockroom", False):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._stockroom = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    # SQL echo is controlled by the engine, keep driver chatter down
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
