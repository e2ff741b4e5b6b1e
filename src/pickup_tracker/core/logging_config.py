"""Logging configuration.

Format: 2026-01-06T14:05:52Z pickup_tracker.utils.request_manager INFO message
"""

import logging
import sys
from datetime import datetime
from typing import Optional

import pytz

from pickup_tracker.config import LOG_LEVEL


class ISO8601Formatter(logging.Formatter):
    """Formatter producing ISO8601 timestamps in UTC."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, pytz.utc).strftime(
            "%Y-%m-%dT%H:%M:%SZ"
        )
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return f"{timestamp} {record.name} {record.levelname} {message}"


class HealthCheckFilter(logging.Filter):
    """Suppress access-log lines for the health endpoint unless debugging."""

    HEALTH_PATHS = ("/health",)

    def filter(self, record: logging.LogRecord) -> bool:
        if logging.getLogger().isEnabledFor(logging.DEBUG):
            return True
        message = record.getMessage()
        return not any(f"{path} " in message for path in self.HEALTH_PATHS)


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger and uvicorn's loggers.

    Safe to call more than once; the handler is replaced, not duplicated.

    Args:
        level: Level name; defaults to LOG_LEVEL from the environment.
    """
    level_name = (level or LOG_LEVEL).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ISO8601Formatter())

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(numeric_level)

    for name in ("uvicorn", "uvicorn.error"):
        uv_logger = logging.getLogger(name)
        uv_logger.handlers = []
        uv_logger.propagate = True

    access_logger = logging.getLogger("uvicorn.access")
    access_logger.handlers = []
    access_logger.propagate = True
    if not any(isinstance(f, HealthCheckFilter) for f in access_logger.filters):
        access_logger.addFilter(HealthCheckFilter())

    # SQL echo stays off unless explicitly debugging
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if numeric_level <= logging.DEBUG else logging.WARNING
    )
