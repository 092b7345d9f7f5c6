"""Structured JSON logging with correlation ID support."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from .correlation import get_correlation_id

_ROOT_LOGGER = "unifiedapi"


class JsonFormatter(logging.Formatter):
    """One JSON object per line, carrying the request correlation ID."""

    def __init__(self, app_env: str = "development") -> None:
        super().__init__()
        self.app_env = app_env

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "env": self.app_env,
            "message": record.getMessage(),
        }

        correlation_id = get_correlation_id()
        if correlation_id:
            log_obj["correlationId"] = correlation_id

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            log_obj.update(extra_fields)

        return json.dumps(log_obj, default=str)


def configure_logging(level: str = "INFO", app_env: str = "development") -> None:
    """Install the JSON handler on the package root logger.

    Idempotent: repeated calls only adjust level and environment tag.
    """
    root = logging.getLogger(_ROOT_LOGGER)
    handler = next((h for h in root.handlers if isinstance(h.formatter, JsonFormatter)), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        root.addHandler(handler)
    handler.setFormatter(JsonFormatter(app_env))
    root.setLevel(level)
    root.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package root (JSON output once configured)."""
    if not name.startswith(_ROOT_LOGGER):
        name = f"{_ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
