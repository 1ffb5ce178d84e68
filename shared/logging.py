"""
Structured logging setup for all modules.

Provides JSON-structured logging with automatic attempt_id injection.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional
from uuid import UUID

from shared.config import settings

# Context variable for the current generation attempt
attempt_id_context: ContextVar[Optional[UUID]] = ContextVar("attempt_id", default=None)

# Standard LogRecord attributes, everything else on a record came from extra=
STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName", "levelname",
    "levelno", "lineno", "module", "msecs", "message", "pathname", "process",
    "processName", "relativeCreated", "thread", "threadName", "exc_info",
    "exc_text", "stack_info", "getMessage", "taskName"
}


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "message": record.getMessage(),
        }

        attempt_id = attempt_id_context.get()
        if attempt_id:
            log_data["attempt_id"] = str(attempt_id)

        for key, value in record.__dict__.items():
            if key not in STANDARD_ATTRS and not key.startswith("_"):
                if isinstance(value, (str, int, float, bool, type(None))):
                    log_data[key] = value
                else:
                    log_data[key] = str(value)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Module name (e.g., "compositor")

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Don't add handlers if already configured
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(JSONFormatter())
    logger.addHandler(console_handler)

    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_dir / "app.log",
            maxBytes=100 * 1024 * 1024,  # 100MB
            backupCount=5
        )
        file_handler.setFormatter(JSONFormatter())
        logger.addHandler(file_handler)

    return logger


def set_attempt_id(attempt_id: Optional[UUID]) -> None:
    """
    Set attempt_id in context for automatic injection into logs.

    Args:
        attempt_id: Generation attempt ID to set in context
    """
    attempt_id_context.set(attempt_id)


def get_attempt_id() -> Optional[UUID]:
    """Get current attempt_id from context."""
    return attempt_id_context.get()
