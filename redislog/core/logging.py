"""Operator-facing JSON diagnostics for redislog.

The hook never writes its own diagnostics into the stream it ships: these
loggers live under the ``redislog`` namespace, do not propagate, and write to
stderr.
"""

import json
import logging
from datetime import UTC, datetime
from typing import Any

from redislog.core.event import _STANDARD_LOGRECORD_KEYS

LOGGER_NAMESPACE = "redislog"


class JSONFormatter(logging.Formatter):
    """JSON formatter with UTC ISO8601 timestamps."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        for key, value in vars(record).items():
            if key not in _STANDARD_LOGRECORD_KEYS and key not in log_data:
                log_data[key] = value

        try:
            return json.dumps(log_data, default=str)
        except Exception:
            return str(log_data)


def _setup_json_handler(logger: logging.Logger, level: int) -> None:
    """Configure a logger with JSON formatting.

    Args:
        logger: The logger to configure.
        level: The level to use when the logger has none of its own.
    """
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
    if logger.level == logging.NOTSET:
        logger.setLevel(level)
    logger.propagate = False


def get_logger(name: str = LOGGER_NAMESPACE, level: int = logging.INFO) -> logging.Logger:
    """Get a diagnostics logger with JSON formatting.

    Args:
        name: The logger name. Defaults to "redislog".
        level: Level used when the logger has none set. Defaults to logging.INFO.
    """
    logger = logging.getLogger(name)
    _setup_json_handler(logger, level)
    return logger


def configure_hook_logger(level: int = logging.INFO) -> logging.Logger:
    """Configure the redislog namespace and return the hook logger.

    Pool and sink loggers are children of the namespace and share its handler.
    """
    get_logger(LOGGER_NAMESPACE, level)
    return logging.getLogger(f"{LOGGER_NAMESPACE}.hook")


def is_internal(record: logging.LogRecord) -> bool:
    """Return True for records emitted by redislog's own loggers."""
    return record.name == LOGGER_NAMESPACE or record.name.startswith(LOGGER_NAMESPACE + ".")
