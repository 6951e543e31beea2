"""Log event model for redislog."""

import logging
from datetime import UTC, datetime
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator

# Dynamically derive standard LogRecord attributes at module import time
# This ensures future Python additions (like taskName) are automatically handled
_STANDARD_LOGRECORD_KEYS: frozenset[str] = frozenset(
    logging.LogRecord(
        name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
    ).__dict__.keys()
) | {"message", "asctime"}


class Level(IntEnum):
    """Severity levels, ordered from least to most severe.

    ``UNSET`` is the zero value. It names no severity and is never enabled.
    """

    UNSET = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5
    PANIC = 6

    def __str__(self) -> str:
        return _LEVEL_NAMES[self]

    @classmethod
    def parse(cls, name: str) -> "Level":
        """Parse a level name case-insensitively (``warn`` and ``warning`` both work)."""
        key = name.strip().lower()
        for level, level_name in _LEVEL_NAMES.items():
            if key == level_name or key == level.name.lower():
                return level
        raise ValueError(f"not a valid level: {name!r}")

    @classmethod
    def from_logging(cls, levelno: int) -> "Level":
        """Map a stdlib ``logging`` level number onto a Level."""
        if levelno > logging.CRITICAL:
            return cls.PANIC
        if levelno >= logging.CRITICAL:
            return cls.FATAL
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARN
        if levelno >= logging.INFO:
            return cls.INFO
        return cls.DEBUG


_LEVEL_NAMES: dict[Level, str] = {
    Level.UNSET: "unset",
    Level.DEBUG: "debug",
    Level.INFO: "info",
    Level.WARN: "warning",
    Level.ERROR: "error",
    Level.FATAL: "fatal",
    Level.PANIC: "panic",
}


class LogEvent(BaseModel):
    """Immutable structured log event handed to the hook.

    Attributes:
        timestamp: When the event was emitted. Naive datetimes are taken as UTC.
        level: Severity of the event.
        message: Free-text log message.
        fields: Custom fields; values of any type, stringified on formatting.
    """

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    level: Level = Level.INFO
    message: str = ""
    fields: dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "extra": "forbid",
        "frozen": True,
    }

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Level.parse(v)
        return v

    @classmethod
    def from_record(cls, record: logging.LogRecord) -> "LogEvent":
        """Build an event from a stdlib LogRecord.

        Attributes passed through ``extra={...}`` become custom fields.
        """
        fields = {
            key: value
            for key, value in vars(record).items()
            if key not in _STANDARD_LOGRECORD_KEYS
        }
        return cls(
            timestamp=datetime.fromtimestamp(record.created, UTC),
            level=Level.from_logging(record.levelno),
            message=record.getMessage(),
            fields=fields,
        )
