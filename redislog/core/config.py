"""Hook configuration."""

import os
from typing import Any

from pydantic import BaseModel, Field, field_validator

from redislog.core.envelope import FORMAT_V0, normalize_format
from redislog.core.event import Level

DEFAULT_QUEUE_CAPACITY = 1000
DEFAULT_MAX_IDLE = 3
DEFAULT_IDLE_TIMEOUT = 240.0

_TRUTHY = {"1", "true", "yes", "on"}


class HookConfig(BaseModel):
    """Immutable configuration for a RedisHook.

    Attributes:
        host: Redis host name.
        port: Redis port.
        key: Name of the Redis list log entries are pushed onto.
        format: Envelope format, ``v0`` or ``v1``. Anything else becomes ``v0``.
        level: Minimum severity shipped by the hook.
        async_mode: Deliver from a background worker instead of the caller's thread.
        queue_capacity: Bound of the delivery queue (async mode only).
        max_idle: Maximum number of idle pooled connections.
        idle_timeout: Seconds after which an idle connection is discarded.
        socket_timeout: Socket timeout for Redis I/O; None keeps the transport default.
    """

    host: str = "localhost"
    port: int = Field(default=6379, ge=1, le=65535)
    key: str
    format: str = FORMAT_V0
    level: Level = Level.INFO
    async_mode: bool = False
    queue_capacity: int = Field(default=DEFAULT_QUEUE_CAPACITY, gt=0)
    max_idle: int = Field(default=DEFAULT_MAX_IDLE, ge=0)
    idle_timeout: float = Field(default=DEFAULT_IDLE_TIMEOUT, gt=0)
    socket_timeout: float | None = None

    model_config = {
        "extra": "forbid",
        "frozen": True,
    }

    @field_validator("key")
    @classmethod
    def validate_key(cls, v: str) -> str:
        if not v:
            raise ValueError("key must not be empty")
        return v

    @field_validator("format", mode="before")
    @classmethod
    def validate_format(cls, v: Any) -> str:
        return normalize_format(v)

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Level.parse(v)
        return v

    @classmethod
    def from_env(cls, prefix: str = "REDISLOG_", **overrides: Any) -> "HookConfig":
        """Build a HookConfig from environment variables.

        Reads ``{prefix}HOST``, ``PORT``, ``KEY``, ``FORMAT``, ``LEVEL``,
        ``ASYNC`` and ``QUEUE_CAPACITY``. Keyword arguments win over the
        environment.
        """
        env = {
            "host": os.environ.get(f"{prefix}HOST"),
            "port": os.environ.get(f"{prefix}PORT"),
            "key": os.environ.get(f"{prefix}KEY"),
            "format": os.environ.get(f"{prefix}FORMAT"),
            "level": os.environ.get(f"{prefix}LEVEL"),
            "queue_capacity": os.environ.get(f"{prefix}QUEUE_CAPACITY"),
        }
        async_flag = os.environ.get(f"{prefix}ASYNC")
        if async_flag is not None:
            env["async_mode"] = async_flag.strip().lower() in _TRUTHY

        values = {name: value for name, value in env.items() if value is not None}
        values.update(overrides)
        return cls(**values)
