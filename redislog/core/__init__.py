"""Core components for redislog.

Types:
    LogEvent: Immutable structured log event handed to the hook.
    Level: Ordered severity levels, with UNSET as the reserved zero value.
    HookConfig: Validated, frozen hook configuration.

Formatting:
    format_event: Build a v0 or v1 Logstash envelope from a LogEvent.
    build_payload: Format and serialize an event to JSON bytes.

Errors:
    RedisLogError: Base class of all errors below.
    ConnectionUnavailable: No live connection could be provided.
    InitConnectFailed: Redis was unreachable when building a hook.
    FormatError: An event could not be serialized.
    SendFailed: RPUSH to Redis failed.
    QueueFull: The async delivery queue is at capacity.
"""

from redislog.core.config import HookConfig
from redislog.core.envelope import (
    FORMAT_V0,
    FORMAT_V1,
    EnvelopeV0,
    EnvelopeV1,
    build_payload,
    format_event,
)
from redislog.core.errors import (
    ConnectionUnavailable,
    FormatError,
    InitConnectFailed,
    QueueFull,
    RedisLogError,
    SendFailed,
)
from redislog.core.event import Level, LogEvent

__all__ = [
    "LogEvent",
    "Level",
    "HookConfig",
    "FORMAT_V0",
    "FORMAT_V1",
    "EnvelopeV0",
    "EnvelopeV1",
    "format_event",
    "build_payload",
    "RedisLogError",
    "ConnectionUnavailable",
    "InitConnectFailed",
    "FormatError",
    "SendFailed",
    "QueueFull",
]
