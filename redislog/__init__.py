"""redislog - ship Python log events to a Redis list as Logstash JSON."""

from redislog.backends import Connection, ConnectionProvider, RedisSink
from redislog.core import (
    ConnectionUnavailable,
    FormatError,
    HookConfig,
    InitConnectFailed,
    Level,
    LogEvent,
    QueueFull,
    RedisLogError,
    SendFailed,
    format_event,
)
from redislog.handler import RedisLogHandler, install
from redislog.hook import DeliveryQueue, HookStats, RedisHook

__version__ = "0.1.0"

__all__ = [
    # Hook
    "RedisHook",
    "HookStats",
    "DeliveryQueue",
    "RedisLogHandler",
    "install",
    # Model & config
    "Level",
    "LogEvent",
    "HookConfig",
    "format_event",
    # Errors
    "RedisLogError",
    "ConnectionUnavailable",
    "InitConnectFailed",
    "FormatError",
    "SendFailed",
    "QueueFull",
    # Backends
    "Connection",
    "ConnectionProvider",
    "RedisSink",
    # Meta
    "__version__",
]
