"""Redis connection pooling and list delivery."""

from redislog.backends.base import Connection
from redislog.backends.pool import ConnectionProvider
from redislog.backends.redis_sink import RedisSink

__all__ = ["Connection", "ConnectionProvider", "RedisSink"]
