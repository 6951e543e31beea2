"""Pooled Redis connections with probe-on-borrow and idle eviction."""

import logging
import threading
import time
from collections import deque
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from redislog.backends.base import Connection
from redislog.core.config import DEFAULT_IDLE_TIMEOUT, DEFAULT_MAX_IDLE
from redislog.core.errors import ConnectionUnavailable

try:
    import redis
except ImportError as e:
    raise ImportError(
        "redislog requires the 'redis' package. Install it with: pip install redis"
    ) from e

logger = logging.getLogger("redislog.pool")

ConnectionFactory = Callable[[], Connection]

# Errors a connection may raise on I/O; anything else is a programming error.
TRANSPORT_ERRORS = (redis.RedisError, OSError)


def redis_connection_factory(
    host: str, port: int, socket_timeout: float | None = None
) -> ConnectionFactory:
    """Return a factory dialing plain TCP ``redis.Connection`` objects."""

    def dial() -> Connection:
        conn = redis.Connection(host=host, port=port, socket_timeout=socket_timeout)
        conn.connect()
        return conn

    return dial


@dataclass
class _IdleConnection:
    conn: Connection
    returned_at: float


class ConnectionProvider:
    """Small pool of Redis connections.

    Connections are borrowed for a single operation and returned right after.
    Reused idle connections are probed with PING before being handed out;
    connections that fail the probe, or sat idle longer than
    ``idle_timeout``, are dropped and a fresh one is dialed instead.

    Args:
        factory: Callable that dials and returns a connected Connection.
        max_idle: Maximum number of connections kept idle between borrows.
        idle_timeout: Seconds an idle connection may wait before it is discarded.
    """

    def __init__(
        self,
        factory: ConnectionFactory,
        max_idle: int = DEFAULT_MAX_IDLE,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._factory = factory
        self._max_idle = max_idle
        self._idle_timeout = idle_timeout
        self._clock = clock
        self._idle: deque[_IdleConnection] = deque()
        self._lock = threading.Lock()
        self._closed = False

    @classmethod
    def for_redis(
        cls,
        host: str,
        port: int,
        max_idle: int = DEFAULT_MAX_IDLE,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
        socket_timeout: float | None = None,
    ) -> "ConnectionProvider":
        return cls(
            redis_connection_factory(host, port, socket_timeout),
            max_idle=max_idle,
            idle_timeout=idle_timeout,
        )

    @property
    def idle_count(self) -> int:
        with self._lock:
            return len(self._idle)

    def _pop_idle(self) -> Connection | None:
        """Pop the most recently returned idle connection, evicting stale ones."""
        stale: list[Connection] = []
        found: Connection | None = None
        now = self._clock()
        with self._lock:
            # Oldest entries sit on the left
            while self._idle and now - self._idle[0].returned_at > self._idle_timeout:
                stale.append(self._idle.popleft().conn)
            if self._idle:
                found = self._idle.pop().conn
        for conn in stale:
            _discard(conn)
        if stale:
            logger.debug(f"Evicted {len(stale)} idle connection(s)")
        return found

    def acquire(self) -> Connection:
        """Borrow a live connection.

        Raises:
            ConnectionUnavailable: If the pool is closed or a new connection
                cannot be dialed.
        """
        if self._closed:
            raise ConnectionUnavailable("connection provider is closed")

        while True:
            conn = self._pop_idle()
            if conn is None:
                break
            try:
                _ping(conn)
                return conn
            except TRANSPORT_ERRORS as e:
                logger.debug(f"Idle connection failed liveness probe: {e}")
                _discard(conn)

        try:
            return self._factory()
        except TRANSPORT_ERRORS as e:
            raise ConnectionUnavailable("unable to connect to Redis", e) from e

    def release(self, conn: Connection) -> None:
        """Return a borrowed connection to the idle pool."""
        with self._lock:
            if not self._closed and len(self._idle) < self._max_idle:
                self._idle.append(_IdleConnection(conn, self._clock()))
                return
        _discard(conn)

    @contextmanager
    def connection(self) -> Iterator[Connection]:
        """Borrow a connection for the duration of a ``with`` block."""
        conn = self.acquire()
        try:
            yield conn
        except TRANSPORT_ERRORS:
            # A connection that failed mid-command is in an unknown state
            _discard(conn)
            raise
        except BaseException:
            self.release(conn)
            raise
        else:
            self.release(conn)

    def ping(self) -> None:
        """Acquire a connection, PING it and release it.

        Raises:
            ConnectionUnavailable: If no connection is available or PING fails.
        """
        try:
            with self.connection() as conn:
                _ping(conn)
        except TRANSPORT_ERRORS as e:
            raise ConnectionUnavailable("Redis did not answer PING", e) from e

    def health_check(self) -> bool:
        """Like ping(), but returns False instead of raising."""
        try:
            self.ping()
        except ConnectionUnavailable as e:
            logger.warning(f"Redis health check failed: {e}")
            return False
        return True

    def close(self) -> None:
        """Disconnect all idle connections and refuse further borrows."""
        with self._lock:
            self._closed = True
            idle = [entry.conn for entry in self._idle]
            self._idle.clear()
        for conn in idle:
            _discard(conn)


def _ping(conn: Connection) -> None:
    conn.send_command("PING")
    conn.read_response()


def _discard(conn: Connection) -> None:
    try:
        conn.disconnect()
    except TRANSPORT_ERRORS as e:
        logger.debug(f"Error closing connection: {e}")
