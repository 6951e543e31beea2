"""RedisHook: ships log events to a Redis list, synchronously or from a worker.

In sync mode every ``fire()`` formats and pushes the event on the caller's
thread. In async mode ``fire()`` only does a non-blocking enqueue onto a
bounded DeliveryQueue; one background worker thread drains it. When the
queue is full the event is dropped and the producer is never blocked.

Shutdown is cooperative and does not drain: events still queued when
``shutdown()`` is called are discarded.
"""

import threading
from collections import deque
from dataclasses import dataclass
from typing import Any

from redislog.backends.pool import ConnectionProvider
from redislog.backends.redis_sink import RedisSink
from redislog.core.config import DEFAULT_QUEUE_CAPACITY, HookConfig
from redislog.core.envelope import build_payload
from redislog.core.errors import (
    ConnectionUnavailable,
    InitConnectFailed,
    QueueFull,
    RedisLogError,
)
from redislog.core.event import Level, LogEvent
from redislog.core.logging import configure_hook_logger


class DeliveryQueue:
    """Bounded FIFO shared by many producers and one consumer.

    ``put_nowait`` never blocks. ``get`` blocks until an item is available or
    the queue is closed; once closed, ``get`` returns None even if items
    remain.
    """

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._items: deque[LogEvent] = deque()
        self._cond = threading.Condition()
        self._closed = False

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    def put_nowait(self, item: LogEvent) -> None:
        """Append an item without blocking.

        Raises:
            QueueFull: If the queue holds ``capacity`` items.
        """
        with self._cond:
            if len(self._items) >= self._capacity:
                raise QueueFull(self._capacity)
            self._items.append(item)
            self._cond.notify()

    def get(self) -> LogEvent | None:
        """Wait for the next item; return None once the queue is closed."""
        with self._cond:
            while not self._items and not self._closed:
                self._cond.wait()
            if self._closed:
                return None
            return self._items.popleft()

    def close(self) -> bool:
        """Close the queue and wake the consumer.

        Returns:
            True if this call closed the queue, False if it was already closed.
        """
        with self._cond:
            if self._closed:
                return False
            self._closed = True
            self._cond.notify_all()
            return True


@dataclass
class HookStats:
    """Statistics for a RedisHook."""

    events_fired: int = 0
    events_delivered: int = 0
    events_dropped: int = 0
    events_failed: int = 0
    events_pending: int = 0


class RedisHook:
    """Forwards log events to a Redis list as Logstash JSON envelopes.

    Construction pings Redis once; if that fails, ``InitConnectFailed`` is
    raised and no hook is created.

    Args:
        host: Redis host.
        port: Redis port.
        key: Destination list name.
        format: ``"v0"`` or ``"v1"`` (case-insensitive); anything else means v0.
        level: Minimum severity; this level and every more severe one are enabled.
        async_mode: Deliver from a background worker thread.
        queue_capacity: Delivery queue bound in async mode.
        provider: Connection provider to use instead of dialing ``host:port``.
        **options: Further HookConfig fields (``max_idle``, ``idle_timeout``,
            ``socket_timeout``).
    """

    def __init__(
        self,
        host: str,
        port: int,
        key: str,
        format: str = "v0",
        level: Level | str | int = Level.INFO,
        async_mode: bool = False,
        queue_capacity: int = DEFAULT_QUEUE_CAPACITY,
        provider: ConnectionProvider | None = None,
        **options: Any,
    ) -> None:
        config = HookConfig(
            host=host,
            port=port,
            key=key,
            format=format,
            level=level,
            async_mode=async_mode,
            queue_capacity=queue_capacity,
            **options,
        )
        self._setup(config, provider)

    @classmethod
    def from_config(
        cls, config: HookConfig, provider: ConnectionProvider | None = None
    ) -> "RedisHook":
        """Build a hook from an existing HookConfig."""
        return cls(**config.model_dump(), provider=provider)

    def _setup(self, config: HookConfig, provider: ConnectionProvider | None) -> None:
        self._config = config
        self._log = configure_hook_logger()
        self._owns_provider = provider is None
        self._provider = provider or ConnectionProvider.for_redis(
            config.host,
            config.port,
            max_idle=config.max_idle,
            idle_timeout=config.idle_timeout,
            socket_timeout=config.socket_timeout,
        )
        self._sink = RedisSink(self._provider, config.key)
        self._stats = HookStats()
        self._stats_lock = threading.Lock()
        self._queue: DeliveryQueue | None = None
        self._worker: threading.Thread | None = None

        try:
            self._provider.ping()
        except ConnectionUnavailable as e:
            if self._owns_provider:
                self._provider.close()
            raise InitConnectFailed(
                f"unable to connect to Redis at {config.host}:{config.port}", e
            ) from e

        if config.async_mode:
            self._queue = DeliveryQueue(config.queue_capacity)
            self._worker = threading.Thread(
                target=self._run_worker,
                name=f"redislog-worker-{config.key}",
                daemon=True,
            )
            self._worker.start()

        self._log.info(
            f"Redis hook ready ({'async' if config.async_mode else 'sync'}, {config.format})",
            extra={"key": config.key, "host": config.host, "port": config.port},
        )

    @property
    def config(self) -> HookConfig:
        return self._config

    @property
    def key(self) -> str:
        return self._config.key

    @property
    def format(self) -> str:
        return self._config.format

    @property
    def level(self) -> Level:
        return self._config.level

    @property
    def async_mode(self) -> bool:
        return self._config.async_mode

    @property
    def stats(self) -> HookStats:
        """Return a snapshot of the hook's counters."""
        with self._stats_lock:
            return HookStats(
                events_fired=self._stats.events_fired,
                events_delivered=self._stats.events_delivered,
                events_dropped=self._stats.events_dropped,
                events_failed=self._stats.events_failed,
                events_pending=len(self._queue) if self._queue is not None else 0,
            )

    def _count(self, field: str) -> None:
        with self._stats_lock:
            setattr(self._stats, field, getattr(self._stats, field) + 1)

    def levels(self) -> list[Level]:
        """Return the levels this hook fires for.

        Index 0 always holds the ``Level.UNSET`` placeholder, followed by the
        configured threshold and every more severe level. An ``UNSET``
        threshold yields only the placeholder.
        """
        levels = [Level.UNSET]
        if self._config.level is Level.UNSET:
            return levels
        levels.extend(level for level in Level if level >= self._config.level)
        return levels

    def enabled_levels(self) -> frozenset[Level]:
        """Return the real severities this hook fires for (placeholder excluded)."""
        return frozenset(self.levels()[1:])

    def is_enabled(self, level: Level) -> bool:
        return level in self.enabled_levels()

    def fire(self, event: LogEvent) -> None:
        """Hand one log event to the hook.

        Sync mode delivers inline and propagates ``FormatError`` or
        ``SendFailed``. Async mode never blocks and never raises for sink
        trouble: a full queue drops the event.
        """
        self._count("events_fired")

        if self._queue is None:
            self._process(event)
            return

        if self._queue.closed:
            self._count("events_dropped")
            self._log.debug(
                "Redis hook is shut down, log event discarded", extra={"key": self.key}
            )
            return

        try:
            self._queue.put_nowait(event)
        except QueueFull as e:
            self._count("events_dropped")
            self._log.warning(
                "Buffer of redis hook's queue is full, log event discarded",
                extra={"key": self.key, "capacity": e.capacity},
            )

    def _process(self, event: LogEvent) -> None:
        """Format and deliver one event on the current thread."""
        try:
            payload = build_payload(event, self._config.format)
            self._sink.deliver(payload)
        except RedisLogError:
            self._count("events_failed")
            raise
        self._count("events_delivered")

    def _run_worker(self) -> None:
        assert self._queue is not None
        self._log.debug("Worker started", extra={"key": self.key})

        while True:
            event = self._queue.get()
            if event is None:
                break
            try:
                self._process(event)
            except RedisLogError as e:
                self._log.error(
                    f"Failed to ship log event: {e}",
                    extra={"key": self.key, "error": str(e)},
                )
            except Exception as e:
                self._count("events_failed")
                self._log.exception(
                    f"Unexpected error shipping log event: {e}",
                    extra={"key": self.key, "error": str(e)},
                )

        self._log.debug(
            "Worker stopped",
            extra={"key": self.key, "discarded": len(self._queue)},
        )

    def shutdown(self, wait: bool = False, timeout: float | None = None) -> None:
        """Ask the background worker to stop at its next wait point.

        Safe to call more than once and a no-op in sync mode. Queued events
        are not delivered.

        Args:
            wait: Block until the worker thread has exited.
            timeout: Maximum seconds to wait when ``wait`` is True.
        """
        if self._queue is None:
            return

        if self._queue.close():
            self._log.info(
                "Redis hook shutting down",
                extra={"key": self.key, "discarded": len(self._queue)},
            )

        worker = self._worker
        if wait and worker is not None and worker is not threading.current_thread():
            worker.join(timeout)

    def close(self, timeout: float | None = None) -> None:
        """Stop the worker, wait for it, and release pooled connections."""
        self.shutdown(wait=True, timeout=timeout)
        if self._owns_provider:
            self._provider.close()

    def __enter__(self) -> "RedisHook":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        mode = "async" if self.async_mode else "sync"
        return (
            f"RedisHook(host={self._config.host!r}, port={self._config.port}, "
            f"key={self.key!r}, format={self.format!r}, level={self.level.name}, mode={mode})"
        )
