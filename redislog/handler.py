"""Bridge between the stdlib ``logging`` module and RedisHook."""

import logging
from typing import Any

from redislog.core.event import Level, LogEvent
from redislog.core.logging import is_internal
from redislog.hook import RedisHook


class RedisLogHandler(logging.Handler):
    """Logging handler that fires every eligible record into a RedisHook.

    Records below the hook's level threshold and records emitted by
    redislog's own loggers are skipped. Attributes passed via ``extra={...}``
    are shipped as custom fields.

    Args:
        hook: The hook to fire events into.
        owns_hook: Close the hook when the handler is closed.
    """

    def __init__(self, hook: RedisHook, owns_hook: bool = True) -> None:
        super().__init__(level=logging.NOTSET)
        self.hook = hook
        self.owns_hook = owns_hook
        self._enabled = hook.enabled_levels()

    def filter(self, record: logging.LogRecord) -> bool:
        if is_internal(record):
            return False
        if Level.from_logging(record.levelno) not in self._enabled:
            return False
        return super().filter(record)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.hook.fire(LogEvent.from_record(record))
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        try:
            if self.owns_hook:
                self.hook.close()
        finally:
            super().close()


def install(logger: logging.Logger | None = None, **hook_kwargs: Any) -> RedisLogHandler:
    """Create a RedisHook and attach it to ``logger`` (the root logger by default).

    Raises:
        InitConnectFailed: If Redis cannot be reached; nothing is attached.
    """
    hook = RedisHook(**hook_kwargs)
    handler = RedisLogHandler(hook)
    (logger or logging.getLogger()).addHandler(handler)
    return handler
