"""Exception hierarchy for redislog.

Every error raised by the hook wraps the exception that caused it, both as
``__cause__`` and as the ``original`` attribute, so callers can inspect the
transport failure without unwrapping chains.
"""


class RedisLogError(Exception):
    """Base class for all redislog errors."""

    def __init__(self, message: str, original: Exception | None = None):
        self.original = original
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if self.original is not None:
            return f"{base}: {self.original}"
        return base


class ConnectionUnavailable(RedisLogError):
    """Raised when the connection provider cannot hand out a live connection."""


class InitConnectFailed(RedisLogError):
    """Raised when the hook cannot reach Redis at construction time.

    The hook is not created; callers should not register it.
    """


class FormatError(RedisLogError):
    """Raised when a log event cannot be serialized into an envelope."""


class SendFailed(RedisLogError):
    """Raised when pushing a payload to Redis fails."""


class QueueFull(RedisLogError):
    """Raised by the delivery queue when it is at capacity.

    The hook never propagates this to producers: the event is dropped and a
    diagnostic is written to the operator log instead.
    """

    def __init__(self, capacity: int):
        self.capacity = capacity
        super().__init__(f"Queue full (capacity={capacity}), log event discarded")
