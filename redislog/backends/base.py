"""Connection protocol used by the pool and the sink.

``redis.Connection`` satisfies this protocol; tests supply in-memory doubles.
"""

from typing import Any, Protocol


class Connection(Protocol):
    """A single, non-shared connection to a Redis server."""

    def connect(self) -> None:
        """Open the underlying socket."""
        ...

    def disconnect(self) -> None:
        """Close the underlying socket."""
        ...

    def send_command(self, *args: Any) -> None:
        """Send one command (e.g. ``"RPUSH", key, value``) to the server."""
        ...

    def read_response(self) -> Any:
        """Read and return the reply to the last command sent."""
        ...
