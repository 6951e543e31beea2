"""Redis list sink: pushes serialized envelopes with RPUSH."""

import logging

from redislog.backends.pool import TRANSPORT_ERRORS, ConnectionProvider
from redislog.core.errors import ConnectionUnavailable, SendFailed

logger = logging.getLogger("redislog.sink")


class RedisSink:
    """Appends payloads to a Redis list using a borrowed connection.

    Each delivery borrows one connection from the provider, issues a single
    ``RPUSH key payload`` and gives the connection back, whether or not the
    push succeeded.

    Args:
        provider: Connection provider to borrow from.
        key: Default destination list.
    """

    def __init__(self, provider: ConnectionProvider, key: str) -> None:
        self._provider = provider
        self.key = key

    def deliver(self, payload: bytes, key: str | None = None) -> None:
        """Push ``payload`` as one new element of the list ``key``.

        Raises:
            SendFailed: If no connection is available or the push fails.
        """
        target = key or self.key
        try:
            with self._provider.connection() as conn:
                conn.send_command("RPUSH", target, payload)
                conn.read_response()
        except (ConnectionUnavailable, *TRANSPORT_ERRORS) as e:
            raise SendFailed("error sending message to Redis", e) from e

        logger.debug(f"Pushed {len(payload)} bytes to {target}")
