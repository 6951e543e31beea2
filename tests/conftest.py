"""Pytest configuration, Hypothesis profiles and in-memory Redis doubles."""

import threading
import time
from collections import defaultdict
from collections.abc import Callable

import pytest
import redis
from hypothesis import settings

from redislog.backends.pool import ConnectionProvider

# Register Hypothesis profiles
settings.register_profile("ci", max_examples=100)
settings.register_profile("dev", max_examples=20)

# Load dev profile by default, CI can override via --hypothesis-profile=ci
settings.load_profile("dev")


class FakeServer:
    """Minimal stand-in for a Redis server: PING and RPUSH only."""

    def __init__(self) -> None:
        self.lists: dict[str, list[bytes]] = defaultdict(list)
        self.up = True
        self.fail_push = False
        self.dials = 0
        self.connections: list["FakeConnection"] = []
        # Cleared to make RPUSH block until set again
        self.push_gate = threading.Event()
        self.push_gate.set()
        self.push_started = threading.Event()
        self._lock = threading.Lock()

    def dial(self) -> "FakeConnection":
        if not self.up:
            raise redis.ConnectionError("Error 111 connecting to localhost:6379. Connection refused.")
        conn = FakeConnection(self)
        with self._lock:
            self.dials += 1
            self.connections.append(conn)
        return conn

    def push(self, key: str, value: bytes) -> int:
        self.push_started.set()
        self.push_gate.wait()
        if self.fail_push:
            raise redis.ConnectionError("Error 32 while writing to socket. Broken pipe.")
        with self._lock:
            self.lists[key].append(value)
            return len(self.lists[key])


class FakeConnection:
    """In-memory connection satisfying the redislog Connection protocol."""

    def __init__(self, server: FakeServer) -> None:
        self.server = server
        self.connected = True
        self.commands: list[tuple] = []
        self._reply: object = None

    def connect(self) -> None:
        self.connected = True

    def disconnect(self) -> None:
        self.connected = False

    def send_command(self, *args: object) -> None:
        if not self.server.up or not self.connected:
            raise redis.ConnectionError("Connection closed by server.")
        self.commands.append(args)
        name = args[0]
        if name == "PING":
            self._reply = b"PONG"
        elif name == "RPUSH":
            self._reply = self.server.push(args[1], args[2])
        else:
            raise redis.ResponseError(f"unknown command '{name}'")

    def read_response(self) -> object:
        return self._reply


@pytest.fixture
def server() -> FakeServer:
    srv = FakeServer()
    yield srv
    # Never leave a worker blocked on the gate
    srv.push_gate.set()


@pytest.fixture
def provider(server: FakeServer) -> ConnectionProvider:
    return ConnectionProvider(server.dial)


@pytest.fixture
def wait_until() -> Callable[..., bool]:
    """Poll a predicate until it holds or the timeout expires."""

    def _wait(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(0.005)
        return predicate()

    return _wait
