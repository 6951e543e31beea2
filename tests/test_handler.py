"""Tests for the stdlib logging bridge."""

import json
import logging

import pytest

from redislog.core.errors import InitConnectFailed
from redislog.core.event import Level, LogEvent
from redislog.core.logging import JSONFormatter
from redislog.handler import RedisLogHandler, install
from redislog.hook import RedisHook


@pytest.fixture
def app_logger():
    """An isolated application logger that does not reach the root logger."""
    logger = logging.getLogger("tests.app")
    original_handlers = logger.handlers.copy()
    original_level = logger.level
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    yield logger

    for handler in list(logger.handlers):
        if handler not in original_handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(original_level)
    logger.propagate = True


def attach(logger: logging.Logger, provider, **kwargs) -> RedisLogHandler:
    hook = RedisHook("localhost", 6379, kwargs.pop("key", "logs"), provider=provider, **kwargs)
    handler = RedisLogHandler(hook)
    logger.addHandler(handler)
    return handler


def test_records_with_extras_are_shipped(server, provider, app_logger):
    attach(app_logger, provider)

    app_logger.info("and with fields", extra={"animal": "walrus", "number": 1, "size": 10})

    data = json.loads(server.lists["logs"][0])
    assert data["@message"] == "and with fields"
    assert data["@fields"]["level"] == "info"
    assert data["@custom_fields"] == {"animal": "walrus", "number": "1", "size": "10"}


def test_records_below_threshold_are_skipped(server, provider, app_logger):
    attach(app_logger, provider, level=Level.WARN)

    app_logger.debug("noise")
    app_logger.info("noise")
    app_logger.warning("careful")
    app_logger.critical("on fire")

    levels = [json.loads(p)["@fields"]["level"] for p in server.lists["logs"]]
    assert levels == ["warning", "fatal"]


def test_internal_records_are_never_shipped(server, provider):
    handler = RedisLogHandler(RedisHook("localhost", 6379, "logs", provider=provider))
    record = logging.LogRecord("redislog.hook", logging.ERROR, __file__, 1, "queue full", (), None)

    handler.handle(record)

    assert server.lists["logs"] == []


def test_delivery_errors_go_to_handle_error(server, provider, app_logger, monkeypatch):
    handler = attach(app_logger, provider)
    failed: list[logging.LogRecord] = []
    monkeypatch.setattr(handler, "handleError", failed.append)
    server.up = False

    app_logger.error("lost")

    assert [r.getMessage() for r in failed] == ["lost"]


def test_async_handler_ships_from_worker(server, provider, app_logger, wait_until):
    attach(app_logger, provider, async_mode=True, format="v1")

    app_logger.warning("from a worker")

    assert wait_until(lambda: len(server.lists["logs"]) == 1)
    data = json.loads(server.lists["logs"][0])
    assert data["message"] == "from a worker"


def test_close_closes_owned_hook(server, provider):
    hook = RedisHook("localhost", 6379, "logs", provider=provider, async_mode=True)
    handler = RedisLogHandler(hook)

    handler.close()

    hook.fire(LogEvent(message="late"))
    assert hook.stats.events_dropped == 1
    assert server.lists["logs"] == []


def test_close_leaves_borrowed_hook_running(server, provider, wait_until):
    hook = RedisHook("localhost", 6379, "logs", provider=provider, async_mode=True)
    RedisLogHandler(hook, owns_hook=False).close()

    hook.fire(LogEvent(message="still running"))
    assert wait_until(lambda: len(server.lists["logs"]) == 1)
    hook.close()


def test_install_attaches_handler(server, monkeypatch, app_logger):
    from redislog.backends.pool import ConnectionProvider

    monkeypatch.setattr(
        ConnectionProvider, "for_redis", classmethod(lambda cls, *a, **kw: cls(server.dial))
    )

    handler = install(app_logger, host="localhost", port=6379, key="installed")
    app_logger.info("hello")

    assert handler in app_logger.handlers
    assert len(server.lists["installed"]) == 1


def test_install_does_not_attach_when_unreachable(server, monkeypatch, app_logger):
    from redislog.backends.pool import ConnectionProvider

    monkeypatch.setattr(
        ConnectionProvider, "for_redis", classmethod(lambda cls, *a, **kw: cls(server.dial))
    )
    server.up = False

    with pytest.raises(InitConnectFailed):
        install(app_logger, host="localhost", port=6379, key="installed")

    assert not any(isinstance(h, RedisLogHandler) for h in app_logger.handlers)


def test_json_formatter_output():
    record = logging.LogRecord("redislog.hook", logging.WARNING, __file__, 1, "queue full", (), None)
    record.key = "logs"
    record.capacity = 10

    data = json.loads(JSONFormatter().format(record))

    assert data["level"] == "WARNING"
    assert data["message"] == "queue full"
    assert data["logger"] == "redislog.hook"
    assert data["key"] == "logs"
    assert data["capacity"] == 10
    assert "timestamp" in data


def test_hook_keeps_application_diagnostics_level(server, provider):
    namespace = logging.getLogger("redislog")
    original_level = namespace.level
    namespace.setLevel(logging.ERROR)
    try:
        RedisHook("localhost", 6379, "logs", provider=provider).close()
        assert namespace.level == logging.ERROR
    finally:
        namespace.setLevel(original_level)


def test_json_formatter_includes_error_extra():
    record = logging.LogRecord("redislog.hook", logging.ERROR, __file__, 1, "send failed", (), None)
    record.error = "connection refused"

    data = json.loads(JSONFormatter().format(record))

    assert data["error"] == "connection refused"
