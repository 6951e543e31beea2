"""Tests for Level and LogEvent."""

import logging
from datetime import UTC, datetime, timedelta, timezone

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from pydantic import ValidationError

from redislog.core.event import Level, LogEvent

real_levels = st.sampled_from([level for level in Level if level is not Level.UNSET])


def test_levels_are_ordered_by_severity():
    assert (
        Level.UNSET
        < Level.DEBUG
        < Level.INFO
        < Level.WARN
        < Level.ERROR
        < Level.FATAL
        < Level.PANIC
    )


def test_level_wire_names():
    assert [str(level) for level in Level] == [
        "unset",
        "debug",
        "info",
        "warning",
        "error",
        "fatal",
        "panic",
    ]


@given(level=real_levels)
@settings(max_examples=50)
def test_level_parse_accepts_wire_and_enum_names(level: Level):
    assert Level.parse(str(level)) is level
    assert Level.parse(level.name.lower()) is level
    assert Level.parse(level.name) is level


def test_level_parse_rejects_unknown_names():
    with pytest.raises(ValueError, match="not a valid level"):
        Level.parse("verbose")


@pytest.mark.parametrize(
    ("levelno", "expected"),
    [
        (logging.NOTSET, Level.DEBUG),
        (logging.DEBUG, Level.DEBUG),
        (logging.INFO, Level.INFO),
        (logging.WARNING, Level.WARN),
        (logging.ERROR, Level.ERROR),
        (logging.CRITICAL, Level.FATAL),
        (logging.CRITICAL + 10, Level.PANIC),
    ],
)
def test_level_from_logging(levelno: int, expected: Level):
    assert Level.from_logging(levelno) is expected


def test_log_event_is_frozen():
    event = LogEvent(message="hello")
    with pytest.raises(ValidationError):
        event.message = "changed"  # type: ignore[misc]


def test_log_event_defaults():
    event = LogEvent()
    assert event.level is Level.INFO
    assert event.message == ""
    assert event.fields == {}
    assert event.timestamp.tzinfo is not None


def test_log_event_naive_timestamp_is_utc():
    event = LogEvent(timestamp=datetime(2024, 1, 2, 3, 4, 5))
    assert event.timestamp == datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)


def test_log_event_keeps_aware_timestamp():
    tz = timezone(timedelta(hours=2))
    event = LogEvent(timestamp=datetime(2024, 1, 2, 3, 4, 5, tzinfo=tz))
    assert event.timestamp.utcoffset() == timedelta(hours=2)


def test_log_event_level_from_string():
    assert LogEvent(level="warning").level is Level.WARN
    assert LogEvent(level="ERROR").level is Level.ERROR


def test_log_event_rejects_unknown_attributes():
    with pytest.raises(ValidationError):
        LogEvent(message="x", colour="blue")  # type: ignore[call-arg]


def test_from_record_collects_extra_fields():
    logger = logging.getLogger("tests.event")
    record = logger.makeRecord(
        "tests.event",
        logging.WARNING,
        __file__,
        10,
        "user %s logged in",
        ("alice",),
        None,
        extra={"animal": "walrus", "number": 1},
    )

    event = LogEvent.from_record(record)

    assert event.level is Level.WARN
    assert event.message == "user alice logged in"
    assert event.fields == {"animal": "walrus", "number": 1}
    assert event.timestamp == datetime.fromtimestamp(record.created, UTC)


def test_from_record_without_extras_has_no_fields():
    record = logging.LogRecord("tests.event", logging.INFO, __file__, 1, "plain", (), None)
    assert LogEvent.from_record(record).fields == {}
