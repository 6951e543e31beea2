"""Logstash envelope formats.

Two mutually exclusive shapes are supported:

- ``v0``: ``@timestamp``, ``@source_host``, ``@message``, ``@level``
- ``v1``: ``@timestamp``, ``host``, ``message``

Both carry an ``@fields`` block and an ``@custom_fields`` string map. The
``@type`` key exists in both shapes but is never set, so it is omitted.
"""

import re
import socket
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from redislog.core.errors import FormatError
from redislog.core.event import LogEvent

FORMAT_V0 = "v0"
FORMAT_V1 = "v1"
SUPPORTED_FORMATS = frozenset({FORMAT_V0, FORMAT_V1})

# Lone surrogates cannot be encoded as UTF-8
_SURROGATES = re.compile("[\ud800-\udfff]")


class EnvelopeFields(BaseModel):
    """The nested ``@fields`` block. Only ``level`` is ever populated."""

    file: str = ""
    level: str = ""
    timestamp: str = ""


class _Envelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: str | None = Field(default=None, alias="@type")
    timestamp: str = Field(alias="@timestamp")
    fields: EnvelopeFields = Field(default_factory=EnvelopeFields, alias="@fields")
    custom_fields: dict[str, str] = Field(default_factory=dict, alias="@custom_fields")


class EnvelopeV0(_Envelope):
    source_host: str = Field(alias="@source_host")
    message: str = Field(alias="@message")
    level: str = Field(default="", alias="@level")


class EnvelopeV1(_Envelope):
    source_host: str = Field(alias="host")
    message: str = Field(alias="message")


Envelope = EnvelopeV0 | EnvelopeV1


def normalize_format(name: str | None) -> str:
    """Lowercase a format name, falling back to v0 for anything unrecognized."""
    if name is None:
        return FORMAT_V0
    lowered = name.lower()
    if lowered not in SUPPORTED_FORMATS:
        return FORMAT_V0
    return lowered


def report_hostname() -> str:
    """Return this machine's hostname, or ``"unknown"`` if it cannot be read."""
    try:
        hostname = socket.gethostname()
    except OSError:
        return "unknown"
    return hostname or "unknown"


def rfc3339_nano(ts: datetime) -> str:
    """Format a datetime as an RFC3339 UTC timestamp with trimmed fractional seconds.

    ``2024-01-02T03:04:05.5Z``, ``2024-01-02T03:04:05Z``
    """
    ts = ts.astimezone(UTC)
    base = ts.strftime("%Y-%m-%dT%H:%M:%S")
    if ts.microsecond:
        base += "." + f"{ts.microsecond:06d}".rstrip("0")
    return base + "Z"


def scrub(text: str) -> str:
    """Replace lone surrogates with U+FFFD so the text encodes as UTF-8."""
    return _SURROGATES.sub("\ufffd", text)


def custom_fields(event: LogEvent) -> dict[str, str]:
    """Stringify an event's custom fields. Strings are copied verbatim.

    Raises:
        FormatError: If a value's ``__str__`` raises.
    """
    result: dict[str, str] = {}
    for key, value in event.fields.items():
        if isinstance(value, str):
            text = value
        else:
            try:
                text = str(value)
            except Exception as e:
                raise FormatError(f"cannot render custom field {key!r}", e) from e
        result[scrub(key)] = scrub(text)
    return result


def format_event(event: LogEvent, version: str = FORMAT_V0) -> Envelope:
    """Convert a LogEvent into the envelope shape selected by ``version``."""
    fmt = normalize_format(version)
    common = {
        "timestamp": rfc3339_nano(event.timestamp),
        "source_host": report_hostname(),
        "message": scrub(event.message),
        "fields": EnvelopeFields(level=str(event.level)),
        "custom_fields": custom_fields(event),
    }
    if fmt == FORMAT_V1:
        return EnvelopeV1(**common)
    return EnvelopeV0(**common)


def serialize(envelope: Envelope) -> bytes:
    """Serialize an envelope to compact JSON bytes.

    Raises:
        FormatError: If the envelope cannot be encoded.
    """
    try:
        return envelope.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise FormatError("error creating message for Redis", e) from e


def build_payload(event: LogEvent, version: str = FORMAT_V0) -> bytes:
    """Format and serialize an event in one step."""
    try:
        envelope = format_event(event, version)
    except (TypeError, ValueError) as e:
        raise FormatError("error creating message for Redis", e) from e
    return serialize(envelope)
