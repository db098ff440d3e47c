"""Parse report timestamps emitted by the surf-report backend.

Over its history the backend has appended different payloads after the actual
date/time: a Go runtime marker (``" UTC m=+48.10"``), a UUID or an email
address (``" UTC_<suffix>"``). Newer records carry a bare
``YYYY-MM-DD HH:MM:SS`` in UTC. Anything else is reported as unparseable.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone

RUNTIME_MARKER = " UTC m="
SUFFIX_MARKER = " UTC_"
DEFAULT_DISPLAY_FORMAT = "%-d %b, %-I:%M%p"
DEFAULT_FALLBACK = "Unknown time"

_PLAIN_UTC = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}")
_DATE_TIME_PREFIX = re.compile(r"\d{4}-\d{2}-\d{2}[ T]\d{2}:\d{2}:\d{2}")
_ZERO_OFFSET = re.compile(r"\s*\+0000$")
_FRACTION = re.compile(r"\.\d*")
_FIXED_FORMATS = (
    "%Y-%m-%d %H:%M:%S.%f%z",
    "%Y-%m-%d %H:%M:%S.%f %z",
    "%Y-%m-%d %H:%M:%S%z",
    "%Y-%m-%d %H:%M:%S %z",
)


@dataclass(frozen=True)
class ParsedTimestamp:
    raw: str
    instant: datetime | None = None

    @property
    def ok(self) -> bool:
        return self.instant is not None


def isolate_timestamp(raw: str) -> str | None:
    """Return the date/time portion of ``raw``, or None when no known layout matches."""
    for marker in (RUNTIME_MARKER, SUFFIX_MARKER):
        if marker in raw:
            return raw.split(marker, 1)[0]
    if _PLAIN_UTC.fullmatch(raw):
        return raw
    return None


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _try_formats(text: str) -> datetime | None:
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in _FIXED_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def parse_reported_timestamp(raw: str) -> ParsedTimestamp:
    if not isinstance(raw, str):
        return ParsedTimestamp(raw=str(raw))
    isolated = isolate_timestamp(raw)
    if isolated is None or not _DATE_TIME_PREFIX.match(isolated):
        return ParsedTimestamp(raw=raw)

    normalized = _ZERO_OFFSET.sub("Z", isolated)
    parsed = _try_formats(normalized)
    if parsed is None and "." in normalized:
        parsed = _try_formats(_FRACTION.sub("", normalized, count=1))
    if parsed is None:
        return ParsedTimestamp(raw=raw)
    return ParsedTimestamp(raw=raw, instant=_as_utc(parsed))


def parse_timestamp(raw: str) -> datetime | None:
    return parse_reported_timestamp(raw).instant


def format_report_time(instant: datetime, fmt: str = DEFAULT_DISPLAY_FORMAT) -> str:
    # %-d / %-I are glibc extensions; fall back to zero-padded on platforms without them.
    try:
        return instant.strftime(fmt)
    except ValueError:
        return instant.strftime(fmt.replace("%-", "%"))


def describe_report_time(
    raw: str,
    fmt: str = DEFAULT_DISPLAY_FORMAT,
    fallback: str = DEFAULT_FALLBACK,
) -> str:
    instant = parse_timestamp(raw)
    if instant is None:
        return fallback
    return format_report_time(instant, fmt)
