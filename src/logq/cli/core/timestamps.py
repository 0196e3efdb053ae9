"""Nanosecond timestamps.

The API reports event times with nanosecond resolution. ``datetime`` stops at
microseconds, so the live tail keeps every timestamp as an integer number of
nanoseconds since the Unix epoch and only converts at the edges.
"""

from __future__ import annotations

import re
import time
from datetime import datetime, timedelta, timezone
from typing import Any

# Smallest representable step between two event timestamps.
EPSILON_NS = 1

NANOS_PER_SECOND = 1_000_000_000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_RFC3339_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d{1,9}))?"
    r"(?P<tz>[Zz]|[+-]\d{2}:\d{2})?$"
)


def now_ns() -> int:
    return time.time_ns()


def parse_timestamp(value: Any) -> int:
    """Convert an API timestamp into nanoseconds since the epoch.

    Accepts RFC 3339 strings with up to nine fractional digits, ``datetime``
    objects (naive values are taken as UTC) and integers that are already
    nanoseconds.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid timestamp: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return (value - _EPOCH) // timedelta(microseconds=1) * 1000
    if not isinstance(value, str):
        raise ValueError(f"Invalid timestamp: {value!r}")

    match = _RFC3339_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid timestamp: {value!r}")

    base = match.group("base").replace("t", "T").replace(" ", "T")
    tz = match.group("tz")
    if tz is None or tz in ("Z", "z"):
        tz = "+00:00"
    dt = datetime.fromisoformat(base + tz)
    seconds = (dt - _EPOCH) // timedelta(seconds=1)
    frac = (match.group("frac") or "").ljust(9, "0")
    return seconds * NANOS_PER_SECOND + int(frac)


def _split(ns: int) -> tuple[datetime, int]:
    seconds, nanos = divmod(ns, NANOS_PER_SECOND)
    return _EPOCH + timedelta(seconds=seconds), nanos


def format_rfc3339(ns: int) -> str:
    """Format as RFC 3339 in UTC with all nine fractional digits."""
    dt, nanos = _split(ns)
    return f"{dt:%Y-%m-%dT%H:%M:%S}.{nanos:09d}Z"


def format_human(ns: int) -> str:
    """Format as RFC 1123 in UTC, e.g. ``Mon, 02 Jan 2006 15:04:05 UTC``."""
    dt, _ = _split(ns)
    return dt.strftime("%a, %d %b %Y %H:%M:%S UTC")


__all__ = [
    "EPSILON_NS",
    "NANOS_PER_SECOND",
    "format_human",
    "format_rfc3339",
    "now_ns",
    "parse_timestamp",
]
