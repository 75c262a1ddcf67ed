"""Duration strings in the "15m" / "7d" / "24h" notation used by the auth settings.

Bare numbers are milliseconds. Supported units: ms, s, m, h, d, w, y
(plus their long spellings such as "minutes" or "days").
"""

import re
from datetime import timedelta

_UNIT_MS = {
    "ms": 1,
    "msec": 1,
    "msecs": 1,
    "millisecond": 1,
    "milliseconds": 1,
    "s": 1000,
    "sec": 1000,
    "secs": 1000,
    "second": 1000,
    "seconds": 1000,
    "m": 60 * 1000,
    "min": 60 * 1000,
    "mins": 60 * 1000,
    "minute": 60 * 1000,
    "minutes": 60 * 1000,
    "h": 60 * 60 * 1000,
    "hr": 60 * 60 * 1000,
    "hrs": 60 * 60 * 1000,
    "hour": 60 * 60 * 1000,
    "hours": 60 * 60 * 1000,
    "d": 24 * 60 * 60 * 1000,
    "day": 24 * 60 * 60 * 1000,
    "days": 24 * 60 * 60 * 1000,
    "w": 7 * 24 * 60 * 60 * 1000,
    "week": 7 * 24 * 60 * 60 * 1000,
    "weeks": 7 * 24 * 60 * 60 * 1000,
    "y": 365.25 * 24 * 60 * 60 * 1000,
    "yr": 365.25 * 24 * 60 * 60 * 1000,
    "yrs": 365.25 * 24 * 60 * 60 * 1000,
    "year": 365.25 * 24 * 60 * 60 * 1000,
    "years": 365.25 * 24 * 60 * 60 * 1000,
}

_DURATION_RE = re.compile(r"^\s*(-?\d*\.?\d+)\s*([a-zA-Z]*)\s*$")

# Largest unit first, used when formatting
_FORMAT_UNITS = [("d", 86400000), ("h", 3600000), ("m", 60000), ("s", 1000)]


def parse_duration(value) -> timedelta:
    """Convert a duration such as "15m" or 3600000 into a timedelta.

    Raises:
        ValueError: if the value cannot be parsed
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return timedelta(milliseconds=value)
    if not isinstance(value, str):
        raise ValueError(f"Invalid duration: {value!r}")

    match = _DURATION_RE.match(value)
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")

    amount, unit = match.groups()
    unit = (unit or "ms").lower()
    if unit not in _UNIT_MS:
        raise ValueError(f"Unknown duration unit '{unit}' in {value!r}")
    return timedelta(milliseconds=float(amount) * _UNIT_MS[unit])


def format_duration(delta: timedelta) -> str:
    """Short human form of a duration ("23h", "5m", "12s", "250ms")."""
    total_ms = delta.total_seconds() * 1000
    magnitude = abs(total_ms)
    for suffix, unit_ms in _FORMAT_UNITS:
        if magnitude >= unit_ms:
            return f"{round(total_ms / unit_ms)}{suffix}"
    return f"{round(total_ms)}ms"
