"""Display formatting for reading timestamps.

Timestamps are epoch milliseconds. Rendering uses US English calendar and
clock conventions in the given timezone (the process's local zone when
``tz`` is None).
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo

_MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def to_local(timestamp_ms: int, tz: tzinfo | None = None) -> datetime:
    """Convert epoch milliseconds to an aware datetime in ``tz`` (local if None)."""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).astimezone(tz)


def to_epoch_ms(moment: datetime) -> int:
    return int(round(moment.timestamp() * 1000))


def format_date(timestamp_ms: int, tz: tzinfo | None = None) -> str:
    """``10/19/2026``"""
    dt = to_local(timestamp_ms, tz)
    return f"{dt.month}/{dt.day}/{dt.year}"


def format_time(timestamp_ms: int, tz: tzinfo | None = None) -> str:
    """``2:05:09 PM``"""
    dt = to_local(timestamp_ms, tz)
    hour = dt.hour % 12 or 12
    return f"{hour}:{dt.minute:02d}:{dt.second:02d} {'AM' if dt.hour < 12 else 'PM'}"


def format_clock(timestamp_ms: int, tz: tzinfo | None = None) -> str:
    """Two-digit hour and minute, ``02:05 PM``."""
    dt = to_local(timestamp_ms, tz)
    hour = dt.hour % 12 or 12
    return f"{hour:02d}:{dt.minute:02d} {'AM' if dt.hour < 12 else 'PM'}"


def format_chart_label(timestamp_ms: int, tz: tzinfo | None = None) -> str:
    """Short month and day, ``Oct 19``."""
    dt = to_local(timestamp_ms, tz)
    return f"{_MONTHS[dt.month - 1]} {dt.day}"
