"""Calendar arithmetic — pure helpers, no I/O.

Dates are integers encoding YYYYMMDD. Times of day and durations are
fractional hours. Every interval comparison goes through absolute instants
(naive datetimes) so a task is placed identically however its date and start
time were split.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta

from src.core.errors import InvalidTaskError

MAX_HOURS = 23.75
_QUARTER_HOUR = 0.25


def date_to_int(year: int, month: int, day: int) -> int:
    """Encode a (year, month, day) triple as YYYYMMDD."""
    return year * 10000 + month * 100 + day


def int_to_date(value: int) -> date:
    """Decode YYYYMMDD into a date.

    Raises InvalidTaskError when the integer does not name a real calendar
    day. The decoded components are re-encoded and compared, so nothing is
    silently clamped.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidTaskError(f"bad date: {value!r}")
    year, month, day = value // 10000, (value // 100) % 100, value % 100
    try:
        decoded = date(year, month, day)
    except ValueError as exc:
        raise InvalidTaskError(f"bad date: {value}") from exc
    if date_to_int(decoded.year, decoded.month, decoded.day) != value:
        raise InvalidTaskError(f"bad date: {value}")
    return decoded


def date_int_to_string(value: int) -> str:
    """Render YYYYMMDD as YYYY-MM-DD."""
    return f"{value // 10000:04d}-{(value // 100) % 100:02d}-{value % 100:02d}"


def to_instant(date_value: int, hours: float = 0.0) -> datetime:
    """Absolute instant of a date plus a fractional-hour offset."""
    day = int_to_date(date_value)
    try:
        return datetime(day.year, day.month, day.day) + timedelta(hours=hours)
    except OverflowError as exc:
        raise InvalidTaskError(f"date out of range: {date_value} + {hours:g}h") from exc


def hours_between(first: datetime, second: datetime) -> float:
    """Absolute distance between two instants, in hours."""
    return abs((first - second).total_seconds()) / 3600


def days_between(start: int, end: int) -> int:
    """Whole days from `start` to `end` (negative when end is earlier)."""
    return (int_to_date(end) - int_to_date(start)).days


def add_days(date_value: int, days: int) -> int:
    try:
        shifted = int_to_date(date_value) + timedelta(days=days)
    except OverflowError as exc:
        raise InvalidTaskError(f"date out of range: {date_value} + {days} days") from exc
    return date_to_int(shifted.year, shifted.month, shifted.day)


def iso_week(date_value: int) -> int:
    return int_to_date(date_value).isocalendar()[1]


def intervals_overlap(
    start_a: datetime, duration_a: float, start_b: datetime, duration_b: float
) -> bool:
    """Strict overlap of two intervals given by start instant and hours.

    The interval starting first must still be running when the other one
    starts; touching endpoints do not count. On equal starts the longer
    duration decides, which keeps the predicate symmetric.
    """
    delta = hours_between(start_a, start_b)
    if start_a < start_b:
        earlier_duration = duration_a
    elif start_b < start_a:
        earlier_duration = duration_b
    else:
        earlier_duration = max(duration_a, duration_b)
    return delta < earlier_duration


def round_to_quarter_hour(hours: float) -> float:
    """Round to the nearest 0.25 hour, halves rounding up (0.125 -> 0.25)."""
    return math.floor(hours / _QUARTER_HOUR + 0.5) * _QUARTER_HOUR


def hours_to_clock(hours: float) -> str:
    """Render fractional hours as HH:MM (19.25 -> "19:15")."""
    minutes = round(hours * 60)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
