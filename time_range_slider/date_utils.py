"""Calendar arithmetic for the time-range slider.

Purpose
-------
Pure helpers that compute unit boundaries, snap instants to the nearest
boundary, convert between instants and millisecond offsets, and format
human-readable labels per unit.

Concepts
--------
All instants are naive :class:`datetime.datetime` values interpreted as local
wall-clock time. Millisecond offsets are measured from a naive epoch, so no
timezone or DST conversion is ever involved.

End boundaries are inclusive of the last millisecond of the unit, e.g. the
end of a year is ``Dec 31, 23:59:59.999``.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Callable, Literal, Optional, Union

Unit = Literal[
    "decade", "year", "month", "day", "hour", "minute", "second", "decisecond"
]

UNITS: tuple[Unit, ...] = (
    "decade",
    "year",
    "month",
    "day",
    "hour",
    "minute",
    "second",
    "decisecond",
)

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR
MS_PER_YEAR = 365.25 * MS_PER_DAY

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

EPOCH = datetime(1970, 1, 1)
_ONE_MS = timedelta(milliseconds=1)
_LAST_US = 999_000

InstantLike = Union[datetime, date, str]


# ---------------------------------------------------------------------------
# Millisecond conversion
# ---------------------------------------------------------------------------

def to_ms(value: datetime) -> int:
    """Return ``value`` as whole milliseconds since the naive epoch."""
    return (value - EPOCH) // _ONE_MS


def from_ms(ms: float) -> datetime:
    """Return the instant ``ms`` milliseconds after the naive epoch.

    Fractional milliseconds are rounded to the nearest whole millisecond.
    """
    return EPOCH + timedelta(milliseconds=round(ms))


def span_ms(start: datetime, end: datetime) -> int:
    """Return the width of ``[start, end]`` in milliseconds."""
    return to_ms(end) - to_ms(start)


def parse_instant(value: InstantLike) -> datetime:
    """Coerce ``value`` to a naive local :class:`datetime`.

    Parameters
    ----------
    value : datetime, date or str
        A datetime, a calendar date (read as midnight) or an ISO-8601 string.
        Aware datetimes are converted to local wall-clock time. Sub-millisecond
        precision is truncated.

    Raises
    ------
    TypeError
        If ``value`` is none of the supported types.
    ValueError
        If a string is not valid ISO-8601.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone().replace(tzinfo=None)
        # whole milliseconds, the resolution of every offset computed from it
        return value.replace(microsecond=value.microsecond // 1000 * 1000)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raise TypeError(f"Cannot interpret {value!r} as an instant.")


# ---------------------------------------------------------------------------
# Calendar stepping
# ---------------------------------------------------------------------------

def add_months(value: datetime, months: int) -> datetime:
    """Return the first day of the month ``months`` after ``value``'s month."""
    index = value.year * 12 + (value.month - 1) + months
    return datetime(index // 12, index % 12 + 1, 1)


def months_between(start: datetime, end: datetime) -> int:
    """Return the number of calendar month boundaries between two instants."""
    return (end.year - start.year) * 12 + (end.month - start.month)


# ---------------------------------------------------------------------------
# Unit boundaries
# ---------------------------------------------------------------------------

def start_of_decade(value: datetime) -> datetime:
    return datetime((value.year // 10) * 10, 1, 1)


def end_of_decade(value: datetime) -> datetime:
    return datetime((value.year // 10) * 10 + 9, 12, 31, 23, 59, 59, _LAST_US)


def start_of_year(value: datetime) -> datetime:
    return datetime(value.year, 1, 1)


def end_of_year(value: datetime) -> datetime:
    return datetime(value.year, 12, 31, 23, 59, 59, _LAST_US)


def start_of_month(value: datetime) -> datetime:
    return datetime(value.year, value.month, 1)


def end_of_month(value: datetime) -> datetime:
    last = calendar.monthrange(value.year, value.month)[1]
    return datetime(value.year, value.month, last, 23, 59, 59, _LAST_US)


def start_of_day(value: datetime) -> datetime:
    return datetime(value.year, value.month, value.day)


def end_of_day(value: datetime) -> datetime:
    return datetime(value.year, value.month, value.day, 23, 59, 59, _LAST_US)


def start_of_hour(value: datetime) -> datetime:
    return value.replace(minute=0, second=0, microsecond=0)


def end_of_hour(value: datetime) -> datetime:
    return value.replace(minute=59, second=59, microsecond=_LAST_US)


def start_of_minute(value: datetime) -> datetime:
    return value.replace(second=0, microsecond=0)


def end_of_minute(value: datetime) -> datetime:
    return value.replace(second=59, microsecond=_LAST_US)


def start_of_second(value: datetime) -> datetime:
    return value.replace(microsecond=0)


def end_of_second(value: datetime) -> datetime:
    return value.replace(microsecond=_LAST_US)


def start_of_decisecond(value: datetime) -> datetime:
    return value.replace(microsecond=(value.microsecond // 100_000) * 100_000)


def end_of_decisecond(value: datetime) -> datetime:
    return value.replace(microsecond=(value.microsecond // 100_000) * 100_000 + 99_000)


_STARTS: dict[str, Callable[[datetime], datetime]] = {
    "decade": start_of_decade,
    "year": start_of_year,
    "month": start_of_month,
    "day": start_of_day,
    "hour": start_of_hour,
    "minute": start_of_minute,
    "second": start_of_second,
    "decisecond": start_of_decisecond,
}

_ENDS: dict[str, Callable[[datetime], datetime]] = {
    "decade": end_of_decade,
    "year": end_of_year,
    "month": end_of_month,
    "day": end_of_day,
    "hour": end_of_hour,
    "minute": end_of_minute,
    "second": end_of_second,
    "decisecond": end_of_decisecond,
}


def start_of(unit: Unit, value: datetime) -> datetime:
    """Return the first instant of the ``unit`` containing ``value``."""
    try:
        return _STARTS[unit](value)
    except KeyError:
        raise ValueError(f"Unknown calendar unit: {unit!r}") from None


def end_of(unit: Unit, value: datetime) -> datetime:
    """Return the last millisecond of the ``unit`` containing ``value``."""
    try:
        return _ENDS[unit](value)
    except KeyError:
        raise ValueError(f"Unknown calendar unit: {unit!r}") from None


_STEPS: dict[str, Callable[[datetime], datetime]] = {
    "decade": lambda start: datetime(start.year + 10, 1, 1),
    "year": lambda start: datetime(start.year + 1, 1, 1),
    "month": lambda start: add_months(start, 1),
    "day": lambda start: start + timedelta(days=1),
    "hour": lambda start: start + timedelta(hours=1),
    "minute": lambda start: start + timedelta(minutes=1),
    "second": lambda start: start + timedelta(seconds=1),
    "decisecond": lambda start: start + timedelta(milliseconds=100),
}


def next_start(unit: Unit, value: datetime) -> Optional[datetime]:
    """Return the first instant of the ``unit`` following the one containing ``value``.

    Returns ``None`` when that instant lies beyond ``datetime.max``.
    """
    start = start_of(unit, value)
    try:
        return _STEPS[unit](start)
    except (OverflowError, ValueError):
        return None


# ---------------------------------------------------------------------------
# Nearest-boundary snapping (midpoint rule, ties round up)
# ---------------------------------------------------------------------------

def _nearest(unit: Unit, value: datetime, round_up: bool) -> datetime:
    start = start_of(unit, value)
    if round_up:
        # the last unit before datetime.max has no following boundary
        following = next_start(unit, start)
        if following is not None:
            return following
    return start


def snap_to_decade(value: datetime) -> datetime:
    return _nearest("decade", value, value.year % 10 >= 5)


def snap_to_year(value: datetime) -> datetime:
    return _nearest("year", value, value.month >= 7)


def snap_to_month(value: datetime) -> datetime:
    return _nearest("month", value, value.day >= 16)


def snap_to_day(value: datetime) -> datetime:
    return _nearest("day", value, value.hour >= 12)


def snap_to_hour(value: datetime) -> datetime:
    return _nearest("hour", value, value.minute >= 30)


def snap_to_minute(value: datetime) -> datetime:
    return _nearest("minute", value, value.second >= 30)


def snap_to_second(value: datetime) -> datetime:
    return _nearest("second", value, value.microsecond >= 500_000)


def snap_to_decisecond(value: datetime) -> datetime:
    return _nearest("decisecond", value, value.microsecond % 100_000 >= 50_000)


_SNAPS: dict[str, Callable[[datetime], datetime]] = {
    "decade": snap_to_decade,
    "year": snap_to_year,
    "month": snap_to_month,
    "day": snap_to_day,
    "hour": snap_to_hour,
    "minute": snap_to_minute,
    "second": snap_to_second,
    "decisecond": snap_to_decisecond,
}


def snap_to(unit: Unit, value: datetime) -> datetime:
    """Round ``value`` to the nearest ``unit`` boundary.

    The midpoint rounds up: day 16 rounds a month up, hour 12 rounds a day up,
    minute 30 rounds an hour up.
    """
    try:
        return _SNAPS[unit](value)
    except KeyError:
        raise ValueError(f"Unknown calendar unit: {unit!r}") from None


def clamp_date(value: datetime, lower: datetime, upper: datetime) -> datetime:
    """Return ``value`` bounded to ``[lower, upper]`` as a fresh instant."""
    if value < lower:
        return lower.replace()
    if value > upper:
        return upper.replace()
    return value.replace()


# ---------------------------------------------------------------------------
# Label formatting
# ---------------------------------------------------------------------------

def _month_name(value: datetime) -> str:
    return MONTH_ABBREVIATIONS[value.month - 1]


def _hm(value: datetime) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def _hms(value: datetime) -> str:
    return f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"


def format_decade(value: datetime) -> str:
    return f"{(value.year // 10) * 10}s"


def format_year(value: datetime) -> str:
    return str(value.year)


def format_month(value: datetime) -> str:
    return f"{_month_name(value)} {value.year}"


def format_day(value: datetime) -> str:
    return f"{_month_name(value)} {value.day}"


def format_minute(value: datetime) -> str:
    return _hm(value)


def format_decisecond(value: datetime) -> str:
    return f"{_hms(value)}.{value.microsecond // 100_000}"


# Thumb labels carry enough context to read on their own; tick labels are terse
# because neighbouring ticks supply the context.

def format_year_thumb(value: datetime) -> str:
    return str(value.year)


def format_year_tick(value: datetime) -> str:
    return str(value.year)


def format_month_thumb(value: datetime) -> str:
    return f"{_month_name(value)} {value.year}"


def format_month_tick(value: datetime) -> str:
    """Bare month name, except January which shows the year it opens."""
    if value.month == 1:
        return str(value.year)
    return _month_name(value)


def format_day_thumb(value: datetime) -> str:
    return f"{_month_name(value)} {value.day}, {value.year}"


def format_day_tick(value: datetime) -> str:
    return f"{_month_name(value)} {value.day}"


def format_hour_thumb(value: datetime) -> str:
    return f"{_month_name(value)} {value.day}, {_hm(value)}"


def format_hour_tick(value: datetime) -> str:
    return _hm(value)


def format_minute_thumb(value: datetime) -> str:
    return f"{_month_name(value)} {value.day}, {_hm(value)}"


def format_minute_tick(value: datetime) -> str:
    return _hm(value)


def format_second_thumb(value: datetime) -> str:
    return f"{_month_name(value)} {value.day}, {_hms(value)}"


def format_second_tick(value: datetime) -> str:
    return _hms(value)
