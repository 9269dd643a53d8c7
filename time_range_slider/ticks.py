"""Tick-mark generation for the adaptive slider track.

Ticks come in two kinds:

- **major** ticks sit on boundaries of the parent unit one level coarser than
  the displayed level (month starts at ``days`` level, midnights at ``hours``
  level, ...). They are kept out of the outer 2% of the track.
- **minor** ticks sit on regular boundaries of the displayed level, thinned to
  roughly ``MAX_MINOR_TICKS`` with a whole-unit step.

A minor tick that falls on a shown major tick is dropped, so no two ticks
ever share an instant. A major hidden near the edge leaves its minor in place.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from . import date_utils as du
from .date_utils import MS_PER_DAY, MS_PER_HOUR, MS_PER_MINUTE, MS_PER_SECOND
from .granularity import ADAPTIVE_CONFIGS

MAX_MINOR_TICKS = 7
EDGE_GUARD = 0.02


@dataclass(frozen=True)
class Tick:
    """One tick descriptor.

    Parameters
    ----------
    position : float
        Offset along the track as a percentage in ``[0, 100]``.
    label : str
        Text formatted at the displayed level.
    major : bool
        Whether the tick marks a parent-unit boundary.
    major_label : str or None
        Parent-unit label for major ticks.
    """

    position: float
    label: str
    major: bool = False
    major_label: Optional[str] = None

    def as_dict(self) -> dict:
        """Return a JSON-friendly mapping (``major_label`` only when set)."""
        out = {"position": self.position, "label": self.label, "major": self.major}
        if self.major_label is not None:
            out["major_label"] = self.major_label
        return out


# Parent unit stepping and formatter per displayed level. ``years`` has no parent.
_MAJOR_PARENTS: dict[str, tuple[du.Unit, Callable[[datetime], str]]] = {
    "months": ("year", du.format_year_tick),
    "days": ("month", du.format_month_tick),
    "hours": ("day", du.format_day_tick),
    "minutes": ("hour", du.format_hour_tick),
    "seconds": ("minute", du.format_minute_tick),
}


def _advance(step: Callable[[datetime], datetime], current: datetime) -> Optional[datetime]:
    """Apply ``step``, or return ``None`` once it would pass ``datetime.max``."""
    try:
        return step(current)
    except (OverflowError, ValueError):
        return None


def _walk(first: datetime, end: datetime, step: Callable[[datetime], datetime]) -> list[datetime]:
    dates: list[datetime] = []
    current: Optional[datetime] = first
    while current is not None and current <= end:
        dates.append(current)
        current = _advance(step, current)
    return dates


def major_tick_dates(start: datetime, end: datetime, level: str) -> list[datetime]:
    """Return parent-unit boundaries strictly after ``start`` and up to ``end``."""
    parent = _MAJOR_PARENTS.get(level)
    if parent is None:
        return []
    unit = parent[0]
    dates: list[datetime] = []
    current = du.next_start(unit, start)
    while current is not None and current <= end:
        dates.append(current)
        current = du.next_start(unit, current)
    return dates


def major_tick_label(value: datetime, level: str) -> str:
    """Format ``value`` with the parent unit's tick formatter."""
    parent = _MAJOR_PARENTS.get(level)
    return parent[1](value) if parent is not None else ""


def _step(units: float) -> int:
    return max(1, math.ceil(units / MAX_MINOR_TICKS))


def _fixed_steps(start: datetime, end: datetime, unit: du.Unit, unit_ms: int) -> list[datetime]:
    step = _step(math.ceil(du.span_ms(start, end) / unit_ms))
    delta = timedelta(milliseconds=step * unit_ms)
    return _walk(du.start_of(unit, start), end, lambda current: current + delta)


def minor_tick_dates(start: datetime, end: datetime, level: str) -> list[datetime]:
    """Return regular boundaries of ``level`` covering ``[start, end]``.

    Years, months and days step in calendar increments; hours, minutes and
    seconds step in fixed milliseconds. The first date may precede ``start``;
    callers filter by position.
    """
    if level == "years":
        step = _step(end.year - start.year)
        first = math.ceil(start.year / step) * step
        return [datetime(year, 1, 1) for year in range(first, end.year + 1, step)]

    if level == "months":
        step = _step(du.months_between(start, end))
        return _walk(du.start_of_month(start), end, lambda current: du.add_months(current, step))

    if level == "days":
        delta = timedelta(days=_step(math.ceil(du.span_ms(start, end) / MS_PER_DAY)))
        return _walk(du.start_of_day(start), end, lambda current: current + delta)

    if level == "hours":
        return _fixed_steps(start, end, "hour", MS_PER_HOUR)
    if level == "minutes":
        return _fixed_steps(start, end, "minute", MS_PER_MINUTE)
    if level == "seconds":
        return _fixed_steps(start, end, "second", MS_PER_SECOND)
    raise ValueError(f"Unknown adaptive granularity level: {level!r}")


def generate_ticks(
    range_start: datetime,
    range_end: datetime,
    level: str,
    extent_start: datetime,
    extent_end: datetime,
) -> list[Tick]:
    """Build the tick list for ``[range_start, range_end]`` drawn on an extent.

    Positions are ``(t - extent_start) / (extent_end - extent_start) * 100``.
    Returns an empty list for an empty or inverted extent.
    """
    config = ADAPTIVE_CONFIGS[level]
    extent_ms = du.span_ms(extent_start, extent_end)
    if extent_ms <= 0:
        return []
    origin = du.to_ms(extent_start)

    ticks: list[Tick] = []
    major_instants: set[int] = set()

    for tick_date in major_tick_dates(range_start, range_end, level):
        ms = du.to_ms(tick_date)
        ratio = (ms - origin) / extent_ms
        if EDGE_GUARD < ratio < 1 - EDGE_GUARD:
            major_instants.add(ms)
            ticks.append(
                Tick(
                    position=ratio * 100,
                    label=config.format_tick(tick_date),
                    major=True,
                    major_label=major_tick_label(tick_date, level),
                )
            )

    for tick_date in minor_tick_dates(range_start, range_end, level):
        ms = du.to_ms(tick_date)
        if ms in major_instants:
            continue
        ratio = (ms - origin) / extent_ms
        if 0 <= ratio <= 1:
            ticks.append(Tick(position=ratio * 100, label=config.format_tick(tick_date)))

    ticks.sort(key=lambda t: t.position)
    return ticks
