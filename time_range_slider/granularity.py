"""Granularity levels and their per-level lookup tables.

Two level sets exist, one per zoom model:

- ``ADAPTIVE_ORDER`` (years ... seconds) drives the hysteretic, width-driven
  engine. Each level has a label, a snap function, thumb/tick formatters and a
  pair of hysteresis thresholds.
- ``SNAP_ORDER`` (decades ... deciseconds) drives the discrete snap-to-level
  engine. Each level has a label, a step duration for slider quantization, a
  label formatter and a natural-extent function.

Index 0 is always the coarsest level. The order tuples are the single source
of truth for "finer than"/"coarser than" comparisons and zoom adjacency. All
tables are built once at import time and exposed read-only.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Callable, Literal, Mapping, Optional

from . import date_utils as du
from .date_utils import MS_PER_DAY, MS_PER_HOUR, MS_PER_MINUTE, MS_PER_YEAR

AdaptiveLevel = Literal["years", "months", "days", "hours", "minutes", "seconds"]
SnapLevel = Literal["decades", "years", "months", "days", "minutes", "deciseconds"]

ADAPTIVE_ORDER: tuple[AdaptiveLevel, ...] = (
    "years",
    "months",
    "days",
    "hours",
    "minutes",
    "seconds",
)

SNAP_ORDER: tuple[SnapLevel, ...] = (
    "decades",
    "years",
    "months",
    "days",
    "minutes",
    "deciseconds",
)


@dataclass(frozen=True)
class LevelThreshold:
    """Hysteresis thresholds (milliseconds) for one adaptive level.

    ``narrow_below`` is the selection width below which the view narrows into
    this level; ``widen_above`` is the width above which this level is left
    for the next coarser one.
    """

    level: AdaptiveLevel
    narrow_below: float
    widen_above: float


@dataclass(frozen=True)
class AdaptiveLevelConfig:
    """Display configuration for one adaptive level."""

    level: AdaptiveLevel
    label: str
    snap: Callable[[datetime], datetime]
    format_thumb: Callable[[datetime], str]
    format_tick: Callable[[datetime], str]


@dataclass(frozen=True)
class SnapLevelConfig:
    """Quantization configuration for one snap level."""

    level: SnapLevel
    label: str
    step_ms: float
    label_format: Callable[[datetime], str]
    natural_extent: Callable[[datetime], tuple[datetime, datetime]]


# Widen thresholds sit well above the matching narrow thresholds; the gap is
# the hysteresis band that keeps a hovering selection from flickering.
ADAPTIVE_THRESHOLDS: tuple[LevelThreshold, ...] = (
    LevelThreshold("years", math.inf, math.inf),
    LevelThreshold("months", 5 * MS_PER_YEAR, 8 * MS_PER_YEAR),
    LevelThreshold("days", 90 * MS_PER_DAY, 400 * MS_PER_DAY),
    LevelThreshold("hours", 3 * MS_PER_DAY, 10 * MS_PER_DAY),
    LevelThreshold("minutes", 2 * MS_PER_HOUR, 8 * MS_PER_HOUR),
    LevelThreshold("seconds", 5 * MS_PER_MINUTE, 15 * MS_PER_MINUTE),
)

ADAPTIVE_CONFIGS: Mapping[str, AdaptiveLevelConfig] = MappingProxyType(
    {
        "years": AdaptiveLevelConfig(
            "years", "Years", du.snap_to_year, du.format_year_thumb, du.format_year_tick
        ),
        "months": AdaptiveLevelConfig(
            "months", "Months", du.snap_to_month, du.format_month_thumb, du.format_month_tick
        ),
        "days": AdaptiveLevelConfig(
            "days", "Days", du.snap_to_day, du.format_day_thumb, du.format_day_tick
        ),
        "hours": AdaptiveLevelConfig(
            "hours", "Hours", du.snap_to_hour, du.format_hour_thumb, du.format_hour_tick
        ),
        "minutes": AdaptiveLevelConfig(
            "minutes", "Minutes", du.snap_to_minute, du.format_minute_thumb, du.format_minute_tick
        ),
        "seconds": AdaptiveLevelConfig(
            "seconds", "Seconds", du.snap_to_second, du.format_second_thumb, du.format_second_tick
        ),
    }
)


def _natural(unit: du.Unit) -> Callable[[datetime], tuple[datetime, datetime]]:
    def _extent(value: datetime) -> tuple[datetime, datetime]:
        return du.start_of(unit, value), du.end_of(unit, value)

    _extent.__name__ = f"natural_{unit}_extent"
    return _extent


SNAP_CONFIGS: Mapping[str, SnapLevelConfig] = MappingProxyType(
    {
        "decades": SnapLevelConfig(
            "decades", "Decades", 10 * MS_PER_YEAR, du.format_decade, _natural("decade")
        ),
        "years": SnapLevelConfig(
            "years", "Years", MS_PER_YEAR, du.format_year, _natural("year")
        ),
        "months": SnapLevelConfig(
            "months", "Months", MS_PER_YEAR / 12, du.format_month, _natural("month")
        ),
        "days": SnapLevelConfig(
            "days", "Days", MS_PER_DAY, du.format_day, _natural("day")
        ),
        "minutes": SnapLevelConfig(
            "minutes", "Minutes", MS_PER_MINUTE, du.format_minute, _natural("minute")
        ),
        "deciseconds": SnapLevelConfig(
            "deciseconds", "Deciseconds", 100, du.format_decisecond, _natural("decisecond")
        ),
    }
)


def level_index(order: tuple[str, ...], level: str) -> int:
    """Return the position of ``level`` in ``order`` or raise ``ValueError``."""
    try:
        return order.index(level)
    except ValueError:
        raise ValueError(f"Unknown granularity level {level!r}; expected one of {order}") from None


def finer(order: tuple[str, ...], level: str) -> Optional[str]:
    """Return the next finer level, or ``None`` at the finest end."""
    idx = level_index(order, level)
    return order[idx + 1] if idx + 1 < len(order) else None


def coarser(order: tuple[str, ...], level: str) -> Optional[str]:
    """Return the next coarser level, or ``None`` at the coarsest end."""
    idx = level_index(order, level)
    return order[idx - 1] if idx > 0 else None
