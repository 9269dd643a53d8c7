"""Discrete snap-to-level granularity engine.

In snap mode the slider is quantized: a thumb position is an integer index
into ``[0, steps]`` where ``steps = round((extent_end - extent_start) / step_ms)``
at the current level. Zooming moves exactly one level and expands the
selection outward to whole-unit ("natural") boundaries of the new level.

All zoom-level helpers saturate at the ends of ``SNAP_ORDER`` instead of
raising.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Optional

from . import date_utils as du
from .granularity import SNAP_CONFIGS, SNAP_ORDER, SnapLevelConfig, coarser, finer
from .ticks import Tick

DEFAULT_MAX_TICKS = 7
# Finest level chosen at start-up keeps the full range within this many steps.
MAX_INITIAL_STEPS = 100


class SnapGranularityService:
    """Quantized level stepping, natural extents and slider mapping."""

    order = SNAP_ORDER

    def __init__(self, max_ticks: int = DEFAULT_MAX_TICKS) -> None:
        self.max_ticks = max_ticks

    def get_config(self, level: str) -> SnapLevelConfig:
        """Return the config for ``level`` or raise ``KeyError``."""
        try:
            return SNAP_CONFIGS[level]
        except KeyError:
            raise KeyError(f"Unknown snap granularity level: {level!r}") from None

    # --- Level stepping -----------------------------------------------------

    def zoom_in(self, level: str) -> str:
        return finer(SNAP_ORDER, level) or level

    def zoom_out(self, level: str) -> str:
        return coarser(SNAP_ORDER, level) or level

    def can_zoom_in(self, level: str) -> bool:
        return finer(SNAP_ORDER, level) is not None

    def can_zoom_out(self, level: str) -> bool:
        return coarser(SNAP_ORDER, level) is not None

    def initial_level(self, start: datetime, end: datetime) -> str:
        """Return the finest level that shows ``[start, end]`` in at most
        ``MAX_INITIAL_STEPS`` steps, or the coarsest level if none does."""
        for level in reversed(SNAP_ORDER):
            if self.calculate_steps(start, end, level) <= MAX_INITIAL_STEPS:
                return level
        return SNAP_ORDER[0]

    # --- Extents ------------------------------------------------------------

    def natural_extent(self, level: str, value: datetime) -> tuple[datetime, datetime]:
        """Return the whole-unit span of ``level`` containing ``value``."""
        return self.get_config(level).natural_extent(value)

    def calculate_zoom_in_extent(
        self, sel_start: datetime, sel_end: datetime, new_level: str
    ) -> tuple[datetime, datetime]:
        """Expand a selection outward to ``new_level`` boundaries."""
        return (
            self.natural_extent(new_level, sel_start)[0],
            self.natural_extent(new_level, sel_end)[1],
        )

    def calculate_zoom_out_extent(
        self,
        sel_start: datetime,
        sel_end: datetime,
        new_level: str,
        min_bound: datetime,
        max_bound: datetime,
    ) -> tuple[datetime, datetime]:
        """Expand a selection to ``new_level`` boundaries, then clamp to the bounds."""
        start, end = self.calculate_zoom_in_extent(sel_start, sel_end, new_level)
        return (
            du.clamp_date(start, min_bound, max_bound),
            du.clamp_date(end, min_bound, max_bound),
        )

    def can_zoom_in_selection(self, sel_start: datetime, sel_end: datetime, current_level: str) -> bool:
        """Return ``True`` when the selection spans at least two steps one level finer."""
        target = finer(SNAP_ORDER, current_level)
        if target is None:
            return False
        return self.calculate_steps(sel_start, sel_end, target) >= 2

    # --- Slider mapping -----------------------------------------------------

    def calculate_steps(self, extent_start: datetime, extent_end: datetime, level: str) -> int:
        return round(du.span_ms(extent_start, extent_end) / self.get_config(level).step_ms)

    def date_to_slider_value(self, value: datetime, extent_start: datetime, level: str) -> int:
        return round(du.span_ms(extent_start, value) / self.get_config(level).step_ms)

    def slider_value_to_date(self, slider_value: int, extent_start: datetime, level: str) -> datetime:
        offset = slider_value * self.get_config(level).step_ms
        return extent_start + timedelta(milliseconds=round(offset))

    # --- Ticks --------------------------------------------------------------

    def generate_tick_labels(
        self,
        extent_start: datetime,
        extent_end: datetime,
        level: str,
        max_ticks: Optional[int] = None,
    ) -> list[Tick]:
        """Return evenly spaced labels over the quantized step index.

        The interval is ``ceil(total_steps / max_ticks)``, with ``max_ticks``
        defaulting to the service budget; there is no major/minor distinction
        in snap mode.
        """
        if max_ticks is None:
            max_ticks = self.max_ticks
        config = self.get_config(level)
        total_steps = self.calculate_steps(extent_start, extent_end, level)
        if total_steps <= 0:
            return []
        interval = max(1, math.ceil(total_steps / max(1, max_ticks)))
        ticks: list[Tick] = []
        for step in range(0, total_steps + 1, interval):
            if step == total_steps:
                tick_date = extent_end
            else:
                tick_date = self.slider_value_to_date(step, extent_start, level)
            ticks.append(Tick(position=step / total_steps * 100, label=config.label_format(tick_date)))
        return ticks

    # --- GranularityEngine capability ---------------------------------------

    def resolve_level(self, width_ms: float, current_level: str) -> str:
        """Snap mode changes level only by zooming; width never moves it."""
        self.get_config(current_level)
        return current_level

    def extent_for(self, level: str, start: datetime, end: datetime) -> tuple[datetime, datetime]:
        return self.calculate_zoom_in_extent(start, end, level)

    def ticks_for(self, extent_start: datetime, extent_end: datetime, level: str) -> list[Tick]:
        return self.generate_tick_labels(extent_start, extent_end, level)

    def level_label(self, level: str) -> str:
        return self.get_config(level).label
