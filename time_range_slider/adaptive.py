"""Width-driven granularity resolution with hysteresis.

The adaptive engine picks the displayed level from the width of the current
selection. Narrowing uses each candidate level's ``narrow_below`` threshold
and may jump several levels at once; widening uses the current level's own
``widen_above`` threshold and moves exactly one level per call. The gap
between the two thresholds keeps a selection hovering near a boundary from
flickering between levels.
"""

from __future__ import annotations

import logging
from datetime import datetime

from .granularity import (
    ADAPTIVE_CONFIGS,
    ADAPTIVE_ORDER,
    ADAPTIVE_THRESHOLDS,
    AdaptiveLevelConfig,
    level_index,
)
from .ticks import Tick, generate_ticks

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class AdaptiveGranularityService:
    """Resolve adaptive levels and build their tick lists."""

    order = ADAPTIVE_ORDER

    def get_config(self, level: str) -> AdaptiveLevelConfig:
        """Return the display config for ``level`` or raise ``KeyError``."""
        try:
            return ADAPTIVE_CONFIGS[level]
        except KeyError:
            raise KeyError(f"Unknown adaptive granularity level: {level!r}") from None

    def determine_granularity(self, selection_ms: float, current_level: str) -> str:
        """Return the level to display a selection of ``selection_ms`` at.

        Parameters
        ----------
        selection_ms : float
            Selection width in milliseconds.
        current_level : str
            The level currently displayed; anchors the hysteresis.

        Notes
        -----
        Candidates finer than ``current_level`` are scanned from the finest
        end. A candidate qualifies only if every level between the current one
        and it (inclusive) also has ``selection_ms`` below its
        ``narrow_below``. Without a narrowing, a width above the current
        level's ``widen_above`` steps exactly one level coarser.
        """
        current_idx = level_index(ADAPTIVE_ORDER, current_level)

        for i in range(len(ADAPTIVE_THRESHOLDS) - 1, current_idx, -1):
            if selection_ms >= ADAPTIVE_THRESHOLDS[i].narrow_below:
                continue
            if all(
                selection_ms < ADAPTIVE_THRESHOLDS[j].narrow_below
                for j in range(current_idx + 1, i + 1)
            ):
                logger.debug("narrow %s -> %s (width=%.0fms)", current_level, ADAPTIVE_ORDER[i], selection_ms)
                return ADAPTIVE_ORDER[i]

        if current_idx > 0 and selection_ms > ADAPTIVE_THRESHOLDS[current_idx].widen_above:
            wider = ADAPTIVE_ORDER[current_idx - 1]
            logger.debug("widen %s -> %s (width=%.0fms)", current_level, wider, selection_ms)
            return wider

        return current_level

    def initial_granularity(self, range_ms: float) -> str:
        """Return the finest level whose ``narrow_below`` exceeds ``range_ms``.

        No hysteresis applies; defaults to the coarsest level.
        """
        for i in range(len(ADAPTIVE_THRESHOLDS) - 1, 0, -1):
            if range_ms < ADAPTIVE_THRESHOLDS[i].narrow_below:
                return ADAPTIVE_ORDER[i]
        return ADAPTIVE_ORDER[0]

    def generate_ticks(
        self,
        start: datetime,
        end: datetime,
        level: str,
        extent_start: datetime,
        extent_end: datetime,
    ) -> list[Tick]:
        """Generate major/minor ticks; see :func:`time_range_slider.ticks.generate_ticks`."""
        self.get_config(level)
        return generate_ticks(start, end, level, extent_start, extent_end)

    # --- GranularityEngine capability ---------------------------------------

    def resolve_level(self, width_ms: float, current_level: str) -> str:
        return self.determine_granularity(width_ms, current_level)

    def extent_for(self, level: str, start: datetime, end: datetime) -> tuple[datetime, datetime]:
        """Adaptive zoom targets the selection itself at any level."""
        self.get_config(level)
        return start.replace(), end.replace()

    def ticks_for(self, extent_start: datetime, extent_end: datetime, level: str) -> list[Tick]:
        return self.generate_ticks(extent_start, extent_end, level, extent_start, extent_end)

    def level_label(self, level: str) -> str:
        return self.get_config(level).label
