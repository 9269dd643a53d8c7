"""Configuration surface consumed from the host."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .date_range import OUTPUT_FORMATS, OutputFormat
from .date_utils import InstantLike, parse_instant
from .engine import ENGINE_MODES, EngineMode
from .granularity import ADAPTIVE_ORDER, SNAP_ORDER


@dataclass(frozen=True)
class SliderOptions:
    """Configuration knobs for range controllers and the slider widget.

    Parameters
    ----------
    min_date, max_date : datetime, date or str
        Inclusive bound range. Coerced to naive local datetimes.
    disabled : bool, optional
        Suppresses every mutating operation.
    output_format : {"date", "iso"}, optional
        Serialization applied to emitted ranges.
    initial_granularity : str or None, optional
        Starting level override; must belong to the level set of ``mode``.
    mode : {"adaptive", "snap"}, optional
        Zoom model: width-driven hysteresis or discrete snap-to-level.
    max_ticks : int, optional
        Tick budget for snap-mode labels.
    """

    min_date: InstantLike
    max_date: InstantLike
    disabled: bool = False
    output_format: OutputFormat = "date"
    initial_granularity: Optional[str] = None
    mode: EngineMode = "adaptive"
    max_ticks: int = 7

    def __post_init__(self) -> None:
        """Normalize bounds and validate option values."""
        object.__setattr__(self, "min_date", parse_instant(self.min_date))
        object.__setattr__(self, "max_date", parse_instant(self.max_date))
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(f"output_format must be one of {set(OUTPUT_FORMATS)}")
        if self.mode not in ENGINE_MODES:
            raise ValueError(f"mode must be one of {set(ENGINE_MODES)}")
        order = ADAPTIVE_ORDER if self.mode == "adaptive" else SNAP_ORDER
        if self.initial_granularity is not None and self.initial_granularity not in order:
            raise ValueError(
                f"initial_granularity {self.initial_granularity!r} is not a {self.mode} level; "
                f"expected one of {order}"
            )
        if self.max_ticks < 1:
            raise ValueError("max_ticks must be >= 1")

    @property
    def bounds(self) -> tuple[datetime, datetime]:
        return self.min_date, self.max_date

    @property
    def has_valid_bounds(self) -> bool:
        return self.max_date > self.min_date
