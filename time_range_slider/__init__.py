"""Top-level public API for the ``time_range_slider`` package.

This module re-exports the notebook-facing widget and the engine building
blocks so users can import from a single namespace, for example:

>>> from time_range_slider import TimeRangeSlider  # doctest: +SKIP
>>> TimeRangeSlider("1995-09-03", "2026-02-11")  # doctest: +SKIP

It intentionally exposes both the widget and the lower-level pieces
(controllers, granularity services, calendar helpers) for hosts that render
their own UI.
"""

from . import date_utils
from .GranularityEvent import GranularityEvent
from .adaptive import AdaptiveGranularityService
from .controller import (
    MIN_GAP,
    SLIDER_RESOLUTION,
    AdaptiveRangeController,
    RangeController,
    SnapRangeController,
    create_controller,
)
from .date_range import DateRange, DateRangeISO, serialize_range
from .engine import GranularityEngine, create_engine
from .errors import InvalidBoundsError
from .granularity import (
    ADAPTIVE_CONFIGS,
    ADAPTIVE_ORDER,
    ADAPTIVE_THRESHOLDS,
    SNAP_CONFIGS,
    SNAP_ORDER,
)
from .options import SliderOptions
from .snap import SnapGranularityService
from .ticks import Tick, generate_ticks
from .TimeRangeSlider import TickStrip, TimeRangeSlider

__all__ = [
    "ADAPTIVE_CONFIGS",
    "ADAPTIVE_ORDER",
    "ADAPTIVE_THRESHOLDS",
    "AdaptiveGranularityService",
    "AdaptiveRangeController",
    "DateRange",
    "DateRangeISO",
    "GranularityEngine",
    "GranularityEvent",
    "InvalidBoundsError",
    "MIN_GAP",
    "RangeController",
    "SLIDER_RESOLUTION",
    "SNAP_CONFIGS",
    "SNAP_ORDER",
    "SliderOptions",
    "SnapGranularityService",
    "SnapRangeController",
    "Tick",
    "TickStrip",
    "TimeRangeSlider",
    "create_controller",
    "create_engine",
    "date_utils",
    "generate_ticks",
    "serialize_range",
]
