"""Extent/selection controllers behind the time-range slider.

Purpose
-------
A controller owns all mutable slider state: the bound range, the current view
extent, the zoom history, the selection and the displayed level. The UI shell
feeds it raw events (thumb positions, zoom intents, externally written values)
and renders the display fields it exposes.

Concepts and structure
----------------------
- ``Unzoomed``: the zoom stack is empty and the view extent is the full bound
  range.
- ``Zoomed(depth)``: ``depth`` previous extents are stacked; ``zoom_out`` pops
  one, ``reset_zoom`` clears them all.

Two variants share this skeleton:

- :class:`AdaptiveRangeController` maps thumbs fluidly onto a fixed
  resolution and picks the level from the selection width with hysteresis.
  Selection instants are tracked separately from the integer thumb positions
  so repeated small drags do not accumulate rounding drift.
- :class:`SnapRangeController` quantizes thumbs to whole steps of the current
  level and changes level only by zooming, expanding to natural boundaries.

Every operation completes its recomputation (level, labels, ticks) before
notifying observers. Degenerate input never raises: ineligible operations are
no-ops and out-of-range values are clamped.

Logging
-------
Uses the standard ``logging`` module with a ``NullHandler``; enable with
``logging.getLogger("time_range_slider").setLevel(logging.DEBUG)``.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Callable, Optional, Sequence, Union

from . import date_utils as du
from .GranularityEvent import GranularityEvent
from .adaptive import AdaptiveGranularityService
from .date_range import DateRange, DateRangeISO, OutputFormat, serialize_range
from .engine import EngineMode, GranularityEngine, create_engine
from .options import SliderOptions
from .snap import DEFAULT_MAX_TICKS, SnapGranularityService
from .ticks import Tick

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

SLIDER_RESOLUTION = 10000
MIN_GAP = 1

RangePayload = Union[DateRange, DateRangeISO]
RangeCallback = Callable[[Optional[RangePayload]], Any]
Extent = tuple[datetime, datetime]
GranularityCallback = Callable[[GranularityEvent], Any]


def _coerce_range(value: Any) -> tuple[datetime, datetime]:
    """Extract ``(start, end)`` instants from a range-like value."""
    if isinstance(value, Mapping):
        start, end = value.get("start"), value.get("end")
    elif hasattr(value, "start") and hasattr(value, "end"):
        start, end = value.start, value.end
    else:
        start, end = value
    if start is None or end is None:
        raise ValueError("range needs both start and end")
    start, end = du.parse_instant(start), du.parse_instant(end)
    return (start, end) if start <= end else (end, start)


class _RangeControllerBase:
    """State, observers and zoom bookkeeping shared by both variants."""

    _engine: GranularityEngine

    def __init__(
        self,
        mode: EngineMode,
        *,
        disabled: bool = False,
        output_format: OutputFormat = "date",
        initial_granularity: Optional[str] = None,
        max_ticks: int = DEFAULT_MAX_TICKS,
    ) -> None:
        self._engine = engine = create_engine(mode, max_ticks=max_ticks)
        self.disabled = bool(disabled)
        self.output_format: OutputFormat = output_format
        self._initial_override = initial_granularity

        self.min_date: Optional[datetime] = None
        self.max_date: Optional[datetime] = None
        self.view_start: Optional[datetime] = None
        self.view_end: Optional[datetime] = None
        self._extent_stack: list[Extent] = []
        # selection in force when the matching extent was pushed
        self._selection_stack: list[Extent] = []

        self.current_level: str = engine.order[0]
        self.granularity_label: str = engine.level_label(self.current_level)
        self.slider_values: list[int] = [0, 0]
        self.selection_start: Optional[datetime] = None
        self.selection_end: Optional[datetime] = None
        self.selection_start_label = ""
        self.selection_end_label = ""
        self.tick_labels: list[Tick] = []

        self._on_change: RangeCallback = lambda _value: None
        self._on_touched: Callable[[], Any] = lambda: None
        self._range_observers: list[RangeCallback] = []
        self._granularity_observers: list[GranularityCallback] = []

    # --- Read-only state ----------------------------------------------------

    @property
    def engine(self) -> GranularityEngine:
        return self._engine

    @property
    def is_ready(self) -> bool:
        """Return ``True`` once a valid bound range has been initialized."""
        return self.view_start is not None and self.view_end is not None

    @property
    def is_zoomed(self) -> bool:
        return bool(self._extent_stack)

    @property
    def zoom_depth(self) -> int:
        return len(self._extent_stack)

    @property
    def extent_stack(self) -> tuple[Extent, ...]:
        """Return a snapshot of the stacked extents, oldest first."""
        return tuple(self._extent_stack)

    @property
    def view_ms(self) -> int:
        if not self.is_ready:
            return 0
        return du.span_ms(self.view_start, self.view_end)

    @property
    def slider_max(self) -> int:
        raise NotImplementedError

    @property
    def start_thumb_position(self) -> float:
        """Start thumb as a percentage of the track."""
        return self.slider_values[0] / max(1, self.slider_max) * 100

    @property
    def end_thumb_position(self) -> float:
        """End thumb as a percentage of the track."""
        return self.slider_values[1] / max(1, self.slider_max) * 100

    @property
    def value(self) -> Optional[RangePayload]:
        """Current selection in the configured output format."""
        current = self._current_range()
        if current is None:
            return None
        return serialize_range(current[0], current[1], self.output_format)

    # --- Observers / form-binding adapter -----------------------------------

    def register_on_change(self, fn: RangeCallback) -> None:
        self._on_change = fn

    def register_on_touched(self, fn: Callable[[], Any]) -> None:
        self._on_touched = fn

    def set_disabled_state(self, is_disabled: bool) -> None:
        self.disabled = bool(is_disabled)

    def on_range_change(self, callback: RangeCallback) -> RangeCallback:
        """Register ``callback(range)`` to run after every emitted range change."""
        self._range_observers.append(callback)
        return callback

    def on_granularity_change(self, callback: GranularityCallback) -> GranularityCallback:
        """Register ``callback(event)`` to run whenever the displayed level changes."""
        self._granularity_observers.append(callback)
        return callback

    def unobserve(self, callback: Callable[..., Any]) -> None:
        """Remove ``callback`` from every observer list it was registered on."""
        for observers in (self._range_observers, self._granularity_observers):
            while callback in observers:
                observers.remove(callback)

    def _run_hooks(self, hooks: Sequence[Callable[..., Any]], *args: Any) -> None:
        for hook in list(hooks):
            try:
                hook(*args)
            except Exception as e:
                name = getattr(hook, "__name__", repr(hook))
                warnings.warn(f"Hook {name} failed: {e}")

    def _emit_range(self) -> None:
        payload = self.value
        self._run_hooks([self._on_change, *self._range_observers], payload)

    def _touched(self) -> None:
        self._run_hooks([self._on_touched])

    def _set_level(self, level: str, reason: str) -> None:
        old = self.current_level
        self.current_level = level
        self.granularity_label = self._engine.level_label(level)
        if old == level and reason != "initialize":
            return
        logger.debug("granularity %s -> %s (%s)", old, level, reason)
        event = GranularityEvent(
            old=None if reason == "initialize" else old,
            new=level,
            label=self.granularity_label,
            reason=reason,
            source=self,
        )
        self._run_hooks(self._granularity_observers, event)

    # --- Shared lifecycle ---------------------------------------------------

    def initialize(self, min_date: du.InstantLike, max_date: du.InstantLike) -> bool:
        """Bind the controller to ``[min_date, max_date]``.

        Returns ``False`` (leaving the controller unready) when the range has
        no positive width.
        """
        lower, upper = du.parse_instant(min_date), du.parse_instant(max_date)
        self._clear_history()
        if upper <= lower:
            logger.warning("Ignoring bound range with non-positive width: %s .. %s", lower, upper)
            self.min_date = self.max_date = None
            self.view_start = self.view_end = None
            self.selection_start = self.selection_end = None
            self.tick_labels = []
            return False

        self.min_date, self.max_date = lower, upper
        self.view_start, self.view_end = lower.replace(), upper.replace()
        self._set_level(self._initial_level(), "initialize")
        self.selection_start, self.selection_end = self.view_start.replace(), self.view_end.replace()
        self.slider_values = [0, self.slider_max]
        self._update_labels()
        self._update_ticks()
        logger.debug("initialized %s .. %s at %s", lower, upper, self.current_level)
        return True

    def _push_extent(self) -> None:
        self._extent_stack.append((self.view_start, self.view_end))
        self._selection_stack.append((self.selection_start, self.selection_end))

    def _pop_extent(self) -> tuple[Extent, Extent]:
        """Pop the last view extent together with the selection it held."""
        return self._extent_stack.pop(), self._selection_stack.pop()

    def _clear_history(self) -> None:
        self._extent_stack = []
        self._selection_stack = []

    def _current_range(self) -> Optional[tuple[datetime, datetime]]:
        if self.selection_start is None or self.selection_end is None:
            return None
        return self.selection_start, self.selection_end

    def _correct_gap(self, values: Sequence[float]) -> list[int]:
        """Keep the thumbs at least ``MIN_GAP`` apart, moving the idle thumb."""
        start, end = (int(round(v)) for v in values)
        top = self.slider_max
        if end - start < MIN_GAP:
            if self.slider_values[0] != start:
                end = start + MIN_GAP
            else:
                start = end - MIN_GAP
        start = max(0, min(start, top - MIN_GAP))
        end = min(top, max(end, MIN_GAP))
        return [start, end]

    # --- Variant hooks ------------------------------------------------------

    def _initial_level(self) -> str:
        raise NotImplementedError

    def _update_labels(self) -> None:
        raise NotImplementedError

    def _tick_level(self) -> str:
        raise NotImplementedError

    def _update_ticks(self) -> None:
        self.tick_labels = self._engine.ticks_for(self.view_start, self.view_end, self._tick_level())

    @property
    def can_zoom_in(self) -> bool:
        raise NotImplementedError

    @property
    def can_zoom_out(self) -> bool:
        raise NotImplementedError


class AdaptiveRangeController(_RangeControllerBase):
    """Fluid slider whose level follows the selection width with hysteresis."""

    _engine: AdaptiveGranularityService

    def __init__(self, **kwargs: Any) -> None:
        super().__init__("adaptive", **kwargs)
        self.slider_values = [0, SLIDER_RESOLUTION]

    @property
    def slider_max(self) -> int:
        return SLIDER_RESOLUTION

    @property
    def can_zoom_in(self) -> bool:
        """The selection is a strict sub-range of the view."""
        return self.slider_values[0] > 0 or self.slider_values[1] < SLIDER_RESOLUTION

    @property
    def can_zoom_out(self) -> bool:
        return self.is_zoomed

    def _initial_level(self) -> str:
        if self._initial_override is not None:
            return self._initial_override
        return self._engine.initial_granularity(self.view_ms)

    # --- Date/slider conversion relative to the view ------------------------

    def slider_to_date(self, value: float) -> datetime:
        ratio = value / SLIDER_RESOLUTION
        return du.from_ms(du.to_ms(self.view_start) + ratio * self.view_ms)

    def date_to_slider(self, value: datetime) -> int:
        ratio = du.span_ms(self.view_start, value) / self.view_ms
        return round(max(0.0, min(float(SLIDER_RESOLUTION), ratio * SLIDER_RESOLUTION)))

    def _reproject_selection(self) -> None:
        self.slider_values = [
            self.date_to_slider(self.selection_start),
            self.date_to_slider(self.selection_end),
        ]

    def _refresh_view(self, reason: str) -> None:
        self._set_level(self._engine.initial_granularity(self.view_ms), reason)
        self._update_labels()
        self._update_ticks()
        self._emit_range()

    # --- Zoom ---------------------------------------------------------------

    def zoom_in(self) -> None:
        """Make the current selection the new view extent."""
        if self.disabled or not self.is_ready or not self.can_zoom_in:
            return
        sel_start, sel_end = self._engine.extent_for(self.current_level, self.selection_start, self.selection_end)
        if sel_end <= sel_start:
            return

        self._push_extent()
        self.view_start, self.view_end = sel_start, sel_end
        self.slider_values = [0, SLIDER_RESOLUTION]
        self.selection_start, self.selection_end = sel_start.replace(), sel_end.replace()
        logger.debug("zoom in to %s .. %s (depth=%d)", sel_start, sel_end, self.zoom_depth)
        self._refresh_view("zoom_in")

    def zoom_out(self) -> None:
        """Restore the previous view, keeping the exact selection instants."""
        if self.disabled or not self._extent_stack:
            return
        # the exact selection instants outlive the zoom, so the saved one is unused
        (self.view_start, self.view_end), _ = self._pop_extent()
        self._reproject_selection()
        logger.debug("zoom out to %s .. %s (depth=%d)", self.view_start, self.view_end, self.zoom_depth)
        self._refresh_view("zoom_out")

    def reset_zoom(self) -> None:
        """Return to the full bound range, keeping the exact selection instants."""
        if self.disabled or not self.is_zoomed:
            return
        self._clear_history()
        self.view_start, self.view_end = self.min_date.replace(), self.max_date.replace()
        self._reproject_selection()
        logger.debug("reset zoom to %s .. %s", self.view_start, self.view_end)
        self._refresh_view("reset")

    # --- Events -------------------------------------------------------------

    def on_slider_change(self, values: Sequence[float]) -> None:
        """Apply new thumb positions in ``[0, SLIDER_RESOLUTION]``."""
        if self.disabled or not self.is_ready:
            return
        start, end = self._correct_gap(values)
        self.slider_values = [start, end]

        self.selection_start = self.slider_to_date(start)
        self.selection_end = self.slider_to_date(end)

        width = du.span_ms(self.selection_start, self.selection_end)
        level = self._engine.resolve_level(width, self.current_level)
        if level != self.current_level:
            self._set_level(level, "slider")
            self._update_ticks()

        self._update_labels()
        self._emit_range()
        self._touched()

    def write_value(self, value: Any) -> None:
        """Clamp an external range into the view and move the thumbs to it."""
        if value is None or not self.is_ready:
            return
        try:
            start, end = _coerce_range(value)
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring unresolvable range %r: %s", value, e)
            return
        self.selection_start = du.clamp_date(start, self.view_start, self.view_end)
        self.selection_end = du.clamp_date(end, self.view_start, self.view_end)
        self._reproject_selection()
        self._update_labels()

    # --- Display ------------------------------------------------------------

    def _update_labels(self) -> None:
        config = self._engine.get_config(self.current_level)
        self.selection_start_label = config.format_thumb(self.selection_start)
        self.selection_end_label = config.format_thumb(self.selection_end)

    def _tick_level(self) -> str:
        # Ticks follow the width of the view, not the selection, so their
        # count stays bounded while the thumbs narrow the level.
        return self._engine.initial_granularity(self.view_ms)


class SnapRangeController(_RangeControllerBase):
    """Quantized slider that changes level one step per zoom."""

    _engine: SnapGranularityService

    def __init__(self, **kwargs: Any) -> None:
        super().__init__("snap", **kwargs)

    @property
    def max_ticks(self) -> int:
        return self._engine.max_ticks

    @property
    def steps(self) -> int:
        if not self.is_ready:
            return 0
        return self._engine.calculate_steps(self.view_start, self.view_end, self.current_level)

    @property
    def slider_max(self) -> int:
        return max(1, self.steps)

    @property
    def can_zoom_in(self) -> bool:
        if not self.is_ready:
            return False
        return self._engine.can_zoom_in_selection(self.selection_start, self.selection_end, self.current_level)

    @property
    def can_zoom_out(self) -> bool:
        return self.is_ready and self._engine.can_zoom_out(self.current_level)

    def _initial_level(self) -> str:
        if self._initial_override is not None:
            return self._initial_override
        return self._engine.initial_level(self.min_date, self.max_date)

    # --- Slider mapping -----------------------------------------------------

    def slider_to_date(self, value: int) -> datetime:
        if value <= 0:
            return self.view_start.replace()
        if value >= self.slider_max:
            return self.view_end.replace()
        raw = self._engine.slider_value_to_date(value, self.view_start, self.current_level)
        return du.clamp_date(raw, self.view_start, self.view_end)

    def date_to_slider(self, value: datetime) -> int:
        raw = self._engine.date_to_slider_value(value, self.view_start, self.current_level)
        return max(0, min(self.slider_max, raw))

    def _sync_selection_from_slider(self) -> None:
        self.selection_start = self.slider_to_date(self.slider_values[0])
        self.selection_end = self.slider_to_date(self.slider_values[1])

    def _natural_extent(
        self, level: str, start: datetime, end: datetime, lower: datetime, upper: datetime
    ) -> Extent:
        """Expand ``[start, end]`` to ``level`` boundaries clamped into ``[lower, upper]``."""
        start, end = self._engine.extent_for(level, start, end)
        return du.clamp_date(start, lower, upper), du.clamp_date(end, lower, upper)

    def _reproject_selection(self) -> None:
        """Expand the selection to natural boundaries, clamp, then requantize."""
        start, end = self._natural_extent(
            self.current_level, self.selection_start, self.selection_end, self.view_start, self.view_end
        )
        self._quantize_selection(start, end)

    def _quantize_selection(self, start: datetime, end: datetime) -> None:
        self.slider_values = [self.date_to_slider(start), self.date_to_slider(end)]
        if self.slider_values[1] - self.slider_values[0] < MIN_GAP:
            self.slider_values = self._correct_gap(self.slider_values)
        self._sync_selection_from_slider()

    def _refresh_view(self) -> None:
        self._update_labels()
        self._update_ticks()
        self._emit_range()

    # --- Zoom ---------------------------------------------------------------

    def zoom_in(self) -> None:
        """Zoom one level finer onto the selection's natural extent."""
        if self.disabled or not self.can_zoom_in:
            return
        new_level = self._engine.zoom_in(self.current_level)
        start, end = self._natural_extent(
            new_level, self.selection_start, self.selection_end, self.min_date, self.max_date
        )

        self._push_extent()
        self.view_start, self.view_end = start, end
        self._set_level(new_level, "zoom_in")
        self.slider_values = [0, self.slider_max]
        self._sync_selection_from_slider()
        logger.debug("zoom in to %s .. %s at %s", self.view_start, self.view_end, new_level)
        self._refresh_view()

    def zoom_out(self) -> None:
        """Zoom one level coarser, restoring the stacked extent when there is one.

        A selection left spanning the whole zoomed view is restored to the
        selection that was zoomed into; a moved one is expanded to the coarser
        level's natural boundaries.
        """
        if self.disabled or not self.can_zoom_out:
            return
        new_level = self._engine.zoom_out(self.current_level)
        saved = None
        if self._extent_stack:
            untouched = (self.selection_start, self.selection_end) == (self.view_start, self.view_end)
            (self.view_start, self.view_end), selection = self._pop_extent()
            if untouched:
                saved = selection
        else:
            self.view_start, self.view_end = self._natural_extent(
                new_level, self.view_start, self.view_end, self.min_date, self.max_date
            )
        self._set_level(new_level, "zoom_out")
        if saved is not None:
            self._quantize_selection(*saved)
        else:
            self._reproject_selection()
        logger.debug("zoom out to %s .. %s at %s", self.view_start, self.view_end, new_level)
        self._refresh_view()

    def reset_zoom(self) -> None:
        """Return to the full bound range at the initial level."""
        if self.disabled or not self.is_zoomed:
            return
        self._clear_history()
        self.view_start, self.view_end = self.min_date.replace(), self.max_date.replace()
        self._set_level(self._initial_level(), "reset")
        self._reproject_selection()
        logger.debug("reset zoom to %s .. %s", self.view_start, self.view_end)
        self._refresh_view()

    # --- Events -------------------------------------------------------------

    def on_slider_change(self, values: Sequence[float]) -> None:
        """Apply new quantized thumb positions in ``[0, steps]``."""
        if self.disabled or not self.is_ready:
            return
        self.slider_values = self._correct_gap(values)
        self._sync_selection_from_slider()
        self._update_labels()
        self._emit_range()
        self._touched()

    def write_value(self, value: Any) -> None:
        """Grow the view to contain an external range, then quantize onto it."""
        if value is None or not self.is_ready:
            return
        try:
            start, end = _coerce_range(value)
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring unresolvable range %r: %s", value, e)
            return

        grown_start = min(self.view_start, self._engine.natural_extent(self.current_level, start)[0])
        grown_end = max(self.view_end, self._engine.natural_extent(self.current_level, end)[1])
        grown_start = du.clamp_date(grown_start, self.min_date, self.max_date)
        grown_end = du.clamp_date(grown_end, self.min_date, self.max_date)
        extent_changed = (grown_start, grown_end) != (self.view_start, self.view_end)
        self.view_start, self.view_end = grown_start, grown_end

        start = du.clamp_date(start, self.view_start, self.view_end)
        end = du.clamp_date(end, self.view_start, self.view_end)
        self.slider_values = [self.date_to_slider(start), self.date_to_slider(end)]
        self._sync_selection_from_slider()
        self._update_labels()
        if extent_changed:
            self._update_ticks()

    # --- Display ------------------------------------------------------------

    def _update_labels(self) -> None:
        config = self._engine.get_config(self.current_level)
        self.selection_start_label = config.label_format(self.selection_start)
        self.selection_end_label = config.label_format(self.selection_end)

    def _tick_level(self) -> str:
        return self.current_level


RangeController = Union[AdaptiveRangeController, SnapRangeController]


def create_controller(options: SliderOptions) -> RangeController:
    """Build and initialize the controller variant selected by ``options.mode``."""
    kwargs = dict(
        disabled=options.disabled,
        output_format=options.output_format,
        initial_granularity=options.initial_granularity,
        max_ticks=options.max_ticks,
    )
    if options.mode == "snap":
        controller: RangeController = SnapRangeController(**kwargs)
    else:
        controller = AdaptiveRangeController(**kwargs)
    controller.initialize(options.min_date, options.max_date)
    return controller
