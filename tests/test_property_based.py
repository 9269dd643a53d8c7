"""Property-based checks for granularity resolution, slider mapping and ticks.

These complement the example-based tests with invariants that must hold for
any selection width, any instant and any thumb pair.
"""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from time_range_slider.adaptive import AdaptiveGranularityService
from time_range_slider.controller import MIN_GAP, SLIDER_RESOLUTION, AdaptiveRangeController
from time_range_slider.date_utils import MS_PER_YEAR, span_ms
from time_range_slider.granularity import ADAPTIVE_ORDER, ADAPTIVE_THRESHOLDS, SNAP_CONFIGS, SNAP_ORDER
from time_range_slider.snap import SnapGranularityService
from time_range_slider.ticks import generate_ticks

try:
    from hypothesis import given
    from hypothesis import strategies as st
except ModuleNotFoundError:  # pragma: no cover - environment-specific fallback
    pytest.skip("hypothesis is required for property-based tests", allow_module_level=True)


ADAPTIVE = AdaptiveGranularityService()
SNAP = SnapGranularityService()

INSTANTS = st.datetimes(min_value=datetime(1900, 1, 1), max_value=datetime(2100, 1, 1))
WIDTHS = st.floats(min_value=1.0, max_value=200 * MS_PER_YEAR, allow_nan=False, allow_infinity=False)
POSITIONS = st.integers(min_value=0, max_value=SLIDER_RESOLUTION)


@given(idx=st.integers(min_value=1, max_value=len(ADAPTIVE_ORDER) - 2), fraction=st.floats(0.0, 1.0))
def test_width_inside_hysteresis_band_keeps_level(idx: int, fraction: float) -> None:
    """A width between the next narrow threshold and the widen threshold is stable."""
    low = ADAPTIVE_THRESHOLDS[idx + 1].narrow_below
    high = ADAPTIVE_THRESHOLDS[idx].widen_above
    width = low + (high - low) * fraction
    level = ADAPTIVE_ORDER[idx]
    assert ADAPTIVE.determine_granularity(width, level) == level


@given(first=WIDTHS, second=WIDTHS)
def test_initial_granularity_is_monotonic(first: float, second: float) -> None:
    """A wider range never starts at a finer level."""
    narrow, wide = sorted((first, second))
    assert ADAPTIVE_ORDER.index(ADAPTIVE.initial_granularity(narrow)) >= ADAPTIVE_ORDER.index(
        ADAPTIVE.initial_granularity(wide)
    )


@given(width=WIDTHS, level=st.sampled_from(ADAPTIVE_ORDER))
def test_widening_moves_at_most_one_level(width: float, level: str) -> None:
    resolved = ADAPTIVE.determine_granularity(width, level)
    assert ADAPTIVE_ORDER.index(resolved) >= ADAPTIVE_ORDER.index(level) - 1


@given(level=st.sampled_from(SNAP_ORDER), origin=INSTANTS, value=INSTANTS)
def test_snap_slider_round_trip_within_one_step(level: str, origin: datetime, value: datetime) -> None:
    position = SNAP.date_to_slider_value(value, origin, level)
    restored = SNAP.slider_value_to_date(position, origin, level)
    assert abs(span_ms(value, restored)) <= SNAP_CONFIGS[level].step_ms


@given(level=st.sampled_from(SNAP_ORDER), value=INSTANTS)
def test_natural_extent_is_idempotent(level: str, value: datetime) -> None:
    start, end = SNAP.natural_extent(level, value)
    assert start <= value <= end
    assert SNAP.natural_extent(level, start) == (start, end)
    assert SNAP.natural_extent(level, end) == (start, end)


@given(position=POSITIONS)
def test_adaptive_position_round_trip(position: int) -> None:
    controller = AdaptiveRangeController()
    controller.initialize(datetime(1995, 9, 3), datetime(2026, 2, 11))
    assert controller.date_to_slider(controller.slider_to_date(position)) == position


@given(start=POSITIONS, end=POSITIONS)
def test_thumbs_stay_ordered_and_apart(start: int, end: int) -> None:
    controller = AdaptiveRangeController()
    controller.initialize(datetime(2024, 1, 1), datetime(2024, 12, 31))
    controller.on_slider_change([start, end])
    low, high = controller.slider_values
    assert 0 <= low
    assert high <= SLIDER_RESOLUTION
    assert high - low >= MIN_GAP


@given(origin=INSTANTS, width=st.integers(min_value=60_000, max_value=int(50 * MS_PER_YEAR)))
def test_ticks_never_share_an_instant(origin: datetime, width: int) -> None:
    end = origin + timedelta(milliseconds=width)
    level = ADAPTIVE.initial_granularity(width)
    ticks = generate_ticks(origin, end, level, origin, end)

    positions = [t.position for t in ticks]
    assert positions == sorted(positions)
    assert len(set(positions)) == len(positions)
    assert all(0 <= p <= 100 for p in positions)
