from __future__ import annotations

from datetime import datetime

import pytest

from time_range_slider.engine import GranularityEngine, create_engine
from time_range_slider.snap import SnapGranularityService

END_OF_AUGUST = datetime(2024, 8, 31, 23, 59, 59, 999000)


@pytest.fixture
def service() -> SnapGranularityService:
    return SnapGranularityService()


def test_level_stepping_saturates(service) -> None:
    assert service.zoom_in("decades") == "years"
    assert service.zoom_in("deciseconds") == "deciseconds"
    assert service.zoom_out("years") == "decades"
    assert service.zoom_out("decades") == "decades"
    assert service.can_zoom_in("minutes")
    assert not service.can_zoom_in("deciseconds")
    assert not service.can_zoom_out("decades")


def test_natural_extent_of_leap_february(service) -> None:
    assert service.natural_extent("months", datetime(2024, 2, 10)) == (
        datetime(2024, 2, 1),
        datetime(2024, 2, 29, 23, 59, 59, 999000),
    )


def test_zoom_in_extent_expands_to_whole_units(service) -> None:
    extent = service.calculate_zoom_in_extent(datetime(2024, 6, 10), datetime(2024, 8, 5), "months")
    assert extent == (datetime(2024, 6, 1), END_OF_AUGUST)


def test_zoom_out_extent_is_clamped_to_bounds(service) -> None:
    extent = service.calculate_zoom_out_extent(
        datetime(2024, 6, 10),
        datetime(2024, 8, 5),
        "years",
        datetime(2024, 3, 1),
        datetime(2030, 1, 1),
    )
    assert extent == (datetime(2024, 3, 1), datetime(2024, 12, 31, 23, 59, 59, 999000))


def test_zoom_in_needs_two_steps_at_finer_level(service) -> None:
    assert not service.can_zoom_in_selection(datetime(2024, 6, 1), datetime(2024, 6, 20), "years")
    assert service.can_zoom_in_selection(datetime(2024, 6, 1), datetime(2024, 8, 1), "years")
    assert not service.can_zoom_in_selection(datetime(2024, 6, 1), datetime(2024, 8, 1), "deciseconds")


def test_slider_mapping(service) -> None:
    start = datetime(2024, 1, 1)
    assert service.calculate_steps(start, datetime(2024, 1, 11), "days") == 10
    assert service.date_to_slider_value(datetime(2024, 1, 4, 13), start, "days") == 4
    assert service.slider_value_to_date(4, start, "days") == datetime(2024, 1, 5)


def test_initial_level_keeps_full_range_coarse(service, full_range) -> None:
    assert service.initial_level(*full_range) == "years"
    assert service.initial_level(datetime(2024, 1, 1), datetime(2024, 1, 1, 0, 0, 2)) == "deciseconds"


def test_tick_labels_are_evenly_spaced(service) -> None:
    ticks = service.generate_tick_labels(datetime(2024, 1, 1), datetime(2024, 1, 11), "days", 5)

    assert [t.label for t in ticks] == ["Jan 1", "Jan 3", "Jan 5", "Jan 7", "Jan 9", "Jan 11"]
    assert [t.position for t in ticks] == pytest.approx([0, 20, 40, 60, 80, 100])
    assert not any(t.major for t in ticks)


def test_tick_labels_for_empty_extent(service) -> None:
    moment = datetime(2024, 1, 1)
    assert service.generate_tick_labels(moment, moment, "days") == []


def test_width_never_moves_snap_level(service) -> None:
    assert service.resolve_level(1.0, "years") == "years"
    assert service.extent_for("months", datetime(2024, 6, 10), datetime(2024, 8, 5))[1] == END_OF_AUGUST


def test_engines_satisfy_shared_capability() -> None:
    assert isinstance(create_engine("snap"), GranularityEngine)
    assert isinstance(create_engine("adaptive"), GranularityEngine)
    assert create_engine("snap", max_ticks=3).max_ticks == 3
    with pytest.raises(ValueError):
        create_engine("elastic")
