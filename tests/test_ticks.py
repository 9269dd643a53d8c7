from __future__ import annotations

from datetime import datetime

import pytest

from time_range_slider.ticks import Tick, generate_ticks, major_tick_dates


def _ticks(start, end, level):
    return generate_ticks(start, end, level, start, end)


def test_months_within_one_year_have_no_major_ticks() -> None:
    ticks = _ticks(datetime(2024, 1, 1), datetime(2024, 12, 31, 23, 59, 59, 999000), "months")

    assert [t.label for t in ticks] == ["2024", "Mar", "May", "Jul", "Sep", "Nov"]
    assert not any(t.major for t in ticks)
    assert ticks[0].position == 0


def test_year_boundary_is_a_single_major_tick() -> None:
    ticks = _ticks(datetime(2023, 7, 1), datetime(2024, 6, 30), "months")

    labels = [t.label for t in ticks]
    assert labels == ["Jul", "Sep", "Nov", "2024", "Mar", "May"]
    majors = [t for t in ticks if t.major]
    assert len(majors) == 1
    assert majors[0].major_label == "2024"
    assert 45 < majors[0].position < 55


def test_minor_tick_on_major_instant_is_dropped() -> None:
    ticks = _ticks(datetime(2024, 3, 20), datetime(2024, 4, 10), "days")

    labels = [t.label for t in ticks]
    assert labels == ["Mar 20", "Mar 23", "Mar 26", "Mar 29", "Apr 1", "Apr 4", "Apr 7", "Apr 10"]
    assert [t.label for t in ticks if t.major] == ["Apr 1"]
    assert len({t.position for t in ticks}) == len(ticks)
    assert ticks[-1].position == 100


def test_major_hidden_near_edge_keeps_its_minor_tick() -> None:
    ticks = _ticks(datetime(2024, 3, 2), datetime(2024, 4, 1, 6), "days")

    assert not any(t.major for t in ticks)
    assert [t.label for t in ticks] == ["Mar 2", "Mar 7", "Mar 12", "Mar 17", "Mar 22", "Mar 27", "Apr 1"]
    assert ticks[-1].position == pytest.approx(30 / 30.25 * 100)


def test_year_ticks_are_aligned_to_multiples_of_step(full_range) -> None:
    ticks = _ticks(*full_range, "years")

    assert [t.label for t in ticks] == ["2000", "2005", "2010", "2015", "2020", "2025"]


def test_ticks_are_sorted_and_inside_track() -> None:
    ticks = _ticks(datetime(2024, 3, 1, 22, 15), datetime(2024, 3, 3, 4, 45), "hours")

    positions = [t.position for t in ticks]
    assert positions == sorted(positions)
    assert all(0 <= p <= 100 for p in positions)
    assert any(t.major and t.major_label == "Mar 2" for t in ticks)


def test_empty_extent_yields_no_ticks() -> None:
    moment = datetime(2024, 1, 1)
    assert generate_ticks(moment, moment, "days", moment, moment) == []


def test_years_level_has_no_parent_unit() -> None:
    assert major_tick_dates(datetime(1990, 1, 1), datetime(2030, 1, 1), "years") == []


def test_tick_as_dict_omits_missing_major_label() -> None:
    assert Tick(10.0, "Mar").as_dict() == {"position": 10.0, "label": "Mar", "major": False}
    assert Tick(50.0, "2024", True, "2024").as_dict()["major_label"] == "2024"


def test_ticks_stop_at_the_last_representable_year() -> None:
    ticks = _ticks(datetime(9999, 1, 1), datetime(9999, 12, 31), "months")

    assert ticks
    assert not any(t.major for t in ticks)
    assert ticks[0].label == "9999"
    assert all(0 <= t.position <= 100 for t in ticks)
    assert major_tick_dates(datetime(9999, 1, 1), datetime(9999, 12, 31), "months") == []
