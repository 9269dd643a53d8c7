from __future__ import annotations

from datetime import date, datetime

import pytest

from time_range_slider import date_utils as du

SAMPLE = datetime(2024, 3, 16, 14, 37, 42, 345678)


@pytest.mark.parametrize(
    "unit, start, end",
    [
        ("decade", datetime(2020, 1, 1), datetime(2029, 12, 31, 23, 59, 59, 999000)),
        ("year", datetime(2024, 1, 1), datetime(2024, 12, 31, 23, 59, 59, 999000)),
        ("month", datetime(2024, 3, 1), datetime(2024, 3, 31, 23, 59, 59, 999000)),
        ("day", datetime(2024, 3, 16), datetime(2024, 3, 16, 23, 59, 59, 999000)),
        ("hour", datetime(2024, 3, 16, 14), datetime(2024, 3, 16, 14, 59, 59, 999000)),
        ("minute", datetime(2024, 3, 16, 14, 37), datetime(2024, 3, 16, 14, 37, 59, 999000)),
        ("second", datetime(2024, 3, 16, 14, 37, 42), datetime(2024, 3, 16, 14, 37, 42, 999000)),
        (
            "decisecond",
            datetime(2024, 3, 16, 14, 37, 42, 300000),
            datetime(2024, 3, 16, 14, 37, 42, 399000),
        ),
    ],
)
def test_unit_boundaries_are_inclusive(unit, start, end) -> None:
    assert du.start_of(unit, SAMPLE) == start
    assert du.end_of(unit, SAMPLE) == end


def test_end_of_month_handles_leap_years() -> None:
    assert du.end_of_month(datetime(2024, 2, 10)).day == 29
    assert du.end_of_month(datetime(2023, 2, 10)).day == 28
    assert du.end_of_month(datetime(2023, 12, 1)) == datetime(2023, 12, 31, 23, 59, 59, 999000)
    assert du.end_of_month(datetime(9999, 12, 5)) == datetime(9999, 12, 31, 23, 59, 59, 999000)


def test_decade_boundary_uses_floor_of_year() -> None:
    assert du.start_of_decade(datetime(1995, 9, 3)) == datetime(1990, 1, 1)
    assert du.end_of_decade(datetime(1990, 1, 1)).year == 1999


def test_unknown_unit_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown calendar unit"):
        du.start_of("fortnight", SAMPLE)


def test_snap_to_month_rounds_day_sixteen_up() -> None:
    assert du.snap_to_month(datetime(2024, 3, 16)) == datetime(2024, 4, 1)
    assert du.snap_to_month(datetime(2024, 3, 15, 23, 59)) == datetime(2024, 3, 1)
    assert du.snap_to_month(datetime(2024, 12, 20)) == datetime(2025, 1, 1)


@pytest.mark.parametrize(
    "unit, value, expected",
    [
        ("decade", datetime(2025, 1, 1), datetime(2030, 1, 1)),
        ("decade", datetime(2024, 12, 31), datetime(2020, 1, 1)),
        ("year", datetime(2024, 7, 1), datetime(2025, 1, 1)),
        ("year", datetime(2024, 6, 30), datetime(2024, 1, 1)),
        ("day", datetime(2024, 3, 16, 12), datetime(2024, 3, 17)),
        ("day", datetime(2024, 3, 16, 11, 59), datetime(2024, 3, 16)),
        ("hour", datetime(2024, 3, 16, 9, 30), datetime(2024, 3, 16, 10)),
        ("hour", datetime(2024, 3, 16, 9, 29), datetime(2024, 3, 16, 9)),
        ("minute", datetime(2024, 3, 16, 9, 5, 30), datetime(2024, 3, 16, 9, 6)),
        ("second", datetime(2024, 3, 16, 9, 5, 5, 500000), datetime(2024, 3, 16, 9, 5, 6)),
        ("decisecond", datetime(2024, 1, 1, 0, 0, 0, 150000), datetime(2024, 1, 1, 0, 0, 0, 200000)),
    ],
)
def test_snap_to_nearest_boundary(unit, value, expected) -> None:
    assert du.snap_to(unit, value) == expected


def test_clamp_date_bounds_and_returns_fresh_instant() -> None:
    lower, upper = datetime(2024, 1, 1), datetime(2024, 12, 31)
    inside = datetime(2024, 6, 1)

    assert du.clamp_date(datetime(2023, 5, 1), lower, upper) == lower
    assert du.clamp_date(datetime(2025, 5, 1), lower, upper) == upper
    clamped = du.clamp_date(inside, lower, upper)
    assert clamped == inside
    assert clamped is not inside


def test_millisecond_conversion() -> None:
    assert du.to_ms(datetime(1970, 1, 1, 0, 0, 1)) == 1000
    assert du.from_ms(1500.4) == datetime(1970, 1, 1, 0, 0, 1, 500000)
    assert du.span_ms(datetime(2024, 1, 1), datetime(2024, 1, 2)) == du.MS_PER_DAY


def test_calendar_month_stepping() -> None:
    assert du.add_months(datetime(2024, 11, 15), 3) == datetime(2025, 2, 1)
    assert du.add_months(datetime(2024, 1, 31), -1) == datetime(2023, 12, 1)
    assert du.months_between(datetime(2023, 7, 1), datetime(2024, 6, 30)) == 11
    assert du.next_start("month", datetime(2024, 12, 10)) == datetime(2025, 1, 1)
    assert du.next_start("decade", datetime(1995, 9, 3)) == datetime(2000, 1, 1)


def test_labels() -> None:
    assert du.format_decade(datetime(1995, 9, 3)) == "1990s"
    assert du.format_month(datetime(2024, 1, 5)) == "Jan 2024"
    assert du.format_day(datetime(2024, 1, 5)) == "Jan 5"
    assert du.format_minute(datetime(2024, 1, 5, 14, 5)) == "14:05"
    assert du.format_decisecond(datetime(2024, 1, 5, 14, 5, 9, 345000)) == "14:05:09.3"
    assert du.format_day_thumb(datetime(2024, 6, 1)) == "Jun 1, 2024"


def test_month_tick_shows_year_at_year_boundary() -> None:
    assert du.format_month_tick(datetime(2024, 1, 1)) == "2024"
    assert du.format_month_tick(datetime(2024, 3, 1)) == "Mar"


def test_parse_instant_accepts_dates_strings_and_aware_values() -> None:
    assert du.parse_instant("2024-06-01") == datetime(2024, 6, 1)
    assert du.parse_instant(date(2024, 6, 1)) == datetime(2024, 6, 1)
    assert du.parse_instant("2024-06-01T10:00:00Z").tzinfo is None
    with pytest.raises(TypeError):
        du.parse_instant(12345)


def test_parse_instant_truncates_to_whole_milliseconds() -> None:
    value = du.parse_instant(datetime(2024, 1, 1, 0, 0, 0, 1500))
    assert value == datetime(2024, 1, 1, 0, 0, 0, 1000)
    assert du.from_ms(du.to_ms(value)) == value
    assert du.parse_instant("2024-01-01T00:00:00.000999") == datetime(2024, 1, 1)


def test_boundaries_past_year_9999_are_absent() -> None:
    assert du.next_start("year", datetime(9999, 6, 1)) is None
    assert du.next_start("decade", datetime(9995, 1, 1)) is None
    assert du.next_start("month", datetime(9999, 11, 5)) == datetime(9999, 12, 1)
    assert du.snap_to("decade", datetime(9995, 1, 1)) == datetime(9990, 1, 1)
    assert du.snap_to("month", datetime(9999, 12, 20)) == datetime(9999, 12, 1)
