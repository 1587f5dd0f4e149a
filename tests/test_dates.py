"""Tests for the pure date helpers (almanac/dates.py)."""

from datetime import date

import pytest

from almanac.dates import (
    day_of_year,
    days_in_year,
    format_date_key,
    format_event_range,
    is_date_in_range,
    is_leap_year,
    parse_date,
    weekday_index,
)
from almanac.grid import build_grid


@pytest.mark.parametrize(
    "year,expected",
    [(2024, 366), (2023, 365), (2000, 366), (1900, 365), (2026, 365)],
)
def test_days_in_year(year, expected):
    assert days_in_year(year) == expected
    assert is_leap_year(year) == (expected == 366)


def test_parse_date_is_plain_calendar_date():
    assert parse_date("2026-03-17") == date(2026, 3, 17)


def test_parse_date_rejects_malformed_input():
    with pytest.raises(ValueError):
        parse_date("17/03/2026")


@pytest.mark.parametrize("text", ["2026-1-5", "2026-01-5", " 2026-01-05", "2026-01-05T00:00"])
def test_parse_date_requires_zero_padded_key(text):
    with pytest.raises(ValueError):
        parse_date(text)


def test_day_of_year_bounds():
    assert day_of_year(date(2026, 1, 1)) == 1
    assert day_of_year(date(2026, 12, 31)) == 365
    assert day_of_year(date(2024, 12, 31)) == 366
    assert day_of_year(date(2024, 3, 1)) == 61


def test_format_date_key_zero_pads():
    assert format_date_key(date(2026, 3, 7)) == "2026-03-07"


def test_every_grid_date_round_trips():
    cells, _ = build_grid(2024, 14)
    for cell in cells:
        if cell.is_blank:
            continue
        assert parse_date(format_date_key(cell.date)) == cell.date


def test_weekday_index_is_sunday_first():
    assert weekday_index(date(2026, 1, 4)) == 0  # Sunday
    assert weekday_index(date(2026, 1, 1)) == 4  # Thursday
    assert weekday_index(date(2026, 1, 3)) == 6  # Saturday


def test_format_event_range_same_and_cross_month():
    assert format_event_range(date(2026, 3, 17), date(2026, 3, 23)) == "Mar 17–23"
    assert format_event_range(date(2026, 3, 30), date(2026, 4, 2)) == "Mar 30–Apr 2"


def test_is_date_in_range_is_inclusive_and_order_insensitive():
    start, end = date(2026, 6, 10), date(2026, 6, 15)
    assert is_date_in_range(date(2026, 6, 10), start, end)
    assert is_date_in_range(date(2026, 6, 15), end, start)
    assert not is_date_in_range(date(2026, 6, 16), start, end)
