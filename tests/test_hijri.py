"""Tests for Hijri calendar conversion."""

from datetime import date

import pytest

from exam_schedule_parser.exceptions import OutOfRangeError
from exam_schedule_parser.hijri import (
    format_hijri_date,
    is_hijri_year,
    is_leap_year,
    month_length,
    parse_hijri_date,
    to_gregorian,
    to_hijri,
    year_length,
)


class TestToGregorian:
    """Tests for to_gregorian function."""

    def test_pinned_date(self):
        """Test 1447-07-01 converts to its fixed Gregorian date."""
        assert to_gregorian(1447, 7, 1) == date(2025, 12, 17)

    def test_deterministic(self):
        """Test repeated conversions give the same result."""
        assert to_gregorian(1446, 9, 1) == to_gregorian(1446, 9, 1)

    def test_consecutive_days(self):
        """Test consecutive Hijri days map to consecutive Gregorian days."""
        first = to_gregorian(1447, 7, 1)
        second = to_gregorian(1447, 7, 2)
        assert (second - first).days == 1

    def test_month_boundary(self):
        """Test the first day of a month follows the last day of the previous."""
        last = to_gregorian(1447, 6, month_length(1447, 6))
        first = to_gregorian(1447, 7, 1)
        assert (first - last).days == 1

    def test_year_boundary(self):
        """Test a new year follows the last day of month 12."""
        last = to_gregorian(1446, 12, month_length(1446, 12))
        first = to_gregorian(1447, 1, 1)
        assert (first - last).days == 1

    @pytest.mark.parametrize("year", [1199, 1600, 2025])
    def test_out_of_range(self, year):
        """Test years outside [1200, 1600) raise OutOfRangeError."""
        with pytest.raises(OutOfRangeError) as exc_info:
            to_gregorian(year, 1, 1)
        assert exc_info.value.year == year

    def test_range_edges(self):
        """Test the band includes 1200 and excludes 1600."""
        assert to_gregorian(1200, 1, 1) < to_gregorian(1599, 12, 29)

    @pytest.mark.parametrize("month, day", [(0, 1), (13, 1), (1, 0), (1, 31)])
    def test_invalid_positions(self, month, day):
        """Test invalid months and days raise ValueError."""
        with pytest.raises(ValueError):
            to_gregorian(1447, month, day)


class TestCalendarArithmetic:
    """Tests for leap years and month lengths."""

    def test_leap_positions(self):
        """Test leap years follow the 30-year cycle."""
        assert is_leap_year(1442)  # 1442 % 30 == 2
        assert not is_leap_year(1441)

    def test_year_lengths(self):
        """Test year lengths are 354 or 355 days."""
        assert year_length(1442) == 355
        assert year_length(1441) == 354

    def test_month_twelve_in_leap_year(self):
        """Test month 12 has 30 days in a leap year."""
        assert month_length(1442, 12) == 30
        assert month_length(1441, 12) == 29

    def test_alternating_months(self):
        """Test months alternate between 30 and 29 days."""
        assert [month_length(1441, m) for m in range(1, 5)] == [30, 29, 30, 29]


class TestToHijri:
    """Tests for to_hijri function."""

    def test_inverse_of_pinned_date(self):
        """Test the pinned date converts back."""
        assert to_hijri(date(2025, 12, 17)) == (1447, 7, 1)

    @pytest.mark.parametrize("hijri", [(1200, 1, 1), (1442, 12, 30), (1447, 7, 15), (1599, 12, 29)])
    def test_inverse(self, hijri):
        """Test to_hijri undoes to_gregorian."""
        assert to_hijri(to_gregorian(*hijri)) == hijri

    def test_before_epoch(self):
        """Test dates before the epoch raise ValueError."""
        with pytest.raises(ValueError):
            to_hijri(date(600, 1, 1))


class TestHijriStrings:
    """Tests for Hijri string helpers."""

    def test_parse_hijri_date(self):
        """Test a Hijri ISO string converts to Gregorian ISO."""
        assert parse_hijri_date("1447-07-01") == "2025-12-17"
        assert parse_hijri_date("1447/7/1") == "2025-12-17"

    def test_parse_gregorian_year_is_none(self):
        """Test a year outside the band is not read as Hijri."""
        assert parse_hijri_date("2025-12-17") is None

    def test_parse_invalid(self):
        """Test unreadable strings give None."""
        assert parse_hijri_date("TBA") is None
        assert parse_hijri_date("1447-13-01") is None

    def test_custom_year_range(self):
        """Test a narrower band excludes years outside it."""
        assert parse_hijri_date("1447-07-01", year_range=(1400, 1440)) is None

    def test_format_hijri_date(self):
        """Test a Gregorian ISO date formats as Hijri."""
        assert format_hijri_date("2025-12-17") == "1447-07-01"
        assert format_hijri_date("not a date") == "not a date"

    def test_is_hijri_year(self):
        """Test the default band."""
        assert is_hijri_year(1447)
        assert not is_hijri_year(2025)
        assert is_hijri_year(2025, year_range=(2000, 2100))
