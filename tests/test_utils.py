"""Tests for utility functions."""

from datetime import date, datetime, time

import pytest

from exam_schedule_parser.utils import (
    add_minutes,
    cell_text,
    excel_serial_to_date,
    is_number,
    parse_time,
    safe_int,
    safe_str,
)


class TestSafeInt:
    """Tests for safe_int function."""

    def test_int_value(self):
        """Test integer value."""
        assert safe_int(5) == 5

    def test_float_value(self):
        """Test float value."""
        assert safe_int(5.7) == 5

    def test_string_value(self):
        """Test string value."""
        assert safe_int("10") == 10

    def test_arabic_digits(self):
        """Test Arabic-Indic digits."""
        assert safe_int("٣٠") == 30

    def test_none_value(self):
        """Test None value."""
        assert safe_int(None) == 0

    def test_invalid_string(self):
        """Test invalid string."""
        assert safe_int("abc") == 0

    def test_custom_default(self):
        """Test custom default value."""
        assert safe_int(None, default=-1) == -1
        assert safe_int("abc", default=None) is None


class TestSafeStr:
    """Tests for safe_str function."""

    def test_string_value(self):
        """Test string value."""
        assert safe_str("  hello  ") == "hello"

    def test_number_value(self):
        """Test number value."""
        assert safe_str(123) == "123"

    def test_none_value(self):
        """Test None value."""
        assert safe_str(None) == ""


class TestCellText:
    """Tests for cell_text function."""

    def test_none(self):
        """Test empty cells give an empty string."""
        assert cell_text(None) == ""

    def test_integral_float(self):
        """Test integral floats lose their fraction."""
        assert cell_text(441000001.0) == "441000001"
        assert cell_text(2.5) == "2.5"

    def test_midnight_datetime(self):
        """Test a date cell renders as an ISO date."""
        assert cell_text(datetime(2025, 12, 17)) == "2025-12-17"

    def test_datetime_with_time(self):
        """Test a datetime keeps its time."""
        assert cell_text(datetime(2025, 12, 17, 8, 30)) == "2025-12-17 08:30"

    def test_date_and_time(self):
        """Test date and time values."""
        assert cell_text(date(2025, 12, 17)) == "2025-12-17"
        assert cell_text(time(13, 5)) == "13:05"

    def test_string_trimmed(self):
        """Test strings are trimmed."""
        assert cell_text("  CS 101 ") == "CS 101"


class TestParseTime:
    """Tests for parse_time function."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("08:00", "08:00"),
            ("8:00 AM", "08:00"),
            ("1:30 PM", "13:30"),
            ("1:30 p.m.", "13:30"),
            ("12:00 AM", "00:00"),
            ("12:15 PM", "12:15"),
            ("8:00 ص", "08:00"),
            ("١:٠٠ م", "13:00"),
            ("م 1:30", "13:30"),
            ("08:00:00", "08:00"),
        ],
    )
    def test_text_values(self, value, expected):
        """Test time text in 24-hour, English and Arabic formats."""
        assert parse_time(value) == expected

    def test_word_ending_in_marker_is_not_a_marker(self):
        """Test letters inside a word are not read as AM/PM."""
        assert parse_time("exam 8:00") == "08:00"

    def test_time_value(self):
        """Test time and datetime cells."""
        assert parse_time(time(9, 45)) == "09:45"
        assert parse_time(datetime(2025, 12, 17, 14, 0)) == "14:00"

    def test_day_fraction(self):
        """Test Excel day fractions."""
        assert parse_time(0.5) == "12:00"
        assert parse_time(0.375) == "09:00"

    @pytest.mark.parametrize("value", [None, "", "TBA", "25:00", 3])
    def test_not_a_time(self, value):
        """Test values that are not times."""
        assert parse_time(value) is None


class TestExcelSerial:
    """Tests for excel_serial_to_date function."""

    def test_known_serial(self):
        """Test a known serial number."""
        assert excel_serial_to_date(46000) == date(2025, 12, 9)

    def test_out_of_range(self):
        """Test serials outside Excel's range."""
        assert excel_serial_to_date(0) is None
        assert excel_serial_to_date(3_000_000) is None


class TestAddMinutes:
    """Tests for add_minutes function."""

    def test_simple(self):
        """Test adding minutes within a day."""
        assert add_minutes("08:00", 120) == "10:00"

    def test_wraps_at_midnight(self):
        """Test wrapping past midnight."""
        assert add_minutes("23:30", 60) == "00:30"


def test_is_number():
    """Test number detection excludes bools and NaN."""
    assert is_number(3)
    assert is_number(2.5)
    assert not is_number(True)
    assert not is_number(float("nan"))
    assert not is_number("3")
