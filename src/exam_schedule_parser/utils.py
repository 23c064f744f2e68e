"""Utility functions for the exam schedule parser."""

import re
from datetime import date, datetime, time, timedelta

import pandas as pd

from .constants import ARABIC_AM, ARABIC_PM
from .normalization import convert_arabic_numerals

# Excel's day zero (serial 1 is 1900-01-01, with the 1900 leap-year bug)
EXCEL_EPOCH = date(1899, 12, 30)
EXCEL_MAX_SERIAL = 2958465  # 9999-12-31

TIME_PATTERN = re.compile(
    r"(\d{1,2}):(\d{2})(?::\d{2})?\s*(am|pm|a\.m\.|p\.m\.|" + ARABIC_AM + "|" + ARABIC_PM + ")?",
    re.IGNORECASE,
)
TIME_MARKER_FIRST_PATTERN = re.compile(
    r"(?<![^\W\d_])(am|pm|" + ARABIC_AM + "|" + ARABIC_PM + r")\s*(\d{1,2}):(\d{2})",
    re.IGNORECASE,
)


def safe_int(value, default: int = 0) -> int:
    """Safely convert a value to integer.

    Args:
        value: Value to convert
        default: Default value if conversion fails

    Returns:
        Integer value
    """
    if value is None or pd.isna(value):
        return default
    try:
        return int(float(convert_arabic_numerals(str(value)).strip()))
    except (ValueError, TypeError):
        return default


def safe_str(value, default: str = "") -> str:
    """Safely convert a value to string.

    Args:
        value: Value to convert
        default: Default value if conversion fails

    Returns:
        String value
    """
    if value is None or pd.isna(value):
        return default
    return str(value).strip()


def cell_text(value) -> str:
    """Display text for a cell value.

    Integral floats lose their ".0", datetimes at midnight become ISO dates
    and times become "HH:MM".
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        if pd.isna(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def is_number(value) -> bool:
    """Check for an int or float cell value (bools excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool) and not pd.isna(value)


def excel_serial_to_date(serial: float) -> date | None:
    """Convert an Excel serial day number to a date.

    Args:
        serial: Days since 1899-12-30

    Returns:
        Date, or None if the serial is out of Excel's range
    """
    if not 1 <= serial <= EXCEL_MAX_SERIAL:
        return None
    return EXCEL_EPOCH + timedelta(days=int(serial))


def _format_time(hours: int, minutes: int) -> str | None:
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        return None
    return f"{hours:02d}:{minutes:02d}"


def _apply_meridiem(hours: int, marker: str | None) -> int:
    if not marker:
        return hours
    marker = marker.lower().replace(".", "")
    if marker in ("am", ARABIC_AM):
        return 0 if hours == 12 else hours
    return hours if hours == 12 else hours + 12


def parse_time(value) -> str | None:
    """Parse a cell value into "HH:MM".

    Accepts datetime/time values, Excel day fractions, 24-hour text,
    "H:MM AM/PM" and Arabic "H:MM ص/م" with Arabic-Indic digits, with the
    marker before or after the time.

    Args:
        value: Cell value or display text

    Returns:
        Time as "HH:MM", or None if the value is not a time
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.strftime("%H:%M")
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if is_number(value):
        if 0 <= value < 1:
            total_minutes = round(value * 24 * 60)
            return _format_time(total_minutes // 60 % 24, total_minutes % 60)
        return None

    text = convert_arabic_numerals(str(value)).strip()
    if not text:
        return None

    match = TIME_PATTERN.search(text)
    if match and match.group(3):
        hours = _apply_meridiem(int(match.group(1)), match.group(3))
        return _format_time(hours, int(match.group(2)))

    prefixed = TIME_MARKER_FIRST_PATTERN.search(text)
    if prefixed:
        hours = _apply_meridiem(int(prefixed.group(2)), prefixed.group(1))
        return _format_time(hours, int(prefixed.group(3)))

    if match:
        return _format_time(int(match.group(1)), int(match.group(2)))

    return None


def add_minutes(hhmm: str, minutes: int) -> str:
    """Add minutes to an "HH:MM" time, wrapping at midnight."""
    hours, mins = (int(part) for part in hhmm.split(":")[:2])
    total = (hours * 60 + mins + minutes) % (24 * 60)
    return f"{total // 60:02d}:{total % 60:02d}"
