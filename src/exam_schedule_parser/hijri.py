"""Hijri to Gregorian calendar conversion.

The conversion is arithmetic: it counts days from a fixed epoch using the
30-year intercalation cycle (11 leap years of 355 days, the rest 354 days)
and alternating 30/29-day months, with the 12th month extended to 30 days in
leap years. It gives an internally consistent, deterministic mapping. It does
not reconcile against lunar observation, so results can differ from official
calendars (e.g. Umm al-Qura) by a few days.
"""

import re
from datetime import date, timedelta

from .constants import (
    HIJRI_CYCLE_YEARS,
    HIJRI_LEAP_POSITIONS,
    HIJRI_MAX_YEAR,
    HIJRI_MIN_YEAR,
    HIJRI_MONTH_LENGTHS,
)
from .exceptions import OutOfRangeError

# Day 1 of month 1 of year 1 AH
HIJRI_EPOCH = date(622, 7, 15)

HIJRI_DATE_PATTERN = re.compile(r"^(\d{4})[-/](\d{1,2})[-/](\d{1,2})$")

DAYS_PER_CYCLE = HIJRI_CYCLE_YEARS * 354 + len(HIJRI_LEAP_POSITIONS)


def is_leap_year(year: int) -> bool:
    """Check if a Hijri year is a leap year (355 days)."""
    return year % HIJRI_CYCLE_YEARS in HIJRI_LEAP_POSITIONS


def year_length(year: int) -> int:
    """Number of days in a Hijri year."""
    return 355 if is_leap_year(year) else 354


def month_length(year: int, month: int) -> int:
    """Number of days in a Hijri month."""
    if month == 12 and is_leap_year(year):
        return 30
    return HIJRI_MONTH_LENGTHS[month - 1]


def is_hijri_year(year: int, year_range: tuple[int, int] | None = None) -> bool:
    """Check if a year falls in the band treated as Hijri.

    Args:
        year: Four-digit year
        year_range: (min, max) band, max exclusive. Defaults to [1200, 1600).

    Returns:
        True if the year should be read as a Hijri year
    """
    min_year, max_year = year_range or (HIJRI_MIN_YEAR, HIJRI_MAX_YEAR)
    return min_year <= year < max_year


def _days_before_year(year: int) -> int:
    """Days elapsed from the epoch to the first day of a Hijri year."""
    cycles, rest = divmod(year - 1, HIJRI_CYCLE_YEARS)
    days = cycles * DAYS_PER_CYCLE
    for position in range(1, rest + 1):
        days += 355 if position in HIJRI_LEAP_POSITIONS else 354
    return days


def to_gregorian(year: int, month: int, day: int) -> date:
    """Convert a Hijri date to a Gregorian date.

    Args:
        year: Hijri year, must be in [1200, 1600)
        month: Hijri month (1-12)
        day: Day of month (1-30)

    Returns:
        Gregorian date

    Raises:
        OutOfRangeError: If the year is outside the supported band
        ValueError: If month or day is not a valid calendar position
    """
    if not is_hijri_year(year):
        raise OutOfRangeError(year, HIJRI_MIN_YEAR, HIJRI_MAX_YEAR)
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid Hijri month: {month}")
    if not 1 <= day <= 30:
        raise ValueError(f"Invalid Hijri day: {day}")

    total_days = _days_before_year(year)
    for m in range(1, month):
        total_days += month_length(year, m)
    total_days += day - 1

    return HIJRI_EPOCH + timedelta(days=total_days)


def to_hijri(gregorian: date) -> tuple[int, int, int]:
    """Convert a Gregorian date back to a Hijri (year, month, day).

    Inverse of ``to_gregorian`` under the same arithmetic calendar.
    """
    remaining = (gregorian - HIJRI_EPOCH).days
    if remaining < 0:
        raise ValueError(f"Date before the Hijri epoch: {gregorian.isoformat()}")

    cycles, remaining = divmod(remaining, DAYS_PER_CYCLE)
    year = cycles * HIJRI_CYCLE_YEARS + 1
    while remaining >= year_length(year):
        remaining -= year_length(year)
        year += 1

    month = 1
    while month < 12 and remaining >= month_length(year, month):
        remaining -= month_length(year, month)
        month += 1

    return year, month, remaining + 1


def parse_hijri_date(text: str, year_range: tuple[int, int] | None = None) -> str | None:
    """Convert a "YYYY-MM-DD" Hijri date string to a Gregorian ISO string.

    Args:
        text: Date string such as "1447-07-01"
        year_range: Band treated as Hijri

    Returns:
        Gregorian ISO date, or None if the string is not a Hijri date
    """
    match = HIJRI_DATE_PATTERN.match(str(text).strip())
    if not match:
        return None

    year, month, day = (int(part) for part in match.groups())
    if not is_hijri_year(year, year_range):
        return None

    try:
        return to_gregorian(year, month, day).isoformat()
    except (OutOfRangeError, ValueError):
        return None


def format_hijri_date(gregorian_iso: str) -> str:
    """Format a Gregorian ISO date as a Hijri "YYYY-MM-DD" string.

    Returns the input unchanged if it cannot be parsed.
    """
    try:
        year, month, day = to_hijri(date.fromisoformat(str(gregorian_iso).strip()))
    except ValueError:
        return gregorian_iso
    return f"{year:04d}-{month:02d}-{day:02d}"
