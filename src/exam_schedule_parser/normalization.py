"""Normalization of course codes, class numbers and header labels.

Course codes from enrollment files and from exam schedules both pass through
``normalize_course_code`` before they are stored, so that "cs 101", "CS-101"
and "CS101" compare equal. No other module compares raw codes.
"""

import re

import pandas as pd

from .constants import ARABIC_DIGITS

# Whitespace and punctuation between the letter and digit runs
CODE_NOISE_PATTERN = re.compile(r"[\W_]+")
FLOAT_INTEGER_PATTERN = re.compile(r"^(\d+)\.0+$")


def convert_arabic_numerals(text: str) -> str:
    """Replace Arabic-Indic digits with ASCII digits.

    Args:
        text: Text that may contain digits like "٨:٠٠"

    Returns:
        Text with Western digits
    """
    return text.translate(ARABIC_DIGITS)


def normalize_course_code(raw) -> str:
    """Canonicalize a course code for comparison.

    Trims the value, removes whitespace and punctuation between the letter
    and digit runs and upper-cases the letters. The function is idempotent.

    Args:
        raw: Course code as read from a spreadsheet (e.g. " cs 101", "281 qurn")

    Returns:
        Canonical course code (e.g. "CS101", "281QURN")
    """
    if raw is None:
        return ""
    try:
        if pd.isna(raw):
            return ""
    except (TypeError, ValueError):
        pass

    text = convert_arabic_numerals(str(raw)).strip()
    return CODE_NOISE_PATTERN.sub("", text).upper()


def normalize_class_no(raw) -> str:
    """Canonicalize a class/section number.

    Values are trimmed but never case-folded. Numeric cells read as floats
    ("3.0") are reduced to their integer text.

    Args:
        raw: Class or section number

    Returns:
        Trimmed class number
    """
    if raw is None:
        return ""
    try:
        if pd.isna(raw):
            return ""
    except (TypeError, ValueError):
        pass

    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))

    text = convert_arabic_numerals(str(raw)).strip()
    match = FLOAT_INTEGER_PATTERN.match(text)
    if match:
        return match.group(1)
    return text


def normalize_header(header, strip_article: bool = False) -> str:
    """Normalize a header label for matching.

    Lower-cases the label and collapses whitespace to underscores. With
    ``strip_article`` the Arabic definite article "ال" and the English
    "the_" prefix are removed as well.

    Args:
        header: Header cell text
        strip_article: Remove a leading definite article

    Returns:
        Normalized header key
    """
    if header is None:
        return ""
    text = re.sub(r"\s+", "_", str(header).strip().lower())
    text = text.rstrip(":：")
    if strip_article:
        if text.startswith("ال"):
            text = text[2:]
        if text.startswith("the_"):
            text = text[4:]
    return text


def normalize_range(raw) -> str | None:
    """Normalize a seat-row range such as "1 - 8" to "1-8"."""
    if raw is None:
        return None
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    text = str(raw).strip()
    if not text:
        return None
    return re.sub(r"\s*-\s*", "-", text)
