"""Cell-level predicates shared by structure detection and extraction.

Structure detection and the extractors use these same predicates, so a row
the detector counts as a course row is a row the extractor emits.
"""

import re

from .constants import (
    ANCHOR_COLUMNS,
    CLASS_MARKERS,
    COURSE_DIGITS_FIRST_PATTERN,
    COURSE_LETTERS_FIRST_PATTERN,
    COURSE_NUMBER_MARKERS,
    LABEL_SUFFIXES,
    NAME_MARKERS,
    SECTION_NUMBER_PATTERN,
    STUDENT_ID_HEADER_MARKERS,
    STUDENT_ID_MAX_LENGTH,
    STUDENT_ID_MIN_LENGTH,
)
from .normalization import convert_arabic_numerals, normalize_course_code

LETTERS_FIRST = re.compile(COURSE_LETTERS_FIRST_PATTERN)
DIGITS_FIRST = re.compile(COURSE_DIGITS_FIRST_PATTERN)
SECTION_NUMBER = re.compile(SECTION_NUMBER_PATTERN)
DIGIT_RUN = re.compile(r"\d+", re.ASCII)
HAS_LETTER = re.compile(r"[^\W\d_]")

# Cells after a label that may hold its value
LABEL_VALUE_SPAN = 5


def is_student_id(
    text: str,
    min_length: int = STUDENT_ID_MIN_LENGTH,
    max_length: int = STUDENT_ID_MAX_LENGTH,
) -> bool:
    """Check if a cell is exactly a student ID (a run of 6-10 digits)."""
    candidate = convert_arabic_numerals(str(text)).strip()
    return bool(DIGIT_RUN.fullmatch(candidate)) and min_length <= len(candidate) <= max_length


def extract_course_code(text: str) -> str | None:
    """Find the first course code in a cell.

    Both letters-first ("CS 101") and digits-first ("281 QURN") codes are
    recognized; when both occur, the one that starts earlier wins.

    Args:
        text: Cell text, possibly mixed with a course title

    Returns:
        Normalized course code, or None if the cell holds none
    """
    if not text:
        return None
    candidate = convert_arabic_numerals(str(text))
    matches = [m for m in (LETTERS_FIRST.search(candidate), DIGITS_FIRST.search(candidate)) if m]
    if not matches:
        return None
    first = min(matches, key=lambda m: m.start())
    return normalize_course_code(first.group(0))


def looks_like_course_code(text: str) -> bool:
    return extract_course_code(text) is not None


def is_section_number(text: str) -> bool:
    """Check if a cell is a section number (1-5 digits)."""
    return bool(SECTION_NUMBER.fullmatch(convert_arabic_numerals(str(text)).strip()))


def is_label(text: str) -> bool:
    return str(text).strip().endswith(LABEL_SUFFIXES)


def contains_marker(text: str, markers: list[str]) -> str | None:
    """Return the first marker contained in the text, if any."""
    lowered = str(text).lower()
    for marker in markers:
        if marker in lowered:
            return marker
    return None


def find_marker_column(
    texts: list[str], markers: list[str], exclude: list[str] | None = None
) -> int | None:
    """Find the column of the highest-priority marker in a row.

    Args:
        texts: Row display texts
        markers: Markers in priority order
        exclude: Cells containing any of these are skipped

    Returns:
        Column index, or None if no cell carries a marker
    """
    for marker in markers:
        for col, text in enumerate(texts):
            lowered = text.lower()
            if marker not in lowered:
                continue
            if exclude and contains_marker(lowered, exclude):
                continue
            return col
    return None


def find_labeled_value(texts: list[str], markers: list[str], predicate) -> tuple[str, int] | None:
    """Find a value next to a label such as "المقرر:" or "الشعبة:".

    The value may follow the label inside the same cell (after a colon) or
    sit in one of the next few non-empty cells.

    Args:
        texts: Row display texts
        markers: Label markers
        predicate: Test a candidate value must pass

    Returns:
        (value, column) or None
    """
    for col, text in enumerate(texts):
        if not text or not contains_marker(text, markers):
            continue

        for suffix in LABEL_SUFFIXES:
            if suffix in text:
                inline = text.split(suffix, 1)[1].strip()
                if inline and predicate(inline):
                    return inline, col

        for next_col in range(col + 1, min(col + 1 + LABEL_VALUE_SPAN, len(texts))):
            candidate = texts[next_col]
            if not candidate:
                continue
            if predicate(candidate):
                return candidate, next_col
            if contains_marker(candidate, markers):
                break
    return None


def find_student_anchor(
    texts: list[str],
    min_length: int = STUDENT_ID_MIN_LENGTH,
    max_length: int = STUDENT_ID_MAX_LENGTH,
) -> tuple[int, str] | None:
    """Find a student-ID anchor in the early columns of a row.

    Returns:
        (column, student_id) or None
    """
    for col, text in enumerate(texts[:ANCHOR_COLUMNS]):
        if text and is_student_id(text, min_length, max_length):
            return col, convert_arabic_numerals(text).strip()
    return None


def find_student_id_cell(
    texts: list[str],
    min_length: int = STUDENT_ID_MIN_LENGTH,
    max_length: int = STUDENT_ID_MAX_LENGTH,
) -> tuple[int, str] | None:
    """Find a student-ID cell anywhere in a row."""
    for col, text in enumerate(texts):
        if text and is_student_id(text, min_length, max_length):
            return col, convert_arabic_numerals(text).strip()
    return None


def find_student_name(texts: list[str], skip: set[int]) -> str | None:
    """Pick the student name out of an anchor row.

    The name is the first cell with letters that is neither a label, a
    header marker nor a course code.
    """
    for col, text in enumerate(texts):
        if col in skip or not text:
            continue
        if not HAS_LETTER.search(text) or is_label(text):
            continue
        if contains_marker(text, NAME_MARKERS + STUDENT_ID_HEADER_MARKERS + COURSE_NUMBER_MARKERS):
            continue
        if looks_like_course_code(text):
            continue
        return text
    return None


def is_course_header_row(
    texts: list[str],
    min_length: int = STUDENT_ID_MIN_LENGTH,
    max_length: int = STUDENT_ID_MAX_LENGTH,
) -> bool:
    """Check if a row is a course-list header.

    A header row carries a course-number marker and no course code or
    student ID of its own.
    """
    if find_marker_column(texts, COURSE_NUMBER_MARKERS) is None:
        return False
    if any(looks_like_course_code(text) for text in texts if text):
        return False
    return find_student_id_cell(texts, min_length, max_length) is None


def is_student_id_header_row(texts: list[str]) -> bool:
    return find_marker_column(texts, STUDENT_ID_HEADER_MARKERS) is not None


def find_course_label(texts: list[str]) -> tuple[str, int] | None:
    """Find a labeled course code ("المقرر: CS101") in a row."""
    found = find_labeled_value(texts, COURSE_NUMBER_MARKERS, looks_like_course_code)
    if found is None:
        return None
    value, col = found
    return extract_course_code(value), col


def find_section_label(texts: list[str]) -> tuple[str, int] | None:
    """Find a labeled section number ("الشعبة: 3") in a row."""
    found = find_labeled_value(texts, CLASS_MARKERS, is_section_number)
    if found is None:
        return None
    value, col = found
    return convert_arabic_numerals(value).strip(), col
