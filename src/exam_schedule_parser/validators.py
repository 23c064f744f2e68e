"""Row validation for extracted records."""

import re

from .constants import STUDENT_ID_MAX_LENGTH, STUDENT_ID_MIN_LENGTH
from .normalization import convert_arabic_numerals
from .patterns import looks_like_course_code

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
HHMM_PATTERN = re.compile(r"^\d{2}:\d{2}$")


def validate_student_id(
    student_id: str,
    min_length: int = STUDENT_ID_MIN_LENGTH,
    max_length: int = STUDENT_ID_MAX_LENGTH,
) -> tuple[bool, str | None]:
    """Validate a student ID.

    Expected format: 6-10 digits. Example: 441234567

    Args:
        student_id: Student ID to validate
        min_length: Shortest accepted ID
        max_length: Longest accepted ID

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not student_id:
        return False, "Student ID is empty"

    value = convert_arabic_numerals(str(student_id)).strip()

    if not value.isascii() or not value.isdigit():
        return False, f"Student ID is not numeric: '{value}'"

    if not min_length <= len(value) <= max_length:
        return False, (
            f"Student ID has {len(value)} digits, expected {min_length}-{max_length}: '{value}'"
        )

    return True, None


def validate_course_code(course_code: str) -> tuple[bool, str | None]:
    """Validate a course code.

    Args:
        course_code: Course code to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not course_code:
        return False, "Course code is empty"

    if not looks_like_course_code(course_code):
        return False, f"Course code doesn't match expected pattern: '{course_code}'"

    return True, None


def validate_exam_date(exam_date: str | None) -> tuple[bool, str | None]:
    if not exam_date:
        return False, "Exam date is empty or unreadable"
    if not ISO_DATE_PATTERN.match(exam_date):
        return False, f"Exam date is not an ISO date: '{exam_date}'"
    return True, None


def validate_time(value: str | None, field_name: str = "time") -> tuple[bool, str | None]:
    if not value:
        return False, f"{field_name} is empty or unreadable"
    if not HHMM_PATTERN.match(value):
        return False, f"Invalid {field_name}: '{value}'"
    return True, None


class RowValidator:
    """Checks that a mapped row carries every required field."""

    def __init__(self, row_index: int, required: list[str]):
        self.row_index = row_index
        self.required = required
        self.errors: list[tuple[str, str]] = []

    def validate_required(self, values: dict[str, str]) -> tuple[bool, list[tuple[str, str]]]:
        """Run required-field checks on row data.

        Args:
            values: Field name → display text

        Returns:
            Tuple of (is_valid, [(field, message), ...])
        """
        self.errors = []
        for field_name in self.required:
            if not str(values.get(field_name) or "").strip():
                self.errors.append((field_name, f"Missing required field '{field_name}'"))
        return len(self.errors) == 0, self.errors
