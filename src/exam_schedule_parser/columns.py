"""Header-to-field mapping for table layouts.

A header mapping maps field names to the header text of the column that
holds them, e.g. ``{"course_code": "رمز المقرر"}``. Headers are matched
exactly first, then after normalization, then by containment.
"""

import logging
import re

from .constants import FILE_TYPE_ENROLL, FILE_TYPE_EXAM, FILE_TYPE_LECTURER
from .exceptions import HeaderMappingError
from .normalization import normalize_header
from .workbook import Worksheet

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {
    FILE_TYPE_ENROLL: ["student_id", "course_code"],
    FILE_TYPE_EXAM: [
        "course_code",
        "course_name",
        "class_no",
        "exam_date",
        "start_time",
        "place",
        "period",
    ],
    FILE_TYPE_LECTURER: [
        "lecturer_name",
        "section",
        "course_code",
        "course_name",
        "room",
        "exam_date",
        "exam_period",
        "period_start",
    ],
}

OPTIONAL_FIELDS = {
    FILE_TYPE_ENROLL: ["class_no", "student_name"],
    FILE_TYPE_EXAM: ["end_time", "rows", "seats"],
    FILE_TYPE_LECTURER: [
        "role",
        "grade",
        "exam_code",
        "number_of_students",
        "column",
        "day",
        "invigilator",
    ],
}

# Known header spellings per field, most specific first
EQUIVALENT_HEADERS = {
    FILE_TYPE_ENROLL: {
        "student_id": ["رقم الطالب", "الرقم الجامعي", "student id", "student no", "studentid"],
        "course_code": ["رقم المقرر", "رمز المقرر", "course code", "course no", "coursecode", "code"],
        "class_no": ["الشعبة", "شعبة", "class no", "classno", "class", "section"],
        "student_name": ["اسم الطالب", "student name", "studentname", "name"],
    },
    FILE_TYPE_EXAM: {
        "course_code": ["رمز المقرر", "رقم المقرر", "course code", "coursecode", "code"],
        "course_name": ["اسم المقرر", "course name", "coursename", "title", "name"],
        "class_no": ["الشعبة", "شعبة", "class no", "classno", "class", "section"],
        "exam_date": ["تاريخ الاختبار", "التاريخ", "تاريخ", "exam date", "examdate", "date"],
        "start_time": [
            "بداية الفترة",
            "وقت البداية",
            "start time",
            "starttime",
            "start",
            "begin",
            "وقت",
        ],
        "end_time": ["نهاية الفترة", "وقت النهاية", "نهاية", "end time", "endtime", "end", "finish"],
        "place": ["القاعة", "قاعة", "المكان", "مكان", "place", "location", "venue", "room"],
        "period": ["فترة الاختبار", "فترة", "period", "exam type", "type"],
        "rows": ["العمود", "عمود", "rows", "row"],
        "seats": ["عدد الطلاب", "عدد", "seats", "seat", "capacity"],
    },
    FILE_TYPE_LECTURER: {
        "lecturer_name": ["اسم المحاضر", "المحاضر", "lecturer's name", "lecturer name", "lecturer"],
        "role": ["الدور", "المنصب", "role"],
        "grade": ["الدرجة", "الرتبة", "grade"],
        "exam_code": ["رمز الاختبار", "exam code", "examcode"],
        "section": ["الشعبة", "شعبة", "section", "class no", "class"],
        "course_code": ["رمز المقرر", "رقم المقرر", "course code", "coursecode"],
        "course_name": ["اسم المقرر", "course name", "coursename"],
        "number_of_students": ["عدد الطلاب", "number of students", "students"],
        "room": ["القاعة", "قاعة", "room", "place"],
        "column": ["العمود", "عمود", "column", "rows"],
        "day": ["اليوم", "day"],
        "exam_date": ["تاريخ الاختبار", "التاريخ", "تاريخ", "exam date", "date"],
        "exam_period": ["فترة الاختبار", "exam period", "examperiod"],
        "period_start": ["بداية الفترة", "period start", "periodstart", "start time"],
        "invigilator": ["المراقب", "invigilator"],
    },
}


def _compact(text: str) -> str:
    """Header key with the article, whitespace and underscores removed."""
    return re.sub(r"[\s_]+", "", normalize_header(text, strip_article=True))


def required_fields(file_type: str) -> list[str]:
    return list(REQUIRED_FIELDS[file_type])


def all_fields(file_type: str) -> list[str]:
    return REQUIRED_FIELDS[file_type] + OPTIONAL_FIELDS[file_type]


def suggest_mapping(headers: list[str], file_type: str) -> dict[str, str]:
    """Suggest a header mapping from known header spellings.

    Each header is assigned to at most one field. Required fields are
    assigned before optional ones.

    Args:
        headers: Header row texts
        file_type: "exam", "enroll" or "lecturer"

    Returns:
        Field name → header text for every field that was found
    """
    equivalents = EQUIVALENT_HEADERS[file_type]
    used: set[int] = set()
    mapping: dict[str, str] = {}

    for field_name in all_fields(file_type):
        for candidate in equivalents.get(field_name, []):
            wanted = _compact(candidate)
            match = next(
                (
                    col
                    for col, header in enumerate(headers)
                    if header and col not in used and wanted and wanted in _compact(header)
                ),
                None,
            )
            if match is not None:
                used.add(match)
                mapping[field_name] = headers[match]
                break

    return mapping


def resolve_mapping(headers: list[str], mapping: dict[str, str]) -> dict[str, int]:
    """Resolve a header mapping to column positions.

    Args:
        headers: Header row texts
        mapping: Field name → header text

    Returns:
        Field name → column index for every header that was found
    """
    columns: dict[str, int] = {}
    for field_name, wanted in mapping.items():
        if not wanted or not str(wanted).strip():
            continue
        wanted = str(wanted).strip()
        col = _find_header(headers, wanted, set(columns.values()))
        if col is None:
            logger.debug(f"Header '{wanted}' for field '{field_name}' not found")
            continue
        columns[field_name] = col
    return columns


def _find_header(headers: list[str], wanted: str, used: set[int]) -> int | None:
    for col, header in enumerate(headers):
        if col not in used and header.strip() == wanted:
            return col

    key = normalize_header(wanted)
    for col, header in enumerate(headers):
        if col not in used and header and normalize_header(header) == key:
            return col

    for col, header in enumerate(headers):
        if len(header.strip()) < 2 or col in used:
            continue
        if wanted in header or header.strip() in wanted:
            return col
    return None


def find_header_row(worksheet: Worksheet, search_rows: int) -> int | None:
    """Return the first non-empty row within the search range."""
    for row in range(min(search_rows, worksheet.n_rows)):
        if not worksheet.is_empty_row(row):
            return row
    return None


def locate_header(
    worksheet: Worksheet,
    file_type: str,
    header_mapping: dict[str, str] | None,
    search_rows: int,
) -> tuple[int, dict[str, int]]:
    """Find the header row and map fields to columns.

    The header row is the first row (within ``search_rows``) on which every
    required field resolves. Without an explicit mapping, one is suggested
    from known header spellings.

    Args:
        worksheet: Worksheet holding the table
        file_type: "exam", "enroll" or "lecturer"
        header_mapping: Field name → header text, or None to auto-detect
        search_rows: Rows to search for the header

    Returns:
        (header_row, field name → column index)

    Raises:
        HeaderMappingError: If required fields cannot be mapped
    """
    required = REQUIRED_FIELDS[file_type]
    first_row = find_header_row(worksheet, search_rows)
    if first_row is None:
        raise HeaderMappingError(list(required))

    best: tuple[int, dict[str, int]] | None = None
    for row in range(first_row, min(search_rows, worksheet.n_rows)):
        headers = worksheet.row_texts(row)
        if not any(headers):
            continue
        mapping = header_mapping or suggest_mapping(headers, file_type)
        columns = resolve_mapping(headers, mapping)
        if all(field_name in columns for field_name in required):
            logger.debug(f"Header row {row + 1} maps {sorted(columns)}")
            return row, columns
        if best is None or len(columns) > len(best[1]):
            best = (row, columns)

    row, columns = best
    missing = [field_name for field_name in required if field_name not in columns]
    headers = [h for h in worksheet.row_texts(row) if h]
    raise HeaderMappingError(missing, headers=headers)
