"""Exam and lecturer schedule extraction.

Exam-office exports are flat tables. Dates arrive as ISO text (often Hijri),
real date cells, Excel serial numbers or DD/MM/YYYY text, and are always
stored as Gregorian ISO dates.
"""

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Iterator
from datetime import date, datetime

from .columns import REQUIRED_FIELDS, locate_header
from .config import ExtractionSettings
from .constants import (
    CALENDAR_AUTO,
    CALENDAR_GREGORIAN,
    CALENDAR_HIJRI,
    CALENDAR_HINTS,
    FILE_TYPE_EXAM,
    FILE_TYPE_LECTURER,
)
from .exceptions import OutOfRangeError, RecordRejectedError
from .hijri import is_hijri_year, to_gregorian
from .models import ExamRecord, LecturerExamRecord, RowError
from .normalization import convert_arabic_numerals, normalize_range
from .utils import add_minutes, excel_serial_to_date, is_number, parse_time, safe_int
from .validators import RowValidator, validate_exam_date, validate_time
from .workbook import Worksheet

logger = logging.getLogger(__name__)

YMD_PATTERN = re.compile(r"^(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})")
DMY_PATTERN = re.compile(r"^(\d{1,2})[-/.](\d{1,2})[-/.](\d{4})$")


def _resolve_date(
    year: int, month: int, day: int, calendar: str, year_range: tuple[int, int]
) -> str | None:
    """Turn a (year, month, day) triple into a Gregorian ISO date.

    Raises:
        OutOfRangeError: If calendar is "hijri" and the year is outside the band
    """
    if calendar == CALENDAR_HIJRI:
        try:
            return to_gregorian(year, month, day).isoformat()
        except ValueError:
            return None

    if calendar == CALENDAR_AUTO and is_hijri_year(year, year_range):
        try:
            return to_gregorian(year, month, day).isoformat()
        except OutOfRangeError:
            pass
        except ValueError:
            return None

    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def parse_exam_date(
    value,
    text: str,
    calendar: str = CALENDAR_AUTO,
    year_range: tuple[int, int] | None = None,
) -> str | None:
    """Parse an exam date cell into a Gregorian ISO date.

    Tried in order: "YYYY-MM-DD" text, date cells, Excel serial numbers and
    "DD/MM/YYYY" text. With ``calendar="auto"`` a year inside the Hijri band
    is read as Hijri; ``"hijri"`` and ``"gregorian"`` force the calendar.

    Args:
        value: Underlying cell value
        text: Display text of the cell
        calendar: "auto", "hijri" or "gregorian"
        year_range: Band read as Hijri in auto mode

    Returns:
        Gregorian ISO date, or None if the cell is not a date

    Raises:
        OutOfRangeError: If calendar is "hijri" and the year is outside the band
    """
    if calendar not in CALENDAR_HINTS:
        raise ValueError(f"Unknown calendar: {calendar}. Supported: {', '.join(CALENDAR_HINTS)}")
    year_range = year_range or ExtractionSettings().hijri_year_range
    candidate = convert_arabic_numerals(text or "").strip()

    match = YMD_PATTERN.match(candidate)
    if match:
        year, month, day = (int(part) for part in match.groups())
        return _resolve_date(year, month, day, calendar, year_range)

    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    if is_number(value):
        serial_date = excel_serial_to_date(value)
        return serial_date.isoformat() if serial_date else None

    match = DMY_PATTERN.match(candidate)
    if match:
        day, month, year = (int(part) for part in match.groups())
        return _resolve_date(year, month, day, calendar, year_range)

    return None


class BaseScheduleExtractor(ABC):
    """Base class for table extractors of exam-office exports."""

    file_type: str

    def __init__(
        self,
        settings: ExtractionSettings | None = None,
        dataset_id: str | None = None,
        calendar: str = CALENDAR_AUTO,
    ):
        """Initialize extractor.

        Args:
            settings: Extraction settings
            dataset_id: Identifier stamped on every record
            calendar: Calendar of the date column ("auto", "hijri", "gregorian")
        """
        if calendar not in CALENDAR_HINTS:
            raise ValueError(
                f"Unknown calendar: {calendar}. Supported: {', '.join(CALENDAR_HINTS)}"
            )
        self.settings = settings or ExtractionSettings()
        self.dataset_id = dataset_id
        self.calendar = calendar
        self.rejected: list[RowError] = []
        self.warnings: list[str] = []

    def extract(
        self, worksheet: Worksheet, header_mapping: dict[str, str] | None = None
    ) -> Iterator:
        """Resolve the header, then return a generator over the data rows.

        Args:
            worksheet: Worksheet holding the table
            header_mapping: Field name → header text, or None to auto-detect

        Returns:
            Generator of records in row order

        Raises:
            HeaderMappingError: If required fields cannot be mapped
        """
        header_row, columns = locate_header(
            worksheet, self.file_type, header_mapping, self.settings.header_search_rows
        )
        self.rejected = []
        self.warnings = []
        return self._iter_rows(worksheet, header_row, columns)

    def _iter_rows(self, worksheet: Worksheet, header_row: int, columns: dict[str, int]):
        required = REQUIRED_FIELDS[self.file_type]
        for row in range(header_row + 1, worksheet.n_rows):
            if worksheet.is_empty_row(row):
                continue

            values = {name: worksheet.text(row, col) for name, col in columns.items()}
            validator = RowValidator(row + 1, required)
            valid, errors = validator.validate_required(values)
            try:
                if not valid:
                    field_name, message = errors[0]
                    raise RecordRejectedError(message, row=row + 1, field=field_name)
                yield self._build_record(worksheet, row, columns, values)
            except RecordRejectedError as e:
                logger.debug(str(e))
                self.rejected.append(RowError(row=e.row, field=e.field, message=e.message))

    @abstractmethod
    def _build_record(
        self, worksheet: Worksheet, row: int, columns: dict[str, int], values: dict[str, str]
    ):
        pass

    def _parse_date(self, worksheet: Worksheet, row: int, col: int, field_name: str) -> str:
        cell = worksheet.cell(row, col)
        try:
            exam_date = parse_exam_date(
                cell.value, cell.text, self.calendar, self.settings.hijri_year_range
            )
        except OutOfRangeError as e:
            message = f"Row {row + 1}: {e}; date kept as Gregorian"
            logger.warning(message)
            self.warnings.append(message)
            exam_date = parse_exam_date(cell.value, cell.text, CALENDAR_GREGORIAN)

        valid, message = validate_exam_date(exam_date)
        if not valid:
            raise RecordRejectedError(
                f"{message} ('{cell.text}')", row=row + 1, field=field_name
            )
        return exam_date

    def _parse_time(self, worksheet: Worksheet, row: int, col: int | None) -> str | None:
        if col is None:
            return None
        cell = worksheet.cell(row, col)
        return parse_time(cell.value) or parse_time(cell.text)


class ExamScheduleExtractor(BaseScheduleExtractor):
    """Exam timetable: one ExamRecord per row.

    A missing end time is derived from the start time and
    ``default_exam_duration_minutes``.
    """

    file_type = FILE_TYPE_EXAM

    def _build_record(
        self, worksheet: Worksheet, row: int, columns: dict[str, int], values: dict[str, str]
    ) -> ExamRecord:
        exam_date = self._parse_date(worksheet, row, columns["exam_date"], "exam_date")

        start_time = self._parse_time(worksheet, row, columns["start_time"])
        valid, message = validate_time(start_time, "start_time")
        if not valid:
            raise RecordRejectedError(
                f"{message} ('{values['start_time']}')", row=row + 1, field="start_time"
            )

        end_time = self._parse_time(worksheet, row, columns.get("end_time"))
        if end_time is None:
            end_time = add_minutes(start_time, self.settings.default_exam_duration_minutes)

        seats = None
        if values.get("seats"):
            seats = safe_int(values["seats"], default=None)

        return ExamRecord(
            course_code=values["course_code"],
            course_name=values["course_name"],
            class_no=values["class_no"],
            exam_date=exam_date,
            start_time=start_time,
            end_time=end_time,
            place=values["place"],
            period=values["period"],
            dataset_id=self.dataset_id,
            rows=normalize_range(values.get("rows")),
            seats=seats,
            row=row + 1,
        )


class LecturerScheduleExtractor(BaseScheduleExtractor):
    """Invigilation schedule: one LecturerExamRecord per row."""

    file_type = FILE_TYPE_LECTURER

    def _build_record(
        self, worksheet: Worksheet, row: int, columns: dict[str, int], values: dict[str, str]
    ) -> LecturerExamRecord:
        exam_date = self._parse_date(worksheet, row, columns["exam_date"], "exam_date")
        period_start = self._parse_time(worksheet, row, columns["period_start"])

        number_of_students = None
        if values.get("number_of_students"):
            number_of_students = safe_int(values["number_of_students"], default=None)

        return LecturerExamRecord(
            lecturer_name=values["lecturer_name"],
            section=values["section"],
            course_code=values["course_code"],
            course_name=values["course_name"],
            room=values["room"],
            exam_date=exam_date,
            exam_period=values["exam_period"],
            period_start=period_start or values["period_start"],
            role=values.get("role") or None,
            grade=values.get("grade") or None,
            exam_code=values.get("exam_code") or None,
            number_of_students=number_of_students,
            column=normalize_range(values.get("column")),
            day=values.get("day") or None,
            invigilator=values.get("invigilator") or None,
            dataset_id=self.dataset_id,
            row=row + 1,
        )


def get_schedule_extractor(
    file_type: str,
    settings: ExtractionSettings | None = None,
    dataset_id: str | None = None,
    calendar: str = CALENDAR_AUTO,
) -> BaseScheduleExtractor:
    """Get the table extractor for an exam-office file type.

    Raises:
        ValueError: If file type is not "exam" or "lecturer"
    """
    extractors = {
        FILE_TYPE_EXAM: ExamScheduleExtractor,
        FILE_TYPE_LECTURER: LecturerScheduleExtractor,
    }

    if file_type not in extractors:
        raise ValueError(
            f"Unsupported schedule type: {file_type}. Supported: {', '.join(extractors.keys())}"
        )

    return extractors[file_type](settings, dataset_id, calendar)
