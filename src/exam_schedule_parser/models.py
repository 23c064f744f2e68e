"""Data models for the exam schedule parser."""

from dataclasses import dataclass, field
from enum import Enum

from .normalization import convert_arabic_numerals, normalize_class_no, normalize_course_code


class LayoutType(Enum):
    """Layout shape of a worksheet."""

    TABLE = "table"
    BLOCK_STRUCTURE = "block_structure"
    SECTION_STRUCTURE = "section_structure"


class GapReason(Enum):
    """Why an enrollment has no matching exam."""

    NO_EXAM_FOR_COURSE = "no exam scheduled for this course"
    CLASS_MISMATCH = "class/section mismatch"
    UNSCHEDULED_CLASS = "class number not available"


@dataclass(frozen=True)
class RawCell:
    """A single worksheet cell.

    Attributes:
        row: 0-based row position
        column: 0-based column position
        value: Underlying value (str, int, float, datetime or None)
        text: Display text of the value
    """

    row: int
    column: int
    value: object
    text: str

    @property
    def is_empty(self) -> bool:
        return not self.text


@dataclass
class LayoutClassification:
    """Result of structure detection.

    Attributes:
        layout: Detected layout
        block_count: Number of student blocks (block layout only)
        estimated_rows: Rows consumed by the detected structure
        section_rows: Rows carrying a course/section pair
        anchors: Row positions of the student anchors that opened a block
    """

    layout: LayoutType
    block_count: int = 0
    estimated_rows: int = 0
    section_rows: int = 0
    anchors: list[int] = field(default_factory=list)

    @property
    def is_block_structure(self) -> bool:
        return self.layout == LayoutType.BLOCK_STRUCTURE

    @property
    def is_section_structure(self) -> bool:
        return self.layout == LayoutType.SECTION_STRUCTURE

    def to_dict(self) -> dict:
        """Convert to the preview dictionary."""
        return {
            "isBlockStructure": self.is_block_structure,
            "isSectionStructure": self.is_section_structure,
            "blockCount": self.block_count,
            "estimatedRows": self.estimated_rows,
        }


@dataclass
class EnrollmentRecord:
    """A student's enrollment in one course section.

    Course code and class number are normalized on creation, so records
    built from any layout compare equal on the same course and class.

    Attributes:
        student_id: Digit string (6-10 digits)
        course_code: Normalized course code
        class_no: Normalized class/section number
        student_name: Student name, if the file carries one
        dataset_id: Identifier of the upload the record came from
        row: 1-based source row
    """

    student_id: str
    course_code: str
    class_no: str
    student_name: str | None = None
    dataset_id: str | None = None
    row: int | None = None

    def __post_init__(self):
        self.student_id = convert_arabic_numerals(str(self.student_id)).strip()
        self.course_code = normalize_course_code(self.course_code)
        self.class_no = normalize_class_no(self.class_no)

    @property
    def key(self) -> tuple[str, str]:
        """Match key (course_code, class_no)."""
        return (self.course_code, self.class_no)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "student_id": self.student_id,
            "student_name": self.student_name,
            "course_code": self.course_code,
            "class_no": self.class_no,
            "dataset_id": self.dataset_id,
            "row": self.row,
        }


@dataclass
class SectionEntry:
    """A course/section pair seen in a section-structured roster."""

    course_code: str
    class_no: str
    row: int | None = None

    def __post_init__(self):
        self.course_code = normalize_course_code(self.course_code)
        self.class_no = normalize_class_no(self.class_no)

    def to_dict(self) -> dict:
        return {"course_code": self.course_code, "class_no": self.class_no, "row": self.row}


@dataclass
class ExamRecord:
    """A scheduled exam for one course section.

    Attributes:
        course_code: Normalized course code
        course_name: Course title
        class_no: Normalized class/section number
        exam_date: Gregorian ISO date (YYYY-MM-DD)
        start_time: Start time (HH:MM)
        end_time: End time (HH:MM)
        place: Exam room or hall
        period: Exam period label
        dataset_id: Identifier of the upload the record came from
        rows: Seat-row range such as "1-8"
        seats: Number of seats
        row: 1-based source row
    """

    course_code: str
    course_name: str
    class_no: str
    exam_date: str
    start_time: str
    end_time: str
    place: str
    period: str
    dataset_id: str | None = None
    rows: str | None = None
    seats: int | None = None
    row: int | None = None

    def __post_init__(self):
        self.course_code = normalize_course_code(self.course_code)
        self.class_no = normalize_class_no(self.class_no)

    @property
    def key(self) -> tuple[str, str]:
        """Match key (course_code, class_no)."""
        return (self.course_code, self.class_no)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "course_code": self.course_code,
            "course_name": self.course_name,
            "class_no": self.class_no,
            "exam_date": self.exam_date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "place": self.place,
            "period": self.period,
            "rows": self.rows,
            "seats": self.seats,
            "dataset_id": self.dataset_id,
            "row": self.row,
        }


@dataclass
class LecturerExamRecord:
    """An exam duty assigned to a lecturer."""

    lecturer_name: str
    section: str
    course_code: str
    course_name: str
    room: str
    exam_date: str
    exam_period: str
    period_start: str
    role: str | None = None
    grade: str | None = None
    exam_code: str | None = None
    number_of_students: int | None = None
    column: str | None = None
    day: str | None = None
    invigilator: str | None = None
    dataset_id: str | None = None
    row: int | None = None

    def __post_init__(self):
        self.course_code = normalize_course_code(self.course_code)
        self.section = normalize_class_no(self.section)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "lecturer_name": self.lecturer_name,
            "role": self.role,
            "grade": self.grade,
            "exam_code": self.exam_code,
            "section": self.section,
            "course_code": self.course_code,
            "course_name": self.course_name,
            "number_of_students": self.number_of_students,
            "room": self.room,
            "column": self.column,
            "day": self.day,
            "exam_date": self.exam_date,
            "exam_period": self.exam_period,
            "period_start": self.period_start,
            "invigilator": self.invigilator,
            "dataset_id": self.dataset_id,
            "row": self.row,
        }


@dataclass
class MatchResult:
    """One enrollment paired with its exam, or with a gap reason.

    Attributes:
        enrollment: The enrollment that was looked up
        exam: Matching exam, or None
        gap_reason: Why no exam matched, or None on a match
        course_name: Course title (from the exam, any exam of the course,
            or the course code)
    """

    enrollment: EnrollmentRecord
    exam: ExamRecord | None = None
    gap_reason: GapReason | None = None
    course_name: str = ""

    @property
    def is_matched(self) -> bool:
        return self.exam is not None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "course_code": self.enrollment.course_code,
            "course_name": self.course_name or self.enrollment.course_code,
            "class_no": self.enrollment.class_no,
            "exam": self.exam.to_dict() if self.exam else None,
            "gap_reason": self.gap_reason.value if self.gap_reason else None,
        }


@dataclass
class StudentSchedule:
    """Match results for one student, in enrollment order."""

    student_id: str
    results: list[MatchResult] = field(default_factory=list)
    student_name: str | None = None

    @property
    def matched(self) -> list[MatchResult]:
        """Results that found an exam."""
        return [r for r in self.results if r.is_matched]

    @property
    def gaps(self) -> list[MatchResult]:
        """Results without an exam."""
        return [r for r in self.results if not r.is_matched]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "student_id": self.student_id,
            "student_name": self.student_name,
            "total_courses": len(self.results),
            "matched_count": len(self.matched),
            "gap_count": len(self.gaps),
            "results": [r.to_dict() for r in self.results],
        }


@dataclass
class RowError:
    """A row that was rejected during extraction."""

    row: int | None
    field: str | None
    message: str

    def __str__(self) -> str:
        location = f"Row {self.row}" if self.row is not None else "Row ?"
        if self.field:
            location += f" ({self.field})"
        return f"{location}: {self.message}"

    def to_dict(self) -> dict:
        return {"row": self.row, "field": self.field, "message": self.message}


@dataclass
class ParseResult:
    """Result of parsing one uploaded file.

    Attributes:
        file_type: Declared file type ("exam", "enroll" or "lecturer")
        parse_date: Date of parsing (ISO format)
        source: Name of the parsed file, if known
        layout: Detected layout (enrollment files only)
        classification: Full structure classification (enrollment files only)
        records: Extracted records
        sections: Course/section pairs seen in a section roster
        errors: Rejected rows
        warnings: Warning messages
    """

    file_type: str
    parse_date: str
    source: str | None = None
    layout: LayoutType | None = None
    classification: LayoutClassification | None = None
    records: list = field(default_factory=list)
    sections: list[SectionEntry] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def total_records(self) -> int:
        """Total number of extracted records."""
        return len(self.records)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "file_type": self.file_type,
            "source": self.source,
            "parse_date": self.parse_date,
            "layout": self.layout.value if self.layout else None,
            "classification": self.classification.to_dict() if self.classification else None,
            "total_records": self.total_records,
            "records": [r.to_dict() for r in self.records],
            "sections": [s.to_dict() for s in self.sections],
            "errors": [e.to_dict() for e in self.errors],
            "warnings": self.warnings,
        }
