"""Exam Schedule Parser - spreadsheet parser for university exam schedules.

This module reads enrollment rosters, exam timetables and invigilation
schedules exported by university systems, detects which of the known
enrollment layouts a roster uses, normalizes course and class identifiers,
converts Hijri exam dates to Gregorian and matches every enrollment with its
exam.

Example usage:
    from exam_schedule_parser import MatchingEngine, ScheduleParser

    parser = ScheduleParser(auto_map=True)
    with open("enrollments.xlsx", "rb") as f:
        enrollments = parser.parse(f.read(), "enroll")
    with open("exams.xlsx", "rb") as f:
        exams = parser.parse(f.read(), "exam")

    print(f"Layout: {enrollments.layout.value}")
    print(f"Total enrollments: {enrollments.total_records}")

    engine = MatchingEngine()
    for schedule in engine.match(enrollments.records, exams.records):
        for result in schedule.results:
            print(schedule.student_id, result.course_name, result.gap_reason)

    # Export to JSON
    from exam_schedule_parser.exporters import JSONExporter
    exporter = JSONExporter()
    exporter.export(exams, "exams.json")
"""

from .config import ExtractionSettings
from .exceptions import (
    HeaderMappingError,
    MalformedInputError,
    OutOfRangeError,
    ParseError,
    RecordRejectedError,
    UnrecognizedLayoutError,
)
from .exporters import CSVExporter, JSONExporter, get_exporter
from .extractors import extract, get_extractor
from .hijri import to_gregorian, to_hijri
from .matching import MatchingEngine, find_lecturer_exams, sort_for_display
from .models import (
    EnrollmentRecord,
    ExamRecord,
    GapReason,
    LayoutClassification,
    LayoutType,
    LecturerExamRecord,
    MatchResult,
    ParseResult,
    RawCell,
    SectionEntry,
    StudentSchedule,
)
from .normalization import normalize_class_no, normalize_course_code
from .parser import ScheduleParser
from .structure import StructureDetector, detect_structure
from .workbook import Worksheet, load_worksheet

__version__ = "0.1.0"

__all__ = [
    # Main parser
    "ScheduleParser",
    "ExtractionSettings",
    # Structure detection
    "StructureDetector",
    "detect_structure",
    "Worksheet",
    "load_worksheet",
    # Extraction
    "extract",
    "get_extractor",
    # Normalization
    "normalize_course_code",
    "normalize_class_no",
    "to_gregorian",
    "to_hijri",
    # Matching
    "MatchingEngine",
    "sort_for_display",
    "find_lecturer_exams",
    # Models
    "RawCell",
    "LayoutType",
    "LayoutClassification",
    "EnrollmentRecord",
    "SectionEntry",
    "ExamRecord",
    "LecturerExamRecord",
    "GapReason",
    "MatchResult",
    "StudentSchedule",
    "ParseResult",
    # Exporters
    "JSONExporter",
    "CSVExporter",
    "get_exporter",
    # Exceptions
    "ParseError",
    "MalformedInputError",
    "UnrecognizedLayoutError",
    "HeaderMappingError",
    "OutOfRangeError",
    "RecordRejectedError",
]
