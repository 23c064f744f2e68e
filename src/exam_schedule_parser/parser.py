"""Main exam schedule parser class."""

import logging
from collections import Counter
from collections.abc import Iterator
from datetime import datetime
from itertools import islice

from .columns import REQUIRED_FIELDS, find_header_row, suggest_mapping
from .config import ExtractionSettings
from .constants import CALENDAR_AUTO, FILE_TYPE_ENROLL, FILE_TYPES
from .extractors import SectionEnrollmentExtractor, get_extractor
from .models import EnrollmentRecord, LayoutClassification, ParseResult
from .schedules import get_schedule_extractor
from .structure import StructureDetector
from .workbook import Worksheet, load_worksheet

logger = logging.getLogger(__name__)


class ScheduleParser:
    """Parser for enrollment, exam and lecturer spreadsheets.

    Every call works on the bytes it is given and keeps no state between
    calls.
    """

    def __init__(
        self,
        settings: ExtractionSettings | None = None,
        calendar: str = CALENDAR_AUTO,
        auto_map: bool = False,
    ):
        """Initialize parser.

        Args:
            settings: Extraction settings. Defaults to ExtractionSettings().
            calendar: Calendar of exam dates ("auto", "hijri", "gregorian")
            auto_map: Suggest a header mapping for table-layout enrollment
                files instead of raising UnrecognizedLayoutError
        """
        self.settings = settings or ExtractionSettings()
        self.calendar = calendar
        self.auto_map = auto_map
        self.detector = StructureDetector(self.settings)

    def classify(self, data: bytes) -> LayoutClassification:
        """Classify the layout of a spreadsheet.

        Raises:
            MalformedInputError: If the spreadsheet cannot be read
        """
        worksheet = load_worksheet(data, max_rows=self.settings.scan_rows)
        return self.detector.classify(worksheet)

    def preview(self, data: bytes) -> dict:
        """Structure preview for an upload form.

        Returns:
            Dictionary with isBlockStructure, isSectionStructure, blockCount
            and estimatedRows
        """
        return self.classify(data).to_dict()

    def read_headers(self, data: bytes, file_type: str) -> dict:
        """Read the header row and suggest a header mapping.

        Args:
            data: Raw spreadsheet bytes
            file_type: "exam", "enroll" or "lecturer"

        Returns:
            Dictionary with headers, required_fields, suggested_mapping and
            file_type
        """
        self._check_file_type(file_type)
        worksheet = load_worksheet(data, max_rows=self.settings.header_search_rows)

        header_row = find_header_row(worksheet, self.settings.header_search_rows)
        headers = [] if header_row is None else [h for h in worksheet.row_texts(header_row) if h]

        return {
            "file_type": file_type,
            "headers": headers,
            "required_fields": list(REQUIRED_FIELDS[file_type]),
            "suggested_mapping": suggest_mapping(headers, file_type),
        }

    def parse(
        self,
        data: bytes,
        file_type: str,
        header_mapping: dict[str, str] | None = None,
        dataset_id: str | None = None,
        limit: int | None = None,
        source: str | None = None,
    ) -> ParseResult:
        """Parse a spreadsheet into records.

        Row-level problems are collected in the result; file-level problems
        raise.

        Args:
            data: Raw spreadsheet bytes
            file_type: "exam", "enroll" or "lecturer"
            header_mapping: Field name → header text for table layouts
            dataset_id: Identifier stamped on every record
            limit: Stop after this many records
            source: Name of the file, for reporting

        Returns:
            ParseResult with all extracted records

        Raises:
            ValueError: If file_type is unknown
            MalformedInputError: If the spreadsheet cannot be read
            UnrecognizedLayoutError: If an enrollment file has no known layout
                and no header mapping was supplied
            HeaderMappingError: If required fields cannot be mapped
        """
        self._check_file_type(file_type)
        worksheet = load_worksheet(data)

        result = ParseResult(
            file_type=file_type,
            parse_date=datetime.now().isoformat(),
            source=source,
        )

        if file_type == FILE_TYPE_ENROLL:
            self._parse_enrollments(worksheet, result, header_mapping, dataset_id, limit)
        else:
            extractor = get_schedule_extractor(
                file_type, self.settings, dataset_id, self.calendar
            )
            records = extractor.extract(worksheet, header_mapping)
            result.records = list(islice(records, limit))
            result.errors = list(extractor.rejected)
            result.warnings.extend(extractor.warnings)

        logger.info(
            f"Parsed {result.total_records} {file_type} records "
            f"({len(result.errors)} rejected, {len(result.warnings)} warnings)"
        )
        return result

    def _parse_enrollments(
        self,
        worksheet: Worksheet,
        result: ParseResult,
        header_mapping: dict[str, str] | None,
        dataset_id: str | None,
        limit: int | None,
    ) -> None:
        classification = self.detector.classify(worksheet)
        result.layout = classification.layout
        result.classification = classification

        extractor = get_extractor(
            classification.layout, self.settings, dataset_id, header_mapping, self.auto_map
        )
        result.records = list(islice(extractor.extract(worksheet), limit))
        result.errors = list(extractor.rejected)

        if isinstance(extractor, SectionEnrollmentExtractor):
            result.sections = list(extractor.sections)
            if not result.records:
                result.warnings.append(
                    f"Section roster lists {len(result.sections)} course sections "
                    "but no student IDs"
                )
        if extractor.skipped:
            result.warnings.append(f"{extractor.skipped} rows skipped")

    def iter_enrollments(
        self,
        data: bytes,
        header_mapping: dict[str, str] | None = None,
        dataset_id: str | None = None,
    ) -> Iterator[EnrollmentRecord]:
        """Lazily yield enrollment records; the caller may stop at any point.

        Args:
            data: Raw spreadsheet bytes
            header_mapping: Field name → header text for table layouts
            dataset_id: Identifier stamped on every record

        Yields:
            EnrollmentRecord objects in row order
        """
        worksheet = load_worksheet(data)
        classification = self.detector.classify(worksheet)
        extractor = get_extractor(
            classification.layout, self.settings, dataset_id, header_mapping, self.auto_map
        )
        yield from extractor.extract(worksheet)

    def get_stats(self, result: ParseResult) -> dict:
        """Get statistics from a parse result.

        Args:
            result: ParseResult from parsing

        Returns:
            Dictionary with statistics
        """
        stats = {
            "file_type": result.file_type,
            "source": result.source,
            "parse_date": result.parse_date,
            "layout": result.layout.value if result.layout else None,
            "total_records": result.total_records,
            "errors_count": len(result.errors),
            "warnings_count": len(result.warnings),
            "unique_courses": len({r.course_code for r in result.records}),
            "records_by_course": dict(Counter(r.course_code for r in result.records)),
        }

        if result.file_type == FILE_TYPE_ENROLL:
            stats["unique_students"] = len({r.student_id for r in result.records})
            stats["unscheduled_classes"] = sum(
                1 for r in result.records if r.class_no == self.settings.class_placeholder
            )
            if result.classification:
                stats["block_count"] = result.classification.block_count
        else:
            dates = sorted(r.exam_date for r in result.records)
            stats["first_exam_date"] = dates[0] if dates else None
            stats["last_exam_date"] = dates[-1] if dates else None

        return stats

    @staticmethod
    def _check_file_type(file_type: str) -> None:
        if file_type not in FILE_TYPES:
            raise ValueError(
                f"Unsupported file type: {file_type}. Supported: {', '.join(FILE_TYPES)}"
            )
