"""Enrollment extraction using Strategy pattern.

Each worksheet layout (table, block_structure, section_structure) gets its
own extractor class. Extractors return generators, so a caller previewing a
file can stop after the first few records.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator

from .blocks import StudentBlock, scan_blocks
from .columns import locate_header
from .config import ExtractionSettings
from .constants import FILE_TYPE_ENROLL, STUDENT_ID_HEADER_MARKERS
from .exceptions import RecordRejectedError, UnrecognizedLayoutError
from .models import EnrollmentRecord, LayoutClassification, LayoutType, RowError, SectionEntry
from .normalization import normalize_class_no
from .patterns import (
    find_course_label,
    find_marker_column,
    find_section_label,
    find_student_id_cell,
    find_student_name,
    is_student_id_header_row,
)
from .validators import validate_student_id
from .workbook import Worksheet

logger = logging.getLogger(__name__)


class BaseExtractor(ABC):
    """Base class for enrollment extractors."""

    layout: LayoutType

    def __init__(
        self,
        settings: ExtractionSettings | None = None,
        dataset_id: str | None = None,
    ):
        """Initialize extractor.

        Args:
            settings: Extraction settings
            dataset_id: Identifier stamped on every record
        """
        self.settings = settings or ExtractionSettings()
        self.dataset_id = dataset_id
        self.rejected: list[RowError] = []
        self.skipped = 0

    @abstractmethod
    def extract(self, worksheet: Worksheet) -> Iterator[EnrollmentRecord]:
        """Extract enrollment records from a worksheet.

        Args:
            worksheet: Worksheet to read

        Returns:
            Generator of records in row order
        """
        pass

    def _create_record(
        self,
        student_id: str,
        course_code: str,
        class_no: str | None,
        row: int,
        student_name: str | None = None,
    ) -> EnrollmentRecord:
        """Create an EnrollmentRecord.

        Args:
            student_id: Student ID
            course_code: Course code (normalized by the record)
            class_no: Class number, or None for the placeholder
            row: 0-based row position
            student_name: Student name

        Returns:
            EnrollmentRecord object

        Raises:
            RecordRejectedError: If the student ID has the wrong shape
        """
        valid, message = validate_student_id(
            student_id,
            self.settings.student_id_min_length,
            self.settings.student_id_max_length,
        )
        if not valid:
            raise RecordRejectedError(message, row=row + 1, field="student_id")

        if class_no is None or not normalize_class_no(class_no):
            class_no = self.settings.class_placeholder

        return EnrollmentRecord(
            student_id=student_id,
            course_code=course_code,
            class_no=class_no,
            student_name=student_name or None,
            dataset_id=self.dataset_id,
            row=row + 1,
        )

    def _reject(self, error: RecordRejectedError) -> None:
        logger.debug(str(error))
        self.rejected.append(RowError(row=error.row, field=error.field, message=error.message))


class TableEnrollmentExtractor(BaseExtractor):
    """Flat table: one record per data row, columns from a header mapping."""

    layout = LayoutType.TABLE

    def __init__(
        self,
        settings: ExtractionSettings | None = None,
        dataset_id: str | None = None,
        header_mapping: dict[str, str] | None = None,
        auto_map: bool = False,
    ):
        """Initialize extractor.

        Args:
            settings: Extraction settings
            dataset_id: Identifier stamped on every record
            header_mapping: Field name → header text
            auto_map: Suggest a mapping from known headers when none is given
        """
        super().__init__(settings, dataset_id)
        self.header_mapping = header_mapping
        self.auto_map = auto_map

    def extract(self, worksheet: Worksheet) -> Iterator[EnrollmentRecord]:
        """Resolve the header, then return a generator over the data rows.

        Raises:
            UnrecognizedLayoutError: If no mapping was supplied and auto_map is off
            HeaderMappingError: If required fields cannot be mapped
        """
        if not self.header_mapping and not self.auto_map:
            headers = worksheet.row_texts(0) if worksheet.n_rows else []
            raise UnrecognizedLayoutError(headers=[h for h in headers if h])

        header_row, columns = locate_header(
            worksheet, FILE_TYPE_ENROLL, self.header_mapping, self.settings.header_search_rows
        )
        self.rejected = []
        self.skipped = 0
        return self._iter_rows(worksheet, header_row, columns)

    def _iter_rows(
        self, worksheet: Worksheet, header_row: int, columns: dict[str, int]
    ) -> Iterator[EnrollmentRecord]:
        for row in range(header_row + 1, worksheet.n_rows):
            if worksheet.is_empty_row(row):
                continue

            student_id = worksheet.text(row, columns.get("student_id"))
            course_code = worksheet.text(row, columns.get("course_code"))
            if not student_id or not course_code:
                self.skipped += 1
                logger.debug(f"Row {row + 1}: missing student ID or course code, skipped")
                continue

            try:
                yield self._create_record(
                    student_id=student_id,
                    course_code=course_code,
                    class_no=worksheet.text(row, columns.get("class_no")),
                    row=row,
                    student_name=worksheet.text(row, columns.get("student_name")),
                )
            except RecordRejectedError as e:
                self._reject(e)


class BlockEnrollmentExtractor(BaseExtractor):
    """Block layout: each student ID heads that student's course rows.

    Course rows without a class column emit the class placeholder ("N/A").
    Repeated (course, class) pairs inside one block are emitted once.
    """

    layout = LayoutType.BLOCK_STRUCTURE

    def extract(self, worksheet: Worksheet) -> Iterator[EnrollmentRecord]:
        self.rejected = []
        self.skipped = 0
        for block in scan_blocks(worksheet, self.settings):
            yield from self.extract_block(block)

    def extract_block(self, block: StudentBlock) -> Iterator[EnrollmentRecord]:
        """Emit the records of one closed block."""
        seen: set[tuple[str, str]] = set()
        context = block.context
        for course in block.courses:
            try:
                record = self._create_record(
                    student_id=context.student_id,
                    course_code=course.course_code,
                    class_no=course.class_no,
                    row=course.row,
                    student_name=context.student_name,
                )
            except RecordRejectedError as e:
                self._reject(e)
                continue

            if record.key in seen:
                self.skipped += 1
                continue
            seen.add(record.key)
            yield record


class SectionEnrollmentExtractor(BaseExtractor):
    """Section layout: course/section labels head rosters of student rows.

    A row carrying "المقرر: <code>" and "الشعبة: <number>" (the section label
    may follow on the next rows) sets the current course and section. Every
    later row with a student-ID cell yields a record for that course and
    section, including the labeled row itself. Course/section pairs are
    collected in ``sections`` whether or not any student follows them.
    """

    layout = LayoutType.SECTION_STRUCTURE

    def __init__(
        self,
        settings: ExtractionSettings | None = None,
        dataset_id: str | None = None,
    ):
        super().__init__(settings, dataset_id)
        self.sections: list[SectionEntry] = []

    def extract(self, worksheet: Worksheet) -> Iterator[EnrollmentRecord]:
        self.rejected = []
        self.skipped = 0
        self.sections = []

        course_code: str | None = None
        class_no: str | None = None
        id_col: int | None = None
        recorded = False

        for row in range(worksheet.n_rows):
            texts = worksheet.row_texts(row)
            if not any(texts):
                continue

            course = find_course_label(texts)
            section = find_section_label(texts)
            if course is not None:
                course_code = course[0]
                class_no = section[0] if section else None
                id_col = None
                recorded = False
            elif section is not None and course_code:
                class_no = section[0]
                recorded = False

            if course_code and class_no and not recorded:
                self.sections.append(SectionEntry(course_code, class_no, row=row + 1))
                recorded = True

            if is_student_id_header_row(texts):
                id_col = find_marker_column(texts, STUDENT_ID_HEADER_MARKERS)
                continue

            if not course_code:
                continue

            labeled = course is not None or section is not None
            record = self._read_student(
                texts, row, None if labeled else id_col, course_code, class_no
            )
            if record is not None:
                yield record

    def _read_student(
        self,
        texts: list[str],
        row: int,
        id_col: int | None,
        course_code: str,
        class_no: str | None,
    ) -> EnrollmentRecord | None:
        if id_col is not None and id_col < len(texts):
            student_id = texts[id_col]
            if not student_id:
                return None
            skip = {id_col}
        else:
            found = find_student_id_cell(
                texts, self.settings.student_id_min_length, self.settings.student_id_max_length
            )
            if found is None:
                return None
            skip = {found[0]}
            student_id = found[1]

        try:
            return self._create_record(
                student_id=student_id,
                course_code=course_code,
                class_no=class_no,
                row=row,
                student_name=find_student_name(texts, skip=skip),
            )
        except RecordRejectedError as e:
            self._reject(e)
            return None


def get_extractor(
    layout: LayoutType,
    settings: ExtractionSettings | None = None,
    dataset_id: str | None = None,
    header_mapping: dict[str, str] | None = None,
    auto_map: bool = False,
) -> BaseExtractor:
    """Get appropriate extractor for a layout.

    Args:
        layout: Detected layout
        settings: Extraction settings
        dataset_id: Identifier stamped on every record
        header_mapping: Field name → header text (table layout)
        auto_map: Suggest a table mapping when none is given

    Returns:
        Extractor instance

    Raises:
        ValueError: If layout is not supported
    """
    if layout == LayoutType.TABLE:
        return TableEnrollmentExtractor(settings, dataset_id, header_mapping, auto_map)

    extractors = {
        LayoutType.BLOCK_STRUCTURE: BlockEnrollmentExtractor,
        LayoutType.SECTION_STRUCTURE: SectionEnrollmentExtractor,
    }

    if layout not in extractors:
        raise ValueError(f"Unknown layout: {layout}")

    return extractors[layout](settings, dataset_id)


def extract(
    worksheet: Worksheet,
    classification: LayoutClassification,
    header_mapping: dict[str, str] | None = None,
    dataset_id: str | None = None,
    settings: ExtractionSettings | None = None,
) -> Iterator[EnrollmentRecord]:
    """Extract enrollment records for a classified worksheet.

    Args:
        worksheet: Worksheet to read
        classification: Result of structure detection
        header_mapping: Field name → header text (table layout)
        dataset_id: Identifier stamped on every record
        settings: Extraction settings

    Returns:
        Generator of EnrollmentRecord
    """
    extractor = get_extractor(classification.layout, settings, dataset_id, header_mapping)
    return extractor.extract(worksheet)
