"""Student-block scanning for block-structured enrollment exports.

A block opens on a student-ID anchor, waits for a course-list header and
then collects course rows::

    SEEKING_ANCHOR --anchor--> SEEKING_HEADER --header--> COLLECTING_COURSES
          ^                          |                          |
          +--- header_search_rows ---+                          |
          +----------- max_consecutive_misses / anchor ---------+

A new anchor in any state closes the current block and opens the next one.
The course and class columns are detected from each block's own header row
and travel with the block in its ``BlockContext``.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from enum import Enum

from .config import ExtractionSettings
from .constants import CLASS_MARKERS, COURSE_NUMBER_MARKERS, EMPTY_CLASS_VALUES, NAME_MARKERS
from .patterns import (
    extract_course_code,
    find_marker_column,
    find_student_anchor,
    find_student_name,
    is_course_header_row,
)
from .workbook import Worksheet

logger = logging.getLogger(__name__)


class BlockState(Enum):
    """States of the block scanner."""

    SEEKING_ANCHOR = "seeking_anchor"
    SEEKING_HEADER = "seeking_header"
    COLLECTING_COURSES = "collecting_courses"


@dataclass(frozen=True)
class BlockContext:
    """Identity and column layout of one student block.

    Attributes:
        student_id: ID from the anchor row
        student_name: Name found next to the ID, if any
        anchor_row: Row of the anchor
        course_col: Course-number column from the block's header row
        class_col: Class/section column from the block's header row
    """

    student_id: str
    student_name: str | None
    anchor_row: int
    course_col: int | None = None
    class_col: int | None = None


@dataclass
class CourseRow:
    """A course row inside a block; ``class_no`` is None when absent."""

    row: int
    course_code: str
    class_no: str | None


@dataclass
class StudentBlock:
    """A closed block with at least one course row."""

    context: BlockContext
    courses: list[CourseRow] = field(default_factory=list)

    @property
    def last_row(self) -> int:
        return self.courses[-1].row if self.courses else self.context.anchor_row

    @property
    def rows_consumed(self) -> int:
        """Rows from the anchor through the last course row."""
        return self.last_row - self.context.anchor_row + 1


def detect_block_columns(texts: list[str]) -> tuple[int | None, int | None]:
    """Find the course and class columns in a course-list header row.

    Returns:
        (course_col, class_col); class_col is None if the header has no
        class/section marker
    """
    course_col = find_marker_column(texts, COURSE_NUMBER_MARKERS, exclude=NAME_MARKERS)
    class_col = find_marker_column(texts, CLASS_MARKERS)
    if class_col == course_col:
        class_col = None
    return course_col, class_col


def read_course_row(row: int, texts: list[str], context: BlockContext) -> CourseRow | None:
    """Read a course row using the block's own columns.

    The course code is taken from the course column first, then from any
    other cell except the class column.

    Args:
        row: Row position
        texts: Row display texts
        context: Block the row belongs to

    Returns:
        CourseRow, or None if the row has no code
    """
    code = None
    if context.course_col is not None and context.course_col < len(texts):
        code = extract_course_code(texts[context.course_col])
    if code is None:
        for col, text in enumerate(texts):
            if col in (context.course_col, context.class_col) or not text:
                continue
            code = extract_course_code(text)
            if code:
                break
    if code is None:
        return None

    class_no = None
    if context.class_col is not None and context.class_col < len(texts):
        class_text = texts[context.class_col].strip()
        if class_text not in EMPTY_CLASS_VALUES:
            class_no = class_text

    return CourseRow(row=row, course_code=code, class_no=class_no)


class BlockStateMachine:
    """Row-at-a-time scanner that turns rows into student blocks."""

    def __init__(self, settings: ExtractionSettings | None = None):
        self.settings = settings or ExtractionSettings()
        self.state = BlockState.SEEKING_ANCHOR
        self.context: BlockContext | None = None
        self.courses: list[CourseRow] = []
        self.misses = 0
        self.rows_since_anchor = 0

    def feed(self, row: int, texts: list[str]) -> StudentBlock | None:
        """Advance the scanner by one row.

        Args:
            row: Row position
            texts: Row display texts

        Returns:
            The block this row closed, if any
        """
        anchor = find_student_anchor(
            texts, self.settings.student_id_min_length, self.settings.student_id_max_length
        )
        if anchor is not None:
            closed = self._close()
            self._open(row, texts, anchor)
            return closed

        if self.state == BlockState.SEEKING_HEADER:
            self._seek_header(texts)
        elif self.state == BlockState.COLLECTING_COURSES:
            return self._collect(row, texts)
        return None

    def finish(self) -> StudentBlock | None:
        """Close the open block at end of input."""
        return self._close()

    def _open(self, row: int, texts: list[str], anchor: tuple[int, str]) -> None:
        col, student_id = anchor
        self.context = BlockContext(
            student_id=student_id,
            student_name=find_student_name(texts, skip={col}),
            anchor_row=row,
        )
        self.courses = []
        self.misses = 0
        self.rows_since_anchor = 0
        self.state = BlockState.SEEKING_HEADER

    def _seek_header(self, texts: list[str]) -> None:
        self.rows_since_anchor += 1
        if self.rows_since_anchor > self.settings.header_search_rows:
            logger.debug(
                f"No course header within {self.settings.header_search_rows} rows of "
                f"anchor {self.context.student_id}, dropping it"
            )
            self._reset()
            return

        if self._is_header(texts):
            self._apply_header(texts)

    def _collect(self, row: int, texts: list[str]) -> StudentBlock | None:
        if self._is_header(texts):
            self._apply_header(texts)
            return None

        course = read_course_row(row, texts, self.context)
        if course is not None:
            self.courses.append(course)
            self.misses = 0
            return None

        self.misses += 1
        if self.misses >= self.settings.max_consecutive_misses:
            return self._close()
        return None

    def _is_header(self, texts: list[str]) -> bool:
        return is_course_header_row(
            texts, self.settings.student_id_min_length, self.settings.student_id_max_length
        )

    def _apply_header(self, texts: list[str]) -> None:
        course_col, class_col = detect_block_columns(texts)
        self.context = replace(self.context, course_col=course_col, class_col=class_col)
        self.misses = 0
        self.state = BlockState.COLLECTING_COURSES

    def _close(self) -> StudentBlock | None:
        block = None
        if self.state == BlockState.COLLECTING_COURSES and self.courses:
            block = StudentBlock(context=self.context, courses=self.courses)
        self._reset()
        return block

    def _reset(self) -> None:
        self.state = BlockState.SEEKING_ANCHOR
        self.context = None
        self.courses = []
        self.misses = 0
        self.rows_since_anchor = 0


def scan_blocks(
    worksheet: Worksheet,
    settings: ExtractionSettings | None = None,
    max_rows: int | None = None,
) -> Iterator[StudentBlock]:
    """Yield the student blocks of a worksheet in row order.

    Args:
        worksheet: Worksheet to scan
        settings: Extraction settings
        max_rows: Only scan this many leading rows

    Yields:
        Closed blocks with at least one course row
    """
    machine = BlockStateMachine(settings)
    n_rows = worksheet.n_rows if max_rows is None else min(max_rows, worksheet.n_rows)
    for row in range(n_rows):
        block = machine.feed(row, worksheet.row_texts(row))
        if block is not None:
            yield block
    block = machine.finish()
    if block is not None:
        yield block
