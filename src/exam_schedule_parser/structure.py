"""Worksheet layout classification.

Detects which layout an enrollment worksheet uses:
- "block_structure": each student ID heads a list of that student's courses
- "section_structure": course/section labels head rosters, no per-student block
- "table": a flat table; the caller supplies the header mapping
"""

import logging

from .blocks import scan_blocks
from .config import ExtractionSettings
from .models import LayoutClassification, LayoutType
from .patterns import find_course_label, find_section_label
from .workbook import Worksheet

logger = logging.getLogger(__name__)

# Rows after a course label in which its section label may appear
SECTION_LABEL_LOOKAHEAD = 2


def count_section_rows(worksheet: Worksheet, max_rows: int) -> int:
    """Count rows where a labeled course code is paired with a section number.

    The section label may sit on the same row as the course label or on
    one of the next two rows.

    Args:
        worksheet: Worksheet to scan
        max_rows: Only scan this many leading rows

    Returns:
        Number of course/section pairs
    """
    n_rows = min(max_rows, worksheet.n_rows)
    pairs = 0
    row = 0
    while row < n_rows:
        texts = worksheet.row_texts(row)
        if find_course_label(texts) is None:
            row += 1
            continue

        paired_at = None
        for offset in range(SECTION_LABEL_LOOKAHEAD + 1):
            candidate = row + offset
            if candidate >= n_rows:
                break
            if offset > 0 and find_course_label(worksheet.row_texts(candidate)) is not None:
                break
            if find_section_label(worksheet.row_texts(candidate)) is not None:
                paired_at = candidate
                break

        if paired_at is None:
            row += 1
        else:
            pairs += 1
            row = paired_at + 1
    return pairs


def count_content_rows(worksheet: Worksheet, max_rows: int) -> int:
    n_rows = min(max_rows, worksheet.n_rows)
    return sum(1 for row in range(n_rows) if not worksheet.is_empty_row(row))


class StructureDetector:
    """Classifies worksheets by layout.

    Only the first ``scan_rows`` rows are inspected. Classification reads the
    worksheet and nothing else, so it can be repeated freely.
    """

    def __init__(self, settings: ExtractionSettings | None = None):
        """Initialize detector.

        Args:
            settings: Extraction settings. Defaults to ExtractionSettings().
        """
        self.settings = settings or ExtractionSettings()

    def classify(self, worksheet: Worksheet) -> LayoutClassification:
        """Classify a worksheet's layout.

        Algorithm:
        1. Any student block found? → BLOCK_STRUCTURE
        2. Course/section pairs on >= section_min_rows rows? → SECTION_STRUCTURE
        3. Otherwise → TABLE

        Args:
            worksheet: Worksheet to classify

        Returns:
            LayoutClassification
        """
        scan_rows = self.settings.scan_rows
        blocks = list(scan_blocks(worksheet, self.settings, max_rows=scan_rows))

        if blocks:
            classification = LayoutClassification(
                layout=LayoutType.BLOCK_STRUCTURE,
                block_count=len(blocks),
                estimated_rows=sum(block.rows_consumed for block in blocks),
                anchors=[block.context.anchor_row for block in blocks],
            )
        else:
            section_rows = count_section_rows(worksheet, scan_rows)
            content_rows = count_content_rows(worksheet, scan_rows)
            if section_rows >= self.settings.section_min_rows:
                classification = LayoutClassification(
                    layout=LayoutType.SECTION_STRUCTURE,
                    estimated_rows=content_rows,
                    section_rows=section_rows,
                )
            else:
                # Everything but the header row
                classification = LayoutClassification(
                    layout=LayoutType.TABLE,
                    estimated_rows=max(content_rows - 1, 0),
                    section_rows=section_rows,
                )

        logger.info(
            f"Worksheet '{worksheet.name}' classified as {classification.layout.value} "
            f"(blocks={classification.block_count}, rows={classification.estimated_rows})"
        )
        return classification


def detect_structure(
    worksheet: Worksheet, settings: ExtractionSettings | None = None
) -> LayoutClassification:
    """Classify a worksheet's layout with the given settings."""
    return StructureDetector(settings).classify(worksheet)
