"""Extraction settings."""

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Self

from .constants import (
    CLASS_PLACEHOLDER,
    DEFAULT_EXAM_DURATION_MINUTES,
    DEFAULT_HEADER_SEARCH_ROWS,
    DEFAULT_MAX_CONSECUTIVE_MISSES,
    DEFAULT_SCAN_ROWS,
    DEFAULT_SECTION_MIN_ROWS,
    HIJRI_MAX_YEAR,
    HIJRI_MIN_YEAR,
    STUDENT_ID_MAX_LENGTH,
    STUDENT_ID_MIN_LENGTH,
)


@dataclass(frozen=True)
class ExtractionSettings:
    """Tunable limits for structure detection and extraction.

    Attributes:
        scan_rows: Rows inspected by the structure detector
        header_search_rows: Rows after a student anchor in which the course
            header must appear
        max_consecutive_misses: Consecutive non-course rows that close a block
        student_id_min_length: Shortest accepted student ID
        student_id_max_length: Longest accepted student ID
        class_placeholder: Class number used when a block has no class column
        default_exam_duration_minutes: Duration used to derive a missing end time
        section_min_rows: Rows the section signal must recur on
        hijri_year_range: (min, max) year band read as Hijri, max exclusive
    """

    scan_rows: int = DEFAULT_SCAN_ROWS
    header_search_rows: int = DEFAULT_HEADER_SEARCH_ROWS
    max_consecutive_misses: int = DEFAULT_MAX_CONSECUTIVE_MISSES
    student_id_min_length: int = STUDENT_ID_MIN_LENGTH
    student_id_max_length: int = STUDENT_ID_MAX_LENGTH
    class_placeholder: str = CLASS_PLACEHOLDER
    default_exam_duration_minutes: int = DEFAULT_EXAM_DURATION_MINUTES
    section_min_rows: int = DEFAULT_SECTION_MIN_ROWS
    hijri_year_range: tuple[int, int] = (HIJRI_MIN_YEAR, HIJRI_MAX_YEAR)

    def __post_init__(self):
        if self.scan_rows < 1:
            raise ValueError(f"scan_rows must be positive, got {self.scan_rows}")
        if self.max_consecutive_misses < 1:
            raise ValueError(
                f"max_consecutive_misses must be positive, got {self.max_consecutive_misses}"
            )
        if not 1 <= self.student_id_min_length <= self.student_id_max_length:
            raise ValueError(
                "Invalid student ID length bounds: "
                f"{self.student_id_min_length}..{self.student_id_max_length}"
            )
        min_year, max_year = self.hijri_year_range
        if min_year >= max_year:
            raise ValueError(f"Invalid Hijri year range: {self.hijri_year_range}")

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Build settings from a dictionary, rejecting unknown keys.

        Args:
            data: Setting names mapped to values

        Returns:
            ExtractionSettings instance

        Raises:
            ValueError: If a key is not a known setting
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(unknown)}")

        values = dict(data)
        if "hijri_year_range" in values:
            values["hijri_year_range"] = tuple(values["hijri_year_range"])
        return cls(**values)

    @classmethod
    def from_json(cls, path: str | Path) -> Self:
        """Load settings from a JSON file."""
        with open(path, encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["hijri_year_range"] = list(self.hijri_year_range)
        return data
