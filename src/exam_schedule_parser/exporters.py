"""Export functionality for parse results and student schedules."""

import csv
import json
from abc import ABC, abstractmethod
from pathlib import Path

from .models import ParseResult, StudentSchedule


class BaseExporter(ABC):
    """Base class for exporters."""

    @abstractmethod
    def export(self, result: ParseResult | StudentSchedule, output_path: str | Path) -> None:
        """Export a parse result or schedule to file.

        Args:
            result: ParseResult or StudentSchedule to export
            output_path: Path to output file or directory
        """
        pass


class JSONExporter(BaseExporter):
    """Export to JSON format."""

    def __init__(self, indent: int = 2, ensure_ascii: bool = False):
        """Initialize exporter.

        Args:
            indent: JSON indentation level
            ensure_ascii: If False, allows non-ASCII characters
        """
        self.indent = indent
        self.ensure_ascii = ensure_ascii

    def export(self, result: ParseResult | StudentSchedule, output_path: str | Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(
                result.to_dict(),
                f,
                indent=self.indent,
                ensure_ascii=self.ensure_ascii,
            )


class CSVExporter(BaseExporter):
    """Export to CSV format (multiple files)."""

    def export(self, result: ParseResult | StudentSchedule, output_path: str | Path) -> None:
        """Export to CSV files.

        A ParseResult creates records.csv, errors.csv and summary.csv, plus
        sections.csv for section rosters.
        A StudentSchedule creates schedule.csv.

        Args:
            result: ParseResult or StudentSchedule to export
            output_path: Path to output directory
        """
        output_dir = Path(output_path)
        output_dir.mkdir(parents=True, exist_ok=True)

        if isinstance(result, StudentSchedule):
            self._export_schedule(result, output_dir / "schedule.csv")
            return

        self._write_csv(output_dir / "records.csv", [r.to_dict() for r in result.records])
        self._write_csv(output_dir / "errors.csv", [e.to_dict() for e in result.errors])
        self._write_csv(output_dir / "sections.csv", [s.to_dict() for s in result.sections])
        self._export_summary(result, output_dir / "summary.csv")

    def _export_schedule(self, schedule: StudentSchedule, output_path: Path) -> None:
        """Export one student's schedule to CSV."""
        rows = []
        for match in schedule.results:
            exam = match.exam
            rows.append(
                {
                    "student_id": schedule.student_id,
                    "course_code": match.enrollment.course_code,
                    "course_name": match.course_name,
                    "class_no": match.enrollment.class_no,
                    "exam_date": exam.exam_date if exam else "",
                    "start_time": exam.start_time if exam else "",
                    "end_time": exam.end_time if exam else "",
                    "place": exam.place if exam else "",
                    "period": exam.period if exam else "",
                    "gap_reason": match.gap_reason.value if match.gap_reason else "",
                }
            )

        self._write_csv(output_path, rows)

    def _export_summary(self, result: ParseResult, output_path: Path) -> None:
        """Export summary to CSV."""
        rows = [
            {"metric": "file_type", "value": result.file_type},
            {"metric": "source", "value": result.source or ""},
            {"metric": "parse_date", "value": result.parse_date},
            {"metric": "layout", "value": result.layout.value if result.layout else ""},
            {"metric": "total_records", "value": result.total_records},
            {"metric": "sections", "value": len(result.sections)},
            {"metric": "errors", "value": len(result.errors)},
            {"metric": "warnings", "value": len(result.warnings)},
        ]

        self._write_csv(output_path, rows)

    def _write_csv(self, output_path: Path, rows: list[dict]) -> None:
        """Write rows to CSV file."""
        if not rows:
            return

        with open(output_path, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=rows[0].keys())
            writer.writeheader()
            writer.writerows(rows)


def get_exporter(format_type: str) -> BaseExporter:
    """Get appropriate exporter for format type.

    Args:
        format_type: Export format ('json', 'csv')

    Returns:
        Exporter instance

    Raises:
        ValueError: If format type is not supported
    """
    exporters = {
        "json": JSONExporter,
        "csv": CSVExporter,
    }

    if format_type not in exporters:
        raise ValueError(
            f"Unsupported format: {format_type}. Supported: {', '.join(exporters.keys())}"
        )

    return exporters[format_type]()
