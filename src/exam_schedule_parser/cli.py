"""CLI entry point for the exam schedule parser."""

import logging
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import ExtractionSettings
from .constants import FILE_TYPE_ENROLL, FILE_TYPE_EXAM, FILE_TYPE_LECTURER
from .exceptions import OutOfRangeError, ParseError
from .exporters import get_exporter
from .hijri import HIJRI_DATE_PATTERN, format_hijri_date, to_gregorian
from .matching import MatchingEngine, find_lecturer_exams, sort_for_display
from .parser import ScheduleParser

app = typer.Typer(
    name="exam-schedule-parser",
    help="Parse university enrollment and exam schedule spreadsheets",
    add_completion=False,
)
console = Console()


class OutputFormat(str, Enum):
    """Output format options."""

    json = "json"
    csv = "csv"


class FileType(str, Enum):
    """Declared spreadsheet type."""

    exam = FILE_TYPE_EXAM
    enroll = FILE_TYPE_ENROLL
    lecturer = FILE_TYPE_LECTURER


class Calendar(str, Enum):
    """Calendar of exam dates."""

    auto = "auto"
    hijri = "hijri"
    gregorian = "gregorian"


ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", help="JSON file with extraction settings"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("-v", "--verbose", help="Show detailed output"),
]
CalendarOption = Annotated[
    Calendar,
    typer.Option("--calendar", help="Calendar of exam dates"),
]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_settings(config: Path | None) -> ExtractionSettings:
    if config is None:
        return ExtractionSettings()
    try:
        return ExtractionSettings.from_json(config)
    except (OSError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] Invalid config {config}: {e}")
        raise typer.Exit(1)


def _parse_mapping(pairs: list[str] | None) -> dict[str, str] | None:
    """Turn ["field=Header", ...] into a header mapping."""
    if not pairs:
        return None
    mapping = {}
    for pair in pairs:
        field_name, sep, header = pair.partition("=")
        if not sep or not field_name.strip() or not header.strip():
            console.print(f"[bold red]Error:[/bold red] Invalid mapping '{pair}'. Use field=Header.")
            raise typer.Exit(1)
        mapping[field_name.strip()] = header.strip()
    return mapping


@app.command()
def detect(
    input_file: Annotated[
        Path,
        typer.Argument(help="Path to the enrollment spreadsheet", exists=True, readable=True),
    ],
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Detect the layout of an enrollment spreadsheet."""
    _configure_logging(verbose)
    parser = ScheduleParser(_load_settings(config))
    data = input_file.read_bytes()

    try:
        with console.status("[bold green]Detecting structure..."):
            classification = parser.classify(data)
    except ParseError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"\n[bold]Structure of:[/bold] {input_file.name}")
    console.print(f"  Layout: {classification.layout.value}")
    for key, value in classification.to_dict().items():
        console.print(f"  {key}: {value}")


@app.command()
def headers(
    input_file: Annotated[
        Path,
        typer.Argument(help="Path to the spreadsheet", exists=True, readable=True),
    ],
    file_type: Annotated[
        FileType,
        typer.Option("-t", "--type", help="Declared file type"),
    ] = FileType.exam,
    config: ConfigOption = None,
) -> None:
    """Show header cells and the suggested header mapping."""
    _configure_logging(False)
    parser = ScheduleParser(_load_settings(config))

    try:
        info = parser.read_headers(input_file.read_bytes(), file_type.value)
    except ParseError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    table = Table(title=f"Header mapping ({file_type.value})")
    table.add_column("Field", style="cyan")
    table.add_column("Required", style="magenta")
    table.add_column("Header", style="green")

    suggested = info["suggested_mapping"]
    fields = info["required_fields"] + [f for f in suggested if f not in info["required_fields"]]
    for field_name in fields:
        table.add_row(
            field_name,
            "yes" if field_name in info["required_fields"] else "",
            suggested.get(field_name, "[red]not found[/red]"),
        )

    console.print(f"\n[bold]Headers:[/bold] {', '.join(info['headers']) or '(none)'}")
    console.print(table)


@app.command()
def parse(
    input_file: Annotated[
        Path,
        typer.Argument(help="Path to the spreadsheet", exists=True, readable=True),
    ],
    file_type: Annotated[
        FileType,
        typer.Option("-t", "--type", help="Declared file type"),
    ] = FileType.enroll,
    mapping: Annotated[
        Optional[list[str]],
        typer.Option("-m", "--map", help="Header mapping as field=Header (repeatable)"),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("-o", "--output", help="Output file or directory path"),
    ] = None,
    format: Annotated[
        OutputFormat,
        typer.Option("-f", "--format", help="Output format"),
    ] = OutputFormat.json,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", help="Stop after this many records"),
    ] = None,
    dataset_id: Annotated[
        Optional[str],
        typer.Option("--dataset", help="Dataset identifier stamped on records"),
    ] = None,
    auto_map: Annotated[
        bool,
        typer.Option("--auto-map", help="Guess the header mapping of table enrollment files"),
    ] = False,
    calendar: CalendarOption = Calendar.auto,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Parse a spreadsheet into enrollment, exam or lecturer records."""
    _configure_logging(verbose)
    parser = ScheduleParser(_load_settings(config), calendar=calendar.value, auto_map=auto_map)
    header_mapping = _parse_mapping(mapping)
    data = input_file.read_bytes()

    try:
        with console.status("[bold green]Parsing file..."):
            result = parser.parse(
                data,
                file_type.value,
                header_mapping=header_mapping,
                dataset_id=dataset_id,
                limit=limit,
                source=input_file.name,
            )
    except ParseError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    # Show summary
    console.print(f"\n[bold]Parse Results for:[/bold] {input_file.name}")
    if result.layout:
        console.print(f"  Layout: {result.layout.value}")
    console.print(f"  Total records: {result.total_records}")

    if result.errors:
        console.print(f"\n[bold red]Rejected rows ({len(result.errors)}):[/bold red]")
        for error in result.errors[:20]:
            console.print(f"  [red]• {error}[/red]")

    if result.warnings:
        console.print(f"\n[bold yellow]Warnings ({len(result.warnings)}):[/bold yellow]")
        for warning in result.warnings:
            console.print(f"  [yellow]• {warning}[/yellow]")

    if output:
        exporter = get_exporter(format.value)

        if format == OutputFormat.csv:
            # CSV exports to directory
            output_path = output if output.is_dir() else output.parent / output.stem
        else:
            if not output.suffix:
                output = output.with_suffix(f".{format.value}")
            output_path = output

        with console.status(f"[bold green]Exporting to {format.value}..."):
            exporter.export(result, output_path)

        console.print(f"\n[bold green]✓[/bold green] Exported to: {output_path}")
    elif verbose:
        stats = parser.get_stats(result)
        stats_table = Table(title="Overview", show_header=False)
        stats_table.add_column("Metric", style="cyan")
        stats_table.add_column("Value", style="green")
        for key, value in stats.items():
            if not isinstance(value, dict):
                stats_table.add_row(key, str(value))
        console.print(stats_table)


@app.command()
def schedule(
    enroll_file: Annotated[
        Path,
        typer.Argument(help="Path to the enrollment spreadsheet", exists=True, readable=True),
    ],
    exam_file: Annotated[
        Path,
        typer.Argument(help="Path to the exam schedule spreadsheet", exists=True, readable=True),
    ],
    student: Annotated[
        str,
        typer.Option("-s", "--student", help="Student ID"),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("-o", "--output", help="Output file or directory path"),
    ] = None,
    format: Annotated[
        OutputFormat,
        typer.Option("-f", "--format", help="Output format"),
    ] = OutputFormat.json,
    calendar: CalendarOption = Calendar.auto,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show one student's exam schedule."""
    _configure_logging(verbose)
    settings = _load_settings(config)
    parser = ScheduleParser(settings, calendar=calendar.value, auto_map=True)

    try:
        with console.status("[bold green]Reading spreadsheets..."):
            enrollments = parser.parse(enroll_file.read_bytes(), FILE_TYPE_ENROLL)
            exams = parser.parse(exam_file.read_bytes(), FILE_TYPE_EXAM)
    except ParseError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    engine = MatchingEngine(settings.class_placeholder)
    student_schedule = engine.match_student(student, enrollments.records, exams.records)

    if not student_schedule.results:
        console.print(f"[bold yellow]Warning:[/bold yellow] No enrollments for student {student}")
        raise typer.Exit(1)

    title = f"Exam schedule for {student_schedule.student_id}"
    if student_schedule.student_name:
        title += f" ({student_schedule.student_name})"
    table = Table(title=title)
    table.add_column("Course", style="cyan")
    table.add_column("Name", max_width=40)
    table.add_column("Class", style="magenta")
    table.add_column("Date", style="green")
    table.add_column("Time", style="green")
    table.add_column("Place", style="blue")
    table.add_column("Note", style="yellow")

    for match in sort_for_display(student_schedule.results):
        exam = match.exam
        table.add_row(
            match.enrollment.course_code,
            match.course_name[:40],
            match.enrollment.class_no,
            exam.exam_date if exam else "",
            f"{exam.start_time}-{exam.end_time}" if exam else "",
            exam.place if exam else "",
            match.gap_reason.value if match.gap_reason else "",
        )

    console.print(table)
    console.print(
        f"  Matched: {len(student_schedule.matched)}  Gaps: {len(student_schedule.gaps)}"
    )

    if output:
        exporter = get_exporter(format.value)
        if format == OutputFormat.json and not output.suffix:
            output = output.with_suffix(".json")
        exporter.export(student_schedule, output)
        console.print(f"\n[bold green]✓[/bold green] Exported to: {output}")


@app.command()
def lecturer(
    exam_file: Annotated[
        Path,
        typer.Argument(
            help="Path to the lecturer exam schedule spreadsheet", exists=True, readable=True
        ),
    ],
    name: Annotated[
        str,
        typer.Option("-n", "--name", help="Lecturer name or part of it"),
    ],
    calendar: CalendarOption = Calendar.auto,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Find a lecturer's exam duties."""
    _configure_logging(verbose)
    parser = ScheduleParser(_load_settings(config), calendar=calendar.value)

    try:
        with console.status("[bold green]Reading spreadsheet..."):
            result = parser.parse(exam_file.read_bytes(), FILE_TYPE_LECTURER)
    except ParseError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    duties = find_lecturer_exams(name, result.records)
    if not duties:
        console.print(f"[bold yellow]Warning:[/bold yellow] No exams found for '{name}'")
        raise typer.Exit(1)

    table = Table(title=f"Exams for '{name}'")
    table.add_column("Lecturer", style="cyan")
    table.add_column("Date", style="green")
    table.add_column("Start", style="green")
    table.add_column("Course", style="magenta")
    table.add_column("Section")
    table.add_column("Room", style="blue")
    table.add_column("Role")

    for duty in duties:
        table.add_row(
            duty.lecturer_name,
            duty.exam_date,
            duty.period_start,
            f"{duty.course_code} {duty.course_name}",
            duty.section,
            duty.room,
            duty.role or "",
        )

    console.print(table)


@app.command()
def hijri(
    date_text: Annotated[
        str,
        typer.Argument(help="Date as YYYY-MM-DD"),
    ],
    reverse: Annotated[
        bool,
        typer.Option("--to-hijri", help="Convert a Gregorian date to Hijri instead"),
    ] = False,
) -> None:
    """Convert a Hijri date to Gregorian (arithmetic calendar)."""
    if reverse:
        converted = format_hijri_date(date_text)
        if converted == date_text:
            console.print(f"[bold red]Error:[/bold red] Invalid Gregorian date: {date_text}")
            raise typer.Exit(1)
        console.print(f"{date_text} → {converted} (Hijri)")
        return

    match = HIJRI_DATE_PATTERN.match(date_text.strip())
    if not match:
        console.print(f"[bold red]Error:[/bold red] Expected YYYY-MM-DD, got: {date_text}")
        raise typer.Exit(1)

    year, month, day = (int(part) for part in match.groups())
    try:
        gregorian = to_gregorian(year, month, day)
    except (OutOfRangeError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"{date_text} (Hijri) → {gregorian.isoformat()}")


if __name__ == "__main__":
    app()
