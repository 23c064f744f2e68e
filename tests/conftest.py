"""Test fixtures for exam schedule parser tests."""

from io import BytesIO

import openpyxl
import pytest

from exam_schedule_parser.workbook import Worksheet


def make_xlsx(rows: list[list], title: str = "Sheet1") -> bytes:
    """Build an .xlsx file in memory from row lists."""
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = title
    for row in rows:
        sheet.append(row)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def xlsx_factory():
    """Factory building .xlsx bytes from row lists."""
    return make_xlsx


@pytest.fixture
def block_rows():
    """Two student blocks, each with its own column order."""
    return [
        ["Student Schedule Report"],
        ["Student ID:", "441000001", "Name:", "Ahmed Ali"],
        ["Course Code", "Section", "Course Title"],
        ["CS 101", "3", "Intro to Programming"],
        ["MATH 201", "1", "Calculus"],
        [],
        ["Student ID:", "441000002", "Name:", "Sara Omar"],
        ["Course Title", "Course Code", "Section"],
        ["Physics", "PHYS 110", "2"],
        ["Intro to Programming", "cs-101", "4"],
    ]


@pytest.fixture
def block_rows_without_class():
    """One student block whose header has no class/section column."""
    return [
        ["Student ID:", "441234567", "Name:", "Ahmed Ali"],
        ["Course Code", "Course Title"],
        ["CS 101", "Intro to Programming"],
        ["MATH 201", "Calculus"],
        ["PHYS 110", "Physics"],
    ]


@pytest.fixture
def section_rows():
    """Arabic section roster with two labeled course sections."""
    return [
        ["المقرر:", "CS 101", "الشعبة:", "3"],
        ["رقم الطالب", "اسم الطالب"],
        ["441000001", "Ahmed Ali"],
        ["441000002", "Sara Omar"],
        [],
        ["المقرر:", "MATH 201", "الشعبة:", "5"],
        ["رقم الطالب", "اسم الطالب"],
        ["441000003", "Omar Saleh"],
    ]


@pytest.fixture
def table_rows():
    """Flat enrollment table with one bad ID and one incomplete row."""
    return [
        ["Student ID", "Student Name", "Course Code", "Section"],
        ["441000001", "Ahmed Ali", "CS 101", "3"],
        ["441000002", "Sara Omar", "cs-101", "3"],
        ["12", "Bad Row", "MATH 201", "1"],
        ["441000003", "Omar Saleh", "", "1"],
    ]


@pytest.fixture
def exam_rows():
    """Exam timetable with Hijri and Gregorian dates."""
    return [
        [
            "Course Code",
            "Course Name",
            "Section",
            "Exam Date",
            "Start Time",
            "End Time",
            "Place",
            "Period",
        ],
        ["cs 101", "Intro to Programming", "3", "1447-07-01", "08:00 AM", "10:00 AM", "Hall A", "Final"],
        ["MATH 201", "Calculus", "1", "1447-07-03", "1:00 PM", None, "Hall B", "Final"],
        ["CS 101", "Intro to Programming", "5", "2025-12-20", "08:00", "10:00", "Hall C", "Final"],
        ["PHYS 110", "Physics", "2", None, "08:00", None, "Hall D", "Final"],
    ]


@pytest.fixture
def lecturer_rows():
    """Invigilation schedule with Arabic time markers."""
    return [
        [
            "Lecturer Name",
            "Role",
            "Section",
            "Course Code",
            "Course Name",
            "Room",
            "Exam Date",
            "Exam Period",
            "Period Start",
        ],
        ["Dr. Khalid Hassan", "Invigilator", "3", "CS 101", "Intro", "Hall A", "1447-07-01", "First", "8:00 ص"],
        ["Dr. Mona Saleh", "Supervisor", "1", "MATH 201", "Calculus", "Hall B", "1447-07-03", "Second", "1:00 م"],
    ]


@pytest.fixture
def block_sheet(block_rows):
    return Worksheet.from_rows(block_rows)


@pytest.fixture
def section_sheet(section_rows):
    return Worksheet.from_rows(section_rows)


@pytest.fixture
def table_sheet(table_rows):
    return Worksheet.from_rows(table_rows)


@pytest.fixture
def exam_sheet(exam_rows):
    return Worksheet.from_rows(exam_rows)


@pytest.fixture
def block_xlsx(block_rows):
    return make_xlsx(block_rows)


@pytest.fixture
def section_xlsx(section_rows):
    return make_xlsx(section_rows)


@pytest.fixture
def table_xlsx(table_rows):
    return make_xlsx(table_rows)


@pytest.fixture
def exam_xlsx(exam_rows):
    return make_xlsx(exam_rows)


@pytest.fixture
def lecturer_xlsx(lecturer_rows):
    return make_xlsx(lecturer_rows)
