"""Tests for the matching engine."""

import pytest

from exam_schedule_parser.matching import (
    ExamIndex,
    MatchingEngine,
    find_lecturer_exams,
    sort_for_display,
)
from exam_schedule_parser.models import (
    EnrollmentRecord,
    ExamRecord,
    GapReason,
    LecturerExamRecord,
)


def make_exam(course_code="CS101", class_no="3", exam_date="2025-12-17", start_time="08:00", **kw):
    return ExamRecord(
        course_code=course_code,
        course_name=kw.get("course_name", "Intro to Programming"),
        class_no=class_no,
        exam_date=exam_date,
        start_time=start_time,
        end_time=kw.get("end_time", "10:00"),
        place=kw.get("place", "Hall A"),
        period=kw.get("period", "Final"),
    )


def enroll(student_id="441000001", course_code="CS101", class_no="3", **kw):
    return EnrollmentRecord(student_id=student_id, course_code=course_code, class_no=class_no, **kw)


@pytest.fixture
def engine():
    return MatchingEngine()


class TestMatchOne:
    """Tests for single enrollment matching."""

    def test_match_across_spellings(self, engine):
        """Test codes differing in case and spacing still match."""
        index = ExamIndex([make_exam(course_code="cs 101", class_no="3")])
        result = engine.match_one(enroll(course_code="CS101", class_no="3"), index)

        assert result.is_matched
        assert result.gap_reason is None
        assert result.course_name == "Intro to Programming"

    def test_class_mismatch(self, engine):
        """Test a known course with another class is a class mismatch."""
        index = ExamIndex([make_exam(class_no="3")])
        result = engine.match_one(enroll(class_no="5"), index)

        assert result.exam is None
        assert result.gap_reason == GapReason.CLASS_MISMATCH
        assert result.course_name == "Intro to Programming"

    def test_no_exam_for_course(self, engine):
        """Test an unknown course."""
        index = ExamIndex([make_exam()])
        result = engine.match_one(enroll(course_code="PHYS110"), index)

        assert result.gap_reason == GapReason.NO_EXAM_FOR_COURSE
        assert result.course_name == "PHYS110"

    def test_placeholder_class(self, engine):
        """Test a placeholder class on a known course is unscheduled."""
        index = ExamIndex([make_exam()])
        result = engine.match_one(enroll(class_no="N/A"), index)
        assert result.gap_reason == GapReason.UNSCHEDULED_CLASS

    def test_placeholder_class_matches_placeholder_exam(self, engine):
        """Test placeholder classes match literally."""
        index = ExamIndex([make_exam(class_no="N/A")])
        assert engine.match_one(enroll(class_no="N/A"), index).is_matched

    def test_custom_placeholder(self):
        """Test the engine uses its configured placeholder."""
        index = ExamIndex([make_exam()])
        result = MatchingEngine(class_placeholder="TBA").match_one(enroll(class_no="TBA"), index)
        assert result.gap_reason == GapReason.UNSCHEDULED_CLASS

    def test_class_numbers_compare_exactly(self, engine):
        """Test "03" and "3" are different classes."""
        index = ExamIndex([make_exam(class_no="3")])
        assert engine.match_one(enroll(class_no="03"), index).gap_reason == GapReason.CLASS_MISMATCH


class TestExamIndex:
    """Tests for ExamIndex."""

    def test_earliest_exam_wins(self):
        """Test duplicate keys keep the earliest exam."""
        late = make_exam(exam_date="2025-12-20", place="Hall B")
        early = make_exam(exam_date="2025-12-17", start_time="13:00", place="Hall A")
        earlier = make_exam(exam_date="2025-12-17", start_time="08:00", place="Hall C")
        index = ExamIndex([late, early, earlier])
        assert index.by_key[("CS101", "3")].place == "Hall C"

    def test_missing_start_time(self):
        """Test exams without a start time sort before timed ones on the same day."""
        untimed = make_exam(start_time=None, place="Hall B")
        timed = make_exam(start_time="08:00", place="Hall A")
        index = ExamIndex([timed, untimed])
        assert index.by_key[("CS101", "3")].place == "Hall B"

    def test_missing_date_and_time(self, engine):
        """Test incomplete exams still produce one result per enrollment."""
        exams = [make_exam(exam_date=None, start_time=None), make_exam(class_no="5")]
        results = engine.match_each([enroll(), enroll(class_no="5")], exams)

        assert [r.is_matched for r in results] == [True, True]
        assert sort_for_display(results)[0].exam.exam_date is None

    def test_course_name_fallback(self):
        """Test the course name comes from any exam of the course."""
        index = ExamIndex([make_exam(class_no="1", course_name="Intro")])
        assert index.course_name("CS101") == "Intro"
        assert index.course_name("MATH201") is None


class TestMatch:
    """Tests for grouped matching."""

    def test_every_enrollment_has_one_result(self, engine):
        """Test results are total and keep enrollment order."""
        enrollments = [
            enroll("441000001", "CS101", "3"),
            enroll("441000002", "MATH201", "1"),
            enroll("441000001", "PHYS110", "2"),
            enroll("441000001", "CS101", "5"),
        ]
        exams = [make_exam("CS101", "3"), make_exam("MATH201", "1", course_name="Calculus")]

        schedules = engine.match(enrollments, exams)

        assert [s.student_id for s in schedules] == ["441000001", "441000002"]
        first = schedules[0]
        assert [r.enrollment.course_code for r in first.results] == ["CS101", "PHYS110", "CS101"]
        assert [r.gap_reason for r in first.results] == [
            None,
            GapReason.NO_EXAM_FOR_COURSE,
            GapReason.CLASS_MISMATCH,
        ]
        assert sum(len(s.results) for s in schedules) == len(enrollments)

    def test_match_each_order(self, engine):
        """Test the flat result list follows input order."""
        enrollments = [enroll(course_code="MATH201"), enroll(course_code="CS101")]
        results = engine.match_each(enrollments, [make_exam()])
        assert [r.enrollment.course_code for r in results] == ["MATH201", "CS101"]

    def test_student_name_carried(self, engine):
        """Test the schedule takes the student's name from enrollments."""
        schedules = engine.match([enroll(student_name="Ahmed Ali")], [])
        assert schedules[0].student_name == "Ahmed Ali"

    def test_no_exams(self, engine):
        """Test every enrollment is a gap when there are no exams."""
        schedules = engine.match([enroll(), enroll(course_code="MATH201")], [])
        assert all(r.gap_reason == GapReason.NO_EXAM_FOR_COURSE for r in schedules[0].results)

    def test_match_student(self, engine):
        """Test one student's schedule."""
        enrollments = [enroll("441000001"), enroll("441000002", "MATH201", "1")]
        schedule = engine.match_student(" 441000002 ", enrollments, [make_exam()])

        assert schedule.student_id == "441000002"
        assert len(schedule.results) == 1
        assert schedule.gaps[0].gap_reason == GapReason.NO_EXAM_FOR_COURSE

    def test_match_student_arabic_digits(self, engine):
        """Test a query typed with Arabic-Indic digits finds the student."""
        schedule = engine.match_student("٤٤١٠٠٠٠٠١", [enroll("441000001")], [make_exam()])

        assert schedule.student_id == "441000001"
        assert len(schedule.matched) == 1

    def test_match_unknown_student(self, engine):
        """Test an unknown student has an empty schedule."""
        assert engine.match_student("999999999", [enroll()], [make_exam()]).results == []


def test_sort_for_display(engine):
    """Test matched results sort by date and gaps come last."""
    exams = [
        make_exam("CS101", "3", exam_date="2025-12-20"),
        make_exam("MATH201", "1", exam_date="2025-12-17"),
    ]
    enrollments = [
        enroll(course_code="ZOOL101"),
        enroll(course_code="CS101"),
        enroll(course_code="MATH201", class_no="1"),
        enroll(course_code="BIO101"),
    ]
    ordered = sort_for_display(engine.match_each(enrollments, exams))
    assert [r.enrollment.course_code for r in ordered] == ["MATH201", "CS101", "BIO101", "ZOOL101"]


class TestFindLecturerExams:
    """Tests for find_lecturer_exams function."""

    @pytest.fixture
    def duties(self):
        def duty(name, exam_date, period_start):
            return LecturerExamRecord(
                lecturer_name=name,
                section="1",
                course_code="CS101",
                course_name="Intro",
                room="Hall A",
                exam_date=exam_date,
                exam_period="First",
                period_start=period_start,
            )

        return [
            duty("Dr. Khalid Hassan", "2025-12-20", "08:00"),
            duty("Dr. Mona Saleh", "2025-12-17", "08:00"),
            duty("Dr. Khalid Hassan", "2025-12-17", "13:00"),
        ]

    def test_partial_name(self, duties):
        """Test case-insensitive partial names, sorted by date."""
        found = find_lecturer_exams("khalid", duties)
        assert [d.exam_date for d in found] == ["2025-12-17", "2025-12-20"]

    def test_all_words_required(self, duties):
        """Test every query word must occur."""
        assert find_lecturer_exams("khalid saleh", duties) == []

    def test_empty_query(self, duties):
        """Test an empty query finds nothing."""
        assert find_lecturer_exams("  ", duties) == []
