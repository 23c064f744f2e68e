"""Matching of enrollments against exam schedules.

Records are compared on their (course_code, class_no) keys as stored. Both
sides were normalized when the records were created, so matching is plain
equality and never re-normalizes.
"""

import logging
from collections.abc import Iterable

from .constants import CLASS_PLACEHOLDER
from .models import (
    EnrollmentRecord,
    ExamRecord,
    GapReason,
    LecturerExamRecord,
    MatchResult,
    StudentSchedule,
)
from .normalization import convert_arabic_numerals

logger = logging.getLogger(__name__)


def _exam_sort_key(exam: ExamRecord) -> tuple[str, str]:
    return (exam.exam_date or "", exam.start_time or "")


class ExamIndex:
    """Exams indexed by match key and by course code.

    When several exams share a key, the earliest by (exam_date, start_time)
    is kept.
    """

    def __init__(self, exams: Iterable[ExamRecord]):
        self.by_key: dict[tuple[str, str], ExamRecord] = {}
        self.by_course: dict[str, list[ExamRecord]] = {}

        for exam in sorted(exams, key=_exam_sort_key):
            self.by_key.setdefault(exam.key, exam)
            self.by_course.setdefault(exam.course_code, []).append(exam)

    def course_name(self, course_code: str) -> str | None:
        """Name of any exam scheduled for the course."""
        for exam in self.by_course.get(course_code, []):
            if exam.course_name:
                return exam.course_name
        return None


class MatchingEngine:
    """Pairs each enrollment with its exam or a gap reason."""

    def __init__(self, class_placeholder: str = CLASS_PLACEHOLDER):
        """Initialize engine.

        Args:
            class_placeholder: Class number used for enrollments with no class
        """
        self.class_placeholder = class_placeholder

    def match_one(self, enrollment: EnrollmentRecord, index: ExamIndex) -> MatchResult:
        """Match a single enrollment.

        Args:
            enrollment: Enrollment to look up
            index: Indexed exams

        Returns:
            MatchResult with either an exam or a gap reason
        """
        course_name = index.course_name(enrollment.course_code) or enrollment.course_code

        exam = index.by_key.get(enrollment.key)
        if exam is not None:
            return MatchResult(
                enrollment=enrollment,
                exam=exam,
                course_name=exam.course_name or course_name,
            )

        if enrollment.course_code not in index.by_course:
            gap_reason = GapReason.NO_EXAM_FOR_COURSE
        elif enrollment.class_no == self.class_placeholder:
            gap_reason = GapReason.UNSCHEDULED_CLASS
        else:
            gap_reason = GapReason.CLASS_MISMATCH

        return MatchResult(enrollment=enrollment, gap_reason=gap_reason, course_name=course_name)

    def match_each(
        self, enrollments: Iterable[EnrollmentRecord], exams: Iterable[ExamRecord]
    ) -> list[MatchResult]:
        """Match every enrollment, one result per enrollment in input order."""
        index = ExamIndex(exams)
        return [self.match_one(enrollment, index) for enrollment in enrollments]

    def match(
        self, enrollments: Iterable[EnrollmentRecord], exams: Iterable[ExamRecord]
    ) -> list[StudentSchedule]:
        """Match enrollments against exams, grouped by student.

        Students appear in order of their first enrollment; each student's
        results keep the enrollment order. Every enrollment yields exactly
        one result.

        Args:
            enrollments: Enrollment records
            exams: Exam records

        Returns:
            One StudentSchedule per student
        """
        schedules: dict[str, StudentSchedule] = {}
        for result in self.match_each(enrollments, exams):
            enrollment = result.enrollment
            schedule = schedules.get(enrollment.student_id)
            if schedule is None:
                schedule = StudentSchedule(
                    student_id=enrollment.student_id, student_name=enrollment.student_name
                )
                schedules[enrollment.student_id] = schedule
            elif schedule.student_name is None and enrollment.student_name:
                schedule.student_name = enrollment.student_name
            schedule.results.append(result)

        logger.info(
            f"Matched {sum(len(s.matched) for s in schedules.values())} of "
            f"{sum(len(s.results) for s in schedules.values())} enrollments "
            f"for {len(schedules)} students"
        )
        return list(schedules.values())

    def match_student(
        self,
        student_id: str,
        enrollments: Iterable[EnrollmentRecord],
        exams: Iterable[ExamRecord],
    ) -> StudentSchedule:
        """Build one student's schedule.

        Args:
            student_id: Student to look up
            enrollments: Enrollment records (any students)
            exams: Exam records

        Returns:
            StudentSchedule (empty if the student has no enrollments)
        """
        student_id = convert_arabic_numerals(str(student_id)).strip()
        own = [e for e in enrollments if e.student_id == student_id]
        schedule = StudentSchedule(student_id=student_id)
        schedule.results = self.match_each(own, exams)
        schedule.student_name = next((e.student_name for e in own if e.student_name), None)
        return schedule


def sort_for_display(results: Iterable[MatchResult]) -> list[MatchResult]:
    """Order results for a schedule view.

    Matched results come first by exam date and start time, then gaps by
    course code.
    """
    results = list(results)
    matched = sorted((r for r in results if r.is_matched), key=lambda r: _exam_sort_key(r.exam))
    gaps = sorted((r for r in results if not r.is_matched), key=lambda r: r.enrollment.course_code)
    return matched + gaps


def find_lecturer_exams(
    query: str, records: Iterable[LecturerExamRecord]
) -> list[LecturerExamRecord]:
    """Find a lecturer's exam duties by name.

    Every whitespace-separated word of the query must occur in the lecturer
    name, case-insensitively.

    Args:
        query: Name or part of a name
        records: Lecturer exam records

    Returns:
        Matching records sorted by exam date and period start
    """
    words = query.lower().split()
    if not words:
        return []

    found = [r for r in records if all(word in r.lecturer_name.lower() for word in words)]
    return sorted(found, key=lambda r: (r.exam_date or "", r.period_start or ""))
