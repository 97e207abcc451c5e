"""
Aggregate maintenance for a student's exam details.

A student's ``points`` and ``total`` are derived fields: they always equal the
sums of ``points`` and ``total`` over the student's details. Every mutation
here adjusts them by the delta it applies instead of re-summing the details,
and validates everything before touching the student, so a failed call leaves
the student exactly as it was.

These functions work on loaded ``Student`` objects only; persisting the result
is the caller's job.
"""
import uuid
from typing import Any, Optional, Tuple

from app.core.errors import NotFound
from app.models import ExamDetail, Student
from app.models.timestamps import utcnow
from app.services.validation import parse_exam, parse_points, parse_total, check_detail_bounds

DETAIL_NOT_FOUND = "Exam detail not found"


def find_detail(student: Student, detail_id: str) -> ExamDetail:
    """
    Look up a detail of the student by its id.

    Raises:
        NotFound: the student has no detail with this id
    """
    for detail in student.details:
        if detail.id == detail_id:
            return detail
    raise NotFound(DETAIL_NOT_FOUND)


def add_detail(student: Student, exam: Any, points: Any, total: Any) -> Tuple[Student, ExamDetail]:
    """
    Append a new exam detail and add its score to the student's aggregates.

    Args:
        student: Student to extend
        exam: Exam name, trimmed before storing
        points: Points scored, 0 <= points <= total
        total: Maximum points of the exam, at least 1

    Returns:
        Tuple[Student, ExamDetail]: The student and the appended detail

    Raises:
        ValidationError: Any of the values is missing or out of range
    """
    exam = parse_exam(exam)
    points = parse_points(points)
    total = parse_total(total)
    check_detail_bounds(points, total)

    detail = ExamDetail(
        id=str(uuid.uuid4()),
        exam=exam,
        points=points,
        total=total,
        created_at=utcnow(),
    )
    student.details.append(detail)
    student.points += points
    student.total += total

    return student, detail


def update_detail(
        student: Student,
        detail_id: str,
        exam: Optional[Any] = None,
        points: Optional[Any] = None,
        total: Optional[Any] = None,
) -> Tuple[Student, ExamDetail]:
    """
    Patch an existing detail in place and shift the aggregates by the difference.

    Fields passed as ``None`` keep their current value. Bounds are checked on
    the merged result, so lowering ``total`` below the stored ``points`` fails
    even when ``points`` is not part of the patch.

    Args:
        student: Student owning the detail
        detail_id: Id of the detail to patch
        exam: New exam name
        points: New points
        total: New total

    Returns:
        Tuple[Student, ExamDetail]: The student and the patched detail

    Raises:
        NotFound: No detail with this id
        ValidationError: The merged detail breaks the bounds
    """
    detail = find_detail(student, detail_id)

    new_exam = parse_exam(exam) if exam is not None else detail.exam
    new_points = parse_points(points) if points is not None else detail.points
    new_total = parse_total(total) if total is not None else detail.total
    check_detail_bounds(new_points, new_total)

    points_diff = new_points - detail.points
    total_diff = new_total - detail.total

    detail.exam = new_exam
    detail.points = new_points
    detail.total = new_total

    student.points += points_diff
    student.total += total_diff

    return student, detail


def remove_detail(student: Student, detail_id: str) -> Student:
    """
    Drop a detail and subtract its score from the aggregates.

    Raises:
        NotFound: No detail with this id
    """
    detail = find_detail(student, detail_id)

    student.points -= detail.points
    student.total -= detail.total
    student.details.remove(detail)

    return student


def summarize(student: Student) -> Tuple[int, int]:
    """Sum points and total over the details from scratch."""
    return (
        sum(detail.points for detail in student.details),
        sum(detail.total for detail in student.details),
    )


def check_consistency(student: Student) -> bool:
    return (student.points, student.total) == summarize(student)


def details_newest_first(student: Student) -> list:
    """Details ordered for presentation: newest first, later insertion first on equal timestamps."""
    return sorted(student.details, key=lambda d: (d.created_at, d.position), reverse=True)
