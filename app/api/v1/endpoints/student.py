from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.schemas.detail import (
    CreateDetail, UpdateDetail, DetailResponse, StudentWithDetails, DetailChangeResponse, DetailRemovedResponse
)
from app.api.v1.schemas.student import (
    CreateNewStudent, RenameStudent, StudentSummary, StudentListItem, StudentDeleted
)
from app.core.database import get_db
from app.core.errors import ScoreboardError, ValidationError, NotFound, Conflict
from app.core.logger import logger
from app.models import ExamDetail, Student
from app.services.aggregate import details_newest_first
from app.services.student import StudentService

router = APIRouter(prefix="/students", tags=["Student"])

ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    Conflict: status.HTTP_409_CONFLICT,
}


def to_http_error(e: Exception, tag: str, failure: str) -> HTTPException:
    """
    Map a core error kind to an HTTPException.

    Client-side kinds keep their message; storage failures and anything
    unexpected become a 500 with the generic ``failure`` text.
    """
    if isinstance(e, ScoreboardError):
        for kind, code in ERROR_STATUS.items():
            if isinstance(e, kind):
                return HTTPException(status_code=code, detail=e.message)

    logger.error(f"{tag} {failure}: {str(e)}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=failure
    )


def summary(student: Student) -> dict:
    return {
        "id": student.id,
        "name": student.name,
        "points": student.points,
        "total": student.total,
    }


def detail_response(detail: ExamDetail) -> DetailResponse:
    return DetailResponse(
        id=detail.id,
        exam=detail.exam,
        points=detail.points,
        total=detail.total,
        createdAt=detail.created_at,
    )


def with_details(student: Student) -> StudentWithDetails:
    return StudentWithDetails(
        **summary(student),
        createdAt=student.created_at,
        details=[detail_response(detail) for detail in details_newest_first(student)],
    )


@router.get("/", response_model=List[StudentListItem], status_code=status.HTTP_200_OK)
async def get_students(db: AsyncSession = Depends(get_db)):
    """
    Leaderboard: every student, highest points first.

    Returns:
        List[StudentListItem]: Students without their exam details

    Raises:
        HTTPException: 500 - Internal server error
    """
    try:
        students = await StudentService.list_students(db)
        return [
            StudentListItem(**summary(student), createdAt=student.created_at)
            for student in students
        ]

    except Exception as e:
        raise to_http_error(e, "[LIST STUDENTS]", "Error while listing students") from e


@router.get("/name/{name}", response_model=StudentWithDetails, status_code=status.HTTP_200_OK)
async def get_student_by_name(name: str, db: AsyncSession = Depends(get_db)):
    """
    One student with its exam details, newest exam first.

    Raises:
        HTTPException: 404 - Student not found
        HTTPException: 500 - Internal server error
    """
    try:
        student = await StudentService.get_student_by_name(name, db)
        return with_details(student)

    except Exception as e:
        raise to_http_error(e, "[GET STUDENT]", "Error while fetching the student") from e


@router.get("/{student_id}", response_model=StudentWithDetails, status_code=status.HTTP_200_OK)
async def get_student(student_id: str, db: AsyncSession = Depends(get_db)):
    """
    One student addressed by id, exam details newest first.

    Raises:
        HTTPException: 404 - Student not found
        HTTPException: 500 - Internal server error
    """
    try:
        student = await StudentService.get_student(student_id, db)
        return with_details(student)

    except Exception as e:
        raise to_http_error(e, "[GET STUDENT]", "Error while fetching the student") from e


@router.post("/", response_model=StudentSummary, status_code=status.HTTP_201_CREATED)
async def create_student(student_data: CreateNewStudent, db: AsyncSession = Depends(get_db)):
    """
    Create a student with zero points.

    Args:
        student_data: Name of the new student
        db: Async SQLAlchemy session

    Returns:
        StudentSummary: The created student

    Raises:
        HTTPException: 400 - Empty name
        HTTPException: 409 - Name already taken
        HTTPException: 500 - Internal server error
    """
    try:
        student = await StudentService.create_student(student_data.name, db)
        return StudentSummary(**summary(student))

    except Exception as e:
        raise to_http_error(e, "[CREATE STUDENT]", "Error while creating the student") from e


@router.put("/{student_id}", response_model=StudentSummary, status_code=status.HTTP_200_OK)
async def rename_student(student_id: str, student_data: RenameStudent, db: AsyncSession = Depends(get_db)):
    """
    Rename a student.

    Raises:
        HTTPException: 400 - Empty name
        HTTPException: 404 - Student not found
        HTTPException: 409 - Name already taken
        HTTPException: 500 - Internal server error
    """
    try:
        student = await StudentService.rename_student(student_id, student_data.name, db)
        return StudentSummary(**summary(student))

    except Exception as e:
        raise to_http_error(e, "[RENAME STUDENT]", "Error while renaming the student") from e


@router.delete("/{student_id}", response_model=StudentDeleted, status_code=status.HTTP_200_OK)
async def delete_student(student_id: str, db: AsyncSession = Depends(get_db)):
    """
    Delete a student and every exam detail it owns.

    Raises:
        HTTPException: 404 - Student not found
        HTTPException: 409 - Concurrent modification
        HTTPException: 500 - Internal server error
    """
    try:
        await StudentService.delete_student(student_id, db)
        return StudentDeleted(detail="Student deleted")

    except Exception as e:
        raise to_http_error(e, "[DELETE STUDENT]", "Error while deleting the student") from e


@router.post("/name/{name}/details", response_model=DetailChangeResponse, status_code=status.HTTP_201_CREATED)
async def add_detail(name: str, detail_data: CreateDetail, db: AsyncSession = Depends(get_db)):
    """
    Record an exam result for the student.

    Args:
        name: Name of the student
        detail_data: Exam name, points scored and maximum points
        db: Async SQLAlchemy session

    Returns:
        DetailChangeResponse: Updated aggregates and the new detail

    Raises:
        HTTPException: 400 - Invalid exam, points or total
        HTTPException: 404 - Student not found
        HTTPException: 409 - Concurrent modification
        HTTPException: 500 - Internal server error
    """
    try:
        student, detail = await StudentService.add_detail(
            name, detail_data.exam, detail_data.points, detail_data.total, db
        )
        return DetailChangeResponse(**summary(student), detail=detail_response(detail))

    except Exception as e:
        raise to_http_error(e, "[ADD DETAIL]", "Error while adding the exam detail") from e


@router.put(
    "/name/{name}/details/{detail_id}",
    response_model=DetailChangeResponse,
    status_code=status.HTTP_200_OK
)
async def update_detail(name: str, detail_id: str, detail_data: UpdateDetail, db: AsyncSession = Depends(get_db)):
    """
    Patch an exam detail; fields left out of the body keep their value.

    Raises:
        HTTPException: 400 - Resulting detail is invalid
        HTTPException: 404 - Student or detail not found
        HTTPException: 409 - Concurrent modification
        HTTPException: 500 - Internal server error
    """
    try:
        student, detail = await StudentService.update_detail(
            name,
            detail_id,
            db,
            exam=detail_data.exam,
            points=detail_data.points,
            total=detail_data.total,
        )
        return DetailChangeResponse(**summary(student), detail=detail_response(detail))

    except Exception as e:
        raise to_http_error(e, "[UPDATE DETAIL]", "Error while updating the exam detail") from e


@router.delete(
    "/name/{name}/details/{detail_id}",
    response_model=DetailRemovedResponse,
    status_code=status.HTTP_200_OK
)
async def remove_detail(name: str, detail_id: str, db: AsyncSession = Depends(get_db)):
    """
    Remove an exam detail and subtract it from the student's aggregates.

    Raises:
        HTTPException: 404 - Student or detail not found
        HTTPException: 409 - Concurrent modification
        HTTPException: 500 - Internal server error
    """
    try:
        student = await StudentService.remove_detail(name, detail_id, db)
        return DetailRemovedResponse(**summary(student), message="Exam detail deleted")

    except Exception as e:
        raise to_http_error(e, "[REMOVE DETAIL]", "Error while deleting the exam detail") from e
