import uuid
from typing import Any, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import Conflict, NotFound, ScoreboardError
from app.core.logger import logger
from app.models import ExamDetail, Student
from app.models.timestamps import utcnow
from app.repositories.student import StudentRepository, STUDENT_EXISTS
from app.services import aggregate
from app.services.validation import parse_name

STUDENT_NOT_FOUND = "Student not found"


class StudentService:
    @staticmethod
    async def list_students(db: AsyncSession) -> Sequence[Student]:
        """
        List every student for the leaderboard.

        Args:
            db: Async SQLAlchemy session

        Returns:
            list: Students by points, highest first; newer students first on a tie
        """
        students = await StudentRepository(db).find_all()
        logger.info(f"[LIST STUDENTS] Fetched {len(students)} students")
        return students

    @staticmethod
    async def get_student_by_name(name: str, db: AsyncSession) -> Student:
        """
        Fetch one student by exact name.

        Raises:
            NotFound: No student with this name
            StorageError: Database failure
        """
        student = await StudentRepository(db).find_by_name(name)
        if not student:
            logger.warning(f"[GET STUDENT] Student not found: name '{name}'")
            raise NotFound(STUDENT_NOT_FOUND)

        logger.info(f"[GET STUDENT] Found student: '{name}'")
        return student

    @staticmethod
    async def get_student(student_id: str, db: AsyncSession) -> Student:
        """
        Fetch one student by id.

        Raises:
            NotFound: No student with this id
            StorageError: Database failure
        """
        student = await StudentRepository(db).find_by_id(student_id)
        if not student:
            logger.warning(f"[GET STUDENT] Student not found: ID {student_id}")
            raise NotFound(STUDENT_NOT_FOUND)

        logger.info(f"[GET STUDENT] Found student: ID {student_id}")
        return student

    @staticmethod
    async def create_student(name: Any, db: AsyncSession) -> Student:
        """
        Create a student with no exam details and zero aggregates.

        Args:
            name: Requested name, trimmed before use
            db: Async SQLAlchemy session

        Returns:
            Student: The stored student

        Raises:
            ValidationError: Empty name
            Conflict: A student with this name already exists
            StorageError: Database failure
        """
        name = parse_name(name)
        repository = StudentRepository(db)

        if await repository.find_by_name(name):
            logger.warning(f"[CREATE STUDENT] Name already taken: '{name}'")
            raise Conflict(STUDENT_EXISTS)

        student = Student(
            id=str(uuid.uuid4()),
            name=name,
            points=0,
            total=0,
            created_at=utcnow(),
            details=[],
        )
        await repository.save(student)

        logger.info(f"[CREATE STUDENT] Created student ID {student.id}: '{name}'")
        return student

    @staticmethod
    async def rename_student(student_id: str, new_name: Any, db: AsyncSession) -> Student:
        """
        Rename a student, keeping names unique.

        Raises:
            ValidationError: Empty name
            NotFound: No student with this id
            Conflict: Another student already has the name
            StorageError: Database failure
        """
        new_name = parse_name(new_name)
        repository = StudentRepository(db)

        student = await repository.find_by_id(student_id)
        if not student:
            logger.warning(f"[RENAME STUDENT] Student not found: ID {student_id}")
            raise NotFound(STUDENT_NOT_FOUND)

        if new_name != student.name:
            if await repository.find_by_name(new_name):
                logger.warning(f"[RENAME STUDENT] Name already taken: '{new_name}'")
                raise Conflict(STUDENT_EXISTS)

        old_name = student.name
        student.name = new_name
        await repository.save(student)

        logger.info(f"[RENAME STUDENT] Student ID {student_id} renamed: '{old_name}' -> '{new_name}'")
        return student

    @staticmethod
    async def delete_student(student_id: str, db: AsyncSession) -> None:
        """
        Delete a student together with all of its exam details.

        Raises:
            NotFound: No student with this id
            StorageError: Database failure
        """
        deleted = await StudentRepository(db).delete_by_id(student_id)
        if not deleted:
            logger.warning(f"[DELETE STUDENT] Student not found: ID {student_id}")
            raise NotFound(STUDENT_NOT_FOUND)

        logger.info(f"[DELETE STUDENT] Student deleted: ID {student_id}")

    @staticmethod
    async def add_detail(
            name: str,
            exam: Any,
            points: Any,
            total: Any,
            db: AsyncSession,
    ) -> Tuple[Student, ExamDetail]:
        """
        Record an exam result for the student and add it to the aggregates.

        Args:
            name: Name of the student
            exam: Exam name
            points: Points scored
            total: Maximum points of the exam
            db: Async SQLAlchemy session

        Returns:
            Tuple[Student, ExamDetail]: Updated student and the new detail

        Raises:
            ValidationError: Invalid exam name, points or total
            NotFound: No student with this name
            Conflict: The student changed concurrently
            StorageError: Database failure
        """
        repository = StudentRepository(db)
        student = await repository.find_by_name(name)
        if not student:
            logger.warning(f"[ADD DETAIL] Student not found: name '{name}'")
            raise NotFound(STUDENT_NOT_FOUND)

        try:
            student, detail = aggregate.add_detail(student, exam, points, total)
        except ScoreboardError as e:
            logger.warning(f"[ADD DETAIL] Rejected for '{name}': {e.message}")
            raise

        await repository.save(student)

        logger.info(
            f"[ADD DETAIL] '{name}' +{detail.points}/{detail.total} for '{detail.exam}', "
            f"now {student.points}/{student.total}"
        )
        return student, detail

    @staticmethod
    async def update_detail(
            name: str,
            detail_id: str,
            db: AsyncSession,
            exam: Optional[Any] = None,
            points: Optional[Any] = None,
            total: Optional[Any] = None,
    ) -> Tuple[Student, ExamDetail]:
        """
        Patch an exam detail; omitted fields keep their value.

        Raises:
            ValidationError: The merged detail breaks the bounds
            NotFound: No such student or detail
            Conflict: The student changed concurrently
            StorageError: Database failure
        """
        repository = StudentRepository(db)
        student = await repository.find_by_name(name)
        if not student:
            logger.warning(f"[UPDATE DETAIL] Student not found: name '{name}'")
            raise NotFound(STUDENT_NOT_FOUND)

        try:
            student, detail = aggregate.update_detail(
                student, detail_id, exam=exam, points=points, total=total
            )
        except ScoreboardError as e:
            logger.warning(f"[UPDATE DETAIL] Rejected detail {detail_id} of '{name}': {e.message}")
            raise

        await repository.save(student)

        logger.info(
            f"[UPDATE DETAIL] Detail {detail_id} of '{name}' is now {detail.points}/{detail.total}, "
            f"student {student.points}/{student.total}"
        )
        return student, detail

    @staticmethod
    async def remove_detail(name: str, detail_id: str, db: AsyncSession) -> Student:
        """
        Remove an exam detail and subtract it from the aggregates.

        Raises:
            NotFound: No such student or detail
            Conflict: The student changed concurrently
            StorageError: Database failure
        """
        repository = StudentRepository(db)
        student = await repository.find_by_name(name)
        if not student:
            logger.warning(f"[REMOVE DETAIL] Student not found: name '{name}'")
            raise NotFound(STUDENT_NOT_FOUND)

        try:
            student = aggregate.remove_detail(student, detail_id)
        except NotFound:
            logger.warning(f"[REMOVE DETAIL] Detail not found: {detail_id} of '{name}'")
            raise

        await repository.save(student)

        logger.info(f"[REMOVE DETAIL] Detail {detail_id} removed from '{name}', now {student.points}/{student.total}")
        return student
