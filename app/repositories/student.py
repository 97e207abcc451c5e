from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.inspection import inspect
from sqlalchemy.orm.attributes import flag_modified
from sqlalchemy.orm.exc import StaleDataError

from app.core.errors import Conflict, StorageError
from app.core.logger import logger
from app.models import Student

STUDENT_EXISTS = "Student already exists"
STUDENT_CHANGED = "Student was modified by another request, retry"


class StudentRepository:
    """
    Student persistence on top of an AsyncSession.

    Every SQLAlchemy failure leaves the session rolled back and surfaces as
    StorageError, or as Conflict when the database rejected a duplicate name
    or a stale version.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_name(self, name: str) -> Optional[Student]:
        try:
            result = await self.db.execute(select(Student).where(Student.name == name))
            return result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(f"[STORE] Lookup by name failed for '{name}': {str(e)}")
            raise StorageError("Error while looking up the student") from e

    async def find_by_id(self, student_id: str) -> Optional[Student]:
        try:
            result = await self.db.execute(select(Student).where(Student.id == student_id))
            return result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(f"[STORE] Lookup by id failed for {student_id}: {str(e)}")
            raise StorageError("Error while looking up the student") from e

    async def find_all(self) -> Sequence[Student]:
        try:
            result = await self.db.execute(
                select(Student).order_by(Student.points.desc(), Student.created_at.desc())
            )
            return result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"[STORE] Listing students failed: {str(e)}")
            raise StorageError("Error while listing students") from e

    async def save(self, student: Student) -> Student:
        """
        Persist the full student record, details included, in one commit.

        Every save of an existing record bumps its version, including saves
        that only touched a detail row, so two writers of the same student
        can never both succeed from the same snapshot.

        Raises:
            Conflict: Duplicate name or the record changed since it was read
            StorageError: Any other database failure
        """
        if inspect(student).persistent:
            flag_modified(student, "name")

        name, student_id = student.name, student.id
        self.db.add(student)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"[STORE] Integrity violation while saving '{name}': {str(e)}")
            raise Conflict(STUDENT_EXISTS) from e
        except StaleDataError as e:
            await self.db.rollback()
            logger.warning(f"[STORE] Stale version while saving student {student_id}")
            raise Conflict(STUDENT_CHANGED) from e
        except (SQLAlchemyError, OverflowError) as e:
            # OverflowError: an aggregate outgrew the INTEGER column
            await self.db.rollback()
            logger.error(f"[STORE] Saving student failed: {str(e)}")
            raise StorageError("Error while saving the student") from e

        return student

    async def delete_by_id(self, student_id: str) -> bool:
        """
        Delete the student and all its details.

        Returns:
            bool: False when no student had this id
        """
        try:
            student = await self.find_by_id(student_id)
            if student is None:
                return False
            await self.db.delete(student)
            await self.db.commit()
            return True
        except StaleDataError as e:
            await self.db.rollback()
            logger.warning(f"[STORE] Stale version while deleting student {student_id}")
            raise Conflict(STUDENT_CHANGED) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"[STORE] Deleting student {student_id} failed: {str(e)}")
            raise StorageError("Error while deleting the student") from e
