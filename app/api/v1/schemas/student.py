from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class CreateNewStudent(BaseModel):
    name: Optional[str] = None


class RenameStudent(BaseModel):
    name: Optional[str] = None


class StudentSummary(BaseModel):
    id: str
    name: str
    points: int
    total: int


class StudentListItem(StudentSummary):
    createdAt: datetime


class StudentDeleted(BaseModel):
    detail: str
