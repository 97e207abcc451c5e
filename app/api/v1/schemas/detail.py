from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel

from app.api.v1.schemas.student import StudentSummary


class CreateDetail(BaseModel):
    # numbers stay loose here and are parsed by the service layer
    exam: Optional[str] = None
    points: Any = None
    total: Any = None


class UpdateDetail(BaseModel):
    exam: Optional[str] = None
    points: Any = None
    total: Any = None


class DetailResponse(BaseModel):
    id: str
    exam: str
    points: int
    total: int
    createdAt: datetime


class StudentWithDetails(StudentSummary):
    createdAt: datetime
    details: List[DetailResponse]


class DetailChangeResponse(StudentSummary):
    detail: DetailResponse


class DetailRemovedResponse(StudentSummary):
    message: str
