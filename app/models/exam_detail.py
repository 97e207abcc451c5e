import uuid
from datetime import datetime

from sqlalchemy import BigInteger, String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.timestamps import utcnow

class ExamDetail(Base):
    __tablename__ = "exam_detail"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id: Mapped[str] = mapped_column(String(36), ForeignKey("student.id", ondelete="CASCADE"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    exam: Mapped[str] = mapped_column(String, nullable=False)
    points: Mapped[int] = mapped_column(BigInteger, nullable=False)
    total: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    student: Mapped["Student"] = relationship("Student", back_populates="details")

    def __repr__(self):
        return f"<ExamDetail(id={self.id}, exam='{self.exam}', points={self.points}, total={self.total})>"
