import uuid
from datetime import datetime

from sqlalchemy import BigInteger, String, Integer, DateTime
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.timestamps import utcnow

class Student(Base):
    __tablename__ = "student"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    points: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    details: Mapped[list["ExamDetail"]] = relationship(
        "ExamDetail",
        back_populates="student",
        order_by="ExamDetail.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Student(id={self.id}, name='{self.name}', points={self.points}, total={self.total})>"
