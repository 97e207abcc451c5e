from .exam_detail import ExamDetail
from .student import Student

__all__ = [
    "ExamDetail",
    "Student",
]
