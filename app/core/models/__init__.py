from app.core.models.attendance_record import AttendanceRecord
from app.core.models.exam_record import ExamRecord
from app.core.models.student import Student

__all__ = [
    "AttendanceRecord",
    "ExamRecord",
    "Student",
]
