from datetime import date
from typing import List

from app.core.schemas import CamelModel


class AttendanceMark(CamelModel):
    """Presence flag for one student."""

    student_id: int
    present: bool


class AttendanceBatchMark(CamelModel):
    """Presence flags for a set of students on one date."""

    date: date
    records: List[AttendanceMark]


class AttendanceRecordResponse(CamelModel):
    id: int
    student_id: int
    date: date
    present: bool
    teacher_id: int
