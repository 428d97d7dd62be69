from datetime import date
from typing import List

from app.core.schemas import CamelModel


class AttendanceTrendPoint(CamelModel):
    date: date
    present_count: int
    absent_count: int


class PerformanceBucket(CamelModel):
    range: str
    count: int


class ClassAnalytics(CamelModel):
    """Class-level summary, recomputed from stored records on every request."""

    total_students: int
    average_attendance: int
    average_score: int
    attendance_trend: List[AttendanceTrendPoint]
    performance_distribution: List[PerformanceBucket]
