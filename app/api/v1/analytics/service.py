"""Analytics aggregation over a teacher's attendance and exam records.

Everything is recomputed from a full scan of the store; nothing is cached or
maintained incrementally. Store errors are not caught here.
"""

import logging
from collections import OrderedDict
from datetime import date
from fractions import Fraction
from typing import Dict, Iterable, List, Sequence, Tuple

from app.core.models import AttendanceRecord, ExamRecord
from app.core.store import RecordStore

from .schemas import AttendanceTrendPoint, ClassAnalytics, PerformanceBucket

logger = logging.getLogger(__name__)

TREND_DAYS = 7

# (label, inclusive upper bound in percent); the last bucket takes everything above 90
SCORE_BUCKETS: Tuple[Tuple[str, int], ...] = (
    ("0-50", 50),
    ("51-70", 70),
    ("71-90", 90),
    ("91-100", 100),
)


def round_half_up(value: Fraction) -> int:
    """Round a non-negative value to the nearest integer, halves up."""
    return int(value + Fraction(1, 2))


def exam_percentage(exam: ExamRecord) -> Fraction:
    """Exact score / max_score * 100, so that 45/50 compares equal to 90."""
    return Fraction(exam.score * 100, exam.max_score)


def bucket_for(pct: Fraction) -> str:
    for label, upper in SCORE_BUCKETS[:-1]:
        if pct <= upper:
            return label
    return SCORE_BUCKETS[-1][0]


def attendance_rate(records: Sequence[AttendanceRecord]) -> int:
    if not records:
        return 0
    present = sum(1 for r in records if r.present)
    return round_half_up(Fraction(present * 100, len(records)))


def attendance_trend(records: Iterable[AttendanceRecord], days: int = TREND_DAYS) -> List[AttendanceTrendPoint]:
    """Present/absent tallies for the latest `days` distinct dates that have any record."""
    tallies: Dict[date, List[int]] = {}
    for r in records:
        counts = tallies.setdefault(r.date, [0, 0])
        if r.present:
            counts[0] += 1
        else:
            counts[1] += 1
    ordered = sorted(tallies.items())[-days:] if days > 0 else []
    return [
        AttendanceTrendPoint(date=d, present_count=present, absent_count=absent)
        for d, (present, absent) in ordered
    ]


def average_score(exams: Sequence[ExamRecord]) -> int:
    if not exams:
        return 0
    total = sum((exam_percentage(e) for e in exams), Fraction(0))
    return round_half_up(total / len(exams))


def performance_distribution(exams: Iterable[ExamRecord]) -> List[PerformanceBucket]:
    counts: "OrderedDict[str, int]" = OrderedDict((label, 0) for label, _ in SCORE_BUCKETS)
    for e in exams:
        counts[bucket_for(exam_percentage(e))] += 1
    return [PerformanceBucket(range=label, count=count) for label, count in counts.items()]


async def get_analytics(store: RecordStore, teacher_id: int) -> ClassAnalytics:
    total_students = await store.count_active_students(teacher_id)
    if total_students == 0:
        return ClassAnalytics(
            total_students=0,
            average_attendance=0,
            average_score=0,
            attendance_trend=[],
            performance_distribution=[],
        )

    records = await store.list_attendance(teacher_id)
    exams = await store.list_exams(teacher_id)

    analytics = ClassAnalytics(
        total_students=total_students,
        average_attendance=attendance_rate(records),
        average_score=average_score(exams),
        attendance_trend=attendance_trend(records),
        performance_distribution=performance_distribution(exams),
    )
    logger.debug(
        "analytics_computed",
        extra={"teacher_id": teacher_id, "attendance_records": len(records), "exams": len(exams)},
    )
    return analytics
