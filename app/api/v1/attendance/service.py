"""Attendance listing and the batch reconciler."""

import logging
import re
from datetime import date, timedelta
from typing import List, Optional, Sequence, Tuple

from fastapi import status

from app.core.exceptions import DuplicateRecordError, ServiceError
from app.core.models import AttendanceRecord
from app.core.store import RecordStore

from .schemas import AttendanceBatchMark, AttendanceMark

logger = logging.getLogger(__name__)

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


# ----- Query parsing -----
def parse_date_param(value: str, field: str = "date") -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ServiceError(
            f"Invalid {field}, expected YYYY-MM-DD",
            status.HTTP_400_BAD_REQUEST,
            field=field,
        )


def month_bounds(value: str) -> Tuple[date, date]:
    """'YYYY-MM' -> (first day of month, first day of next month)."""
    match = _MONTH_RE.match(value)
    if not match:
        raise ServiceError("Invalid month, expected YYYY-MM", status.HTTP_400_BAD_REQUEST, field="month")
    year, month = int(match.group(1)), int(match.group(2))
    try:
        start = date(year, month, 1)
    except ValueError:
        raise ServiceError("Invalid month, expected YYYY-MM", status.HTTP_400_BAD_REQUEST, field="month")
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


async def list_attendance(
    store: RecordStore,
    teacher_id: int,
    att_date: Optional[str] = None,
    month: Optional[str] = None,
) -> Sequence[AttendanceRecord]:
    """All of the teacher's records, or one date, or one month. date wins when both are given."""
    if att_date:
        day = parse_date_param(att_date)
        return await store.list_attendance(teacher_id, start=day, end=day + timedelta(days=1))
    if month:
        start, end = month_bounds(month)
        return await store.list_attendance(teacher_id, start=start, end=end)
    return await store.list_attendance(teacher_id)


# ----- Reconciler -----
async def _reconcile_one(
    store: RecordStore,
    teacher_id: int,
    att_date: date,
    mark: AttendanceMark,
) -> AttendanceRecord:
    existing = await store.find_attendance(teacher_id, mark.student_id, att_date)
    if existing is not None:
        return await store.set_attendance_present(existing, mark.present)
    try:
        return await store.insert_attendance(teacher_id, mark.student_id, att_date, mark.present)
    except DuplicateRecordError:
        # Another writer created the row between our lookup and insert
        existing = await store.find_attendance(teacher_id, mark.student_id, att_date)
        if existing is None:
            raise
        logger.info(
            "attendance_insert_conflict_retried_as_update",
            extra={"student_id": mark.student_id, "date": att_date.isoformat()},
        )
        return await store.set_attendance_present(existing, mark.present)


async def reconcile_attendance(
    store: RecordStore,
    teacher_id: int,
    att_date: date,
    marks: Sequence[AttendanceMark],
) -> List[AttendanceRecord]:
    """Upsert one record per (student_id, date) and return them in input order.

    Existing records are updated in place (id preserved), missing ones are
    inserted. Re-submitting the same batch converges to the same state.
    """
    results: List[AttendanceRecord] = []
    for mark in marks:
        results.append(await _reconcile_one(store, teacher_id, att_date, mark))
    await store.commit()

    logger.info(
        "attendance_reconciled",
        extra={
            "teacher_id": teacher_id,
            "date": att_date.isoformat(),
            "records": len(results),
            "present": sum(1 for r in results if r.present),
        },
    )
    return results


async def mark_attendance_batch(
    store: RecordStore,
    teacher_id: int,
    payload: AttendanceBatchMark,
) -> List[AttendanceRecord]:
    """Check every student belongs to the teacher, then reconcile the batch."""
    checked = set()
    for idx, mark in enumerate(payload.records):
        if mark.student_id in checked:
            continue
        student = await store.get_student(teacher_id, mark.student_id)
        if student is None:
            raise ServiceError(
                f"Student {mark.student_id} not found",
                status.HTTP_400_BAD_REQUEST,
                field=f"records.{idx}.studentId",
            )
        checked.add(mark.student_id)
    return await reconcile_attendance(store, teacher_id, payload.date, payload.records)
