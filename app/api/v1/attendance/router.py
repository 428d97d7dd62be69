"""Attendance API router."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError, to_http_exception
from app.core.store import SqlRecordStore, get_store

from . import service
from .schemas import AttendanceBatchMark, AttendanceRecordResponse

router = APIRouter(prefix="/api/attendance", tags=["attendance"])


@router.get("", response_model=List[AttendanceRecordResponse])
async def get_attendance(
    att_date: Optional[str] = Query(None, alias="date", description="YYYY-MM-DD"),
    month: Optional[str] = Query(None, description="YYYY-MM"),
    store: SqlRecordStore = Depends(get_store),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Teacher's attendance records, optionally limited to one date or one month."""
    try:
        return await service.list_attendance(store, current_user.id, att_date=att_date, month=month)
    except ServiceError as e:
        raise to_http_exception(e)


@router.post("/batch", response_model=List[AttendanceRecordResponse])
async def mark_attendance(
    payload: AttendanceBatchMark,
    store: SqlRecordStore = Depends(get_store),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Create or update one record per student for the given date."""
    try:
        return await service.mark_attendance_batch(store, current_user.id, payload)
    except ServiceError as e:
        raise to_http_exception(e)
