from typing import List

from fastapi import APIRouter, Depends, status

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError, to_http_exception
from app.core.store import SqlRecordStore, get_store

from . import service
from .schemas import ExamCreate, ExamResponse

router = APIRouter(prefix="/api/exams", tags=["exams"])


@router.get("", response_model=List[ExamResponse])
async def list_exams(
    store: SqlRecordStore = Depends(get_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[ExamResponse]:
    return await service.list_exams(store, current_user.id)


@router.post(
    "",
    response_model=ExamResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_exam(
    payload: ExamCreate,
    store: SqlRecordStore = Depends(get_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> ExamResponse:
    try:
        return await service.create_exam(store, current_user.id, payload)
    except ServiceError as e:
        raise to_http_exception(e)
