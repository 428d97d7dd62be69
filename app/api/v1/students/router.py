from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.store import SqlRecordStore, get_store

from . import service
from .schemas import StudentCreate, StudentResponse

router = APIRouter(prefix="/api/students", tags=["students"])


@router.get("", response_model=List[StudentResponse])
async def list_students(
    store: SqlRecordStore = Depends(get_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[StudentResponse]:
    return await service.list_students(store, current_user.id)


@router.post(
    "",
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_student(
    payload: StudentCreate,
    store: SqlRecordStore = Depends(get_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> StudentResponse:
    return await service.create_student(store, current_user.id, payload)


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_student(
    student_id: int,
    store: SqlRecordStore = Depends(get_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> None:
    deleted = await service.delete_student(store, current_user.id, student_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
