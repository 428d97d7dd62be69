import logging
from typing import List

from fastapi import status

from app.core.exceptions import ServiceError
from app.core.store import RecordStore

from .schemas import ExamCreate, ExamResponse

logger = logging.getLogger(__name__)


async def list_exams(store: RecordStore, teacher_id: int) -> List[ExamResponse]:
    rows = await store.list_exams(teacher_id)
    return [ExamResponse.model_validate(e) for e in rows]


async def create_exam(
    store: RecordStore,
    teacher_id: int,
    payload: ExamCreate,
) -> ExamResponse:
    """Record an exam score for one of the teacher's students. Exams are never updated afterwards."""
    student = await store.get_student(teacher_id, payload.student_id)
    if student is None:
        raise ServiceError(
            f"Student {payload.student_id} not found",
            status.HTTP_400_BAD_REQUEST,
            field="studentId",
        )
    obj = await store.create_exam(
        teacher_id,
        payload.student_id,
        payload.subject,
        payload.score,
        payload.max_score,
        payload.exam_date,
    )
    await store.commit()
    logger.info(
        "exam_recorded",
        extra={"teacher_id": teacher_id, "student_id": payload.student_id, "exam_id": obj.id},
    )
    return ExamResponse.model_validate(obj)
