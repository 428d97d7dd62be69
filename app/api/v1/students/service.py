import logging
from typing import List

from app.core.store import RecordStore

from .schemas import StudentCreate, StudentResponse

logger = logging.getLogger(__name__)


async def list_students(store: RecordStore, teacher_id: int) -> List[StudentResponse]:
    """Active roster of the teacher."""
    rows = await store.list_students(teacher_id)
    return [StudentResponse.model_validate(s) for s in rows]


async def create_student(
    store: RecordStore,
    teacher_id: int,
    payload: StudentCreate,
) -> StudentResponse:
    obj = await store.create_student(teacher_id, payload.name, payload.roll_number)
    await store.commit()
    logger.info("student_created", extra={"teacher_id": teacher_id, "student_id": obj.id})
    return StudentResponse.model_validate(obj)


async def delete_student(store: RecordStore, teacher_id: int, student_id: int) -> bool:
    """Soft delete: the row stays so attendance and exam history keep their student."""
    deleted = await store.deactivate_student(teacher_id, student_id)
    if deleted:
        await store.commit()
        logger.info("student_deactivated", extra={"teacher_id": teacher_id, "student_id": student_id})
    return deleted
