"""Record store: persistence of students, attendance and exams, keyed by owning teacher.

The reconciler and the analytics aggregator only talk to a ``RecordStore``.
``SqlRecordStore`` is the production implementation over an ``AsyncSession``;
tests may pass any object with the same methods.
"""

from datetime import date
from typing import Optional, Protocol, Sequence

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DuplicateRecordError
from app.core.models import AttendanceRecord, ExamRecord, Student
from app.db.session import get_db


class RecordStore(Protocol):
    # ----- Students -----
    async def list_students(self, teacher_id: int) -> Sequence[Student]:
        ...

    async def count_active_students(self, teacher_id: int) -> int:
        ...

    async def get_student(
        self, teacher_id: int, student_id: int, active_only: bool = False
    ) -> Optional[Student]:
        ...

    async def create_student(
        self, teacher_id: int, name: str, roll_number: Optional[str]
    ) -> Student:
        ...

    async def deactivate_student(self, teacher_id: int, student_id: int) -> bool:
        ...

    # ----- Attendance -----
    async def list_attendance(
        self,
        teacher_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records for the teacher with start <= date < end (either bound optional)."""
        ...

    async def find_attendance(
        self, teacher_id: int, student_id: int, att_date: date
    ) -> Optional[AttendanceRecord]:
        ...

    async def insert_attendance(
        self, teacher_id: int, student_id: int, att_date: date, present: bool
    ) -> AttendanceRecord:
        """Insert a record. Raises DuplicateRecordError if (student_id, date) already exists."""
        ...

    async def set_attendance_present(self, record: AttendanceRecord, present: bool) -> AttendanceRecord:
        ...

    # ----- Exams -----
    async def list_exams(self, teacher_id: int) -> Sequence[ExamRecord]:
        ...

    async def create_exam(
        self,
        teacher_id: int,
        student_id: int,
        subject: str,
        score: int,
        max_score: int,
        exam_date: date,
    ) -> ExamRecord:
        ...

    async def commit(self) -> None:
        ...


class SqlRecordStore:
    """RecordStore backed by SQLAlchemy. Writes are flushed, not committed; call commit()."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_students(self, teacher_id: int) -> Sequence[Student]:
        result = await self.db.execute(
            select(Student)
            .where(Student.teacher_id == teacher_id, Student.active.is_(True))
            .order_by(Student.id)
        )
        return result.scalars().all()

    async def count_active_students(self, teacher_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Student.id)).where(
                Student.teacher_id == teacher_id,
                Student.active.is_(True),
            )
        )
        return int(result.scalar_one())

    async def get_student(
        self, teacher_id: int, student_id: int, active_only: bool = False
    ) -> Optional[Student]:
        stmt = select(Student).where(
            Student.id == student_id,
            Student.teacher_id == teacher_id,
        )
        if active_only:
            stmt = stmt.where(Student.active.is_(True))
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def create_student(
        self, teacher_id: int, name: str, roll_number: Optional[str]
    ) -> Student:
        obj = Student(teacher_id=teacher_id, name=name, roll_number=roll_number, active=True)
        self.db.add(obj)
        await self.db.flush()
        return obj

    async def deactivate_student(self, teacher_id: int, student_id: int) -> bool:
        obj = await self.get_student(teacher_id, student_id, active_only=True)
        if not obj:
            return False
        obj.active = False
        await self.db.flush()
        return True

    async def list_attendance(
        self,
        teacher_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        stmt = select(AttendanceRecord).where(AttendanceRecord.teacher_id == teacher_id)
        if start is not None:
            stmt = stmt.where(AttendanceRecord.date >= start)
        if end is not None:
            stmt = stmt.where(AttendanceRecord.date < end)
        stmt = stmt.order_by(AttendanceRecord.date, AttendanceRecord.id)
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def find_attendance(
        self, teacher_id: int, student_id: int, att_date: date
    ) -> Optional[AttendanceRecord]:
        result = await self.db.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.teacher_id == teacher_id,
                AttendanceRecord.student_id == student_id,
                AttendanceRecord.date == att_date,
            )
        )
        return result.scalar_one_or_none()

    async def insert_attendance(
        self, teacher_id: int, student_id: int, att_date: date, present: bool
    ) -> AttendanceRecord:
        obj = AttendanceRecord(
            student_id=student_id,
            date=att_date,
            present=present,
            teacher_id=teacher_id,
        )
        # Savepoint: a unique violation rolls back this insert only, not the batch
        try:
            async with self.db.begin_nested():
                self.db.add(obj)
                await self.db.flush()
        except IntegrityError as e:
            raise DuplicateRecordError(
                f"Attendance for student {student_id} on {att_date} already exists"
            ) from e
        return obj

    async def set_attendance_present(self, record: AttendanceRecord, present: bool) -> AttendanceRecord:
        record.present = present
        await self.db.flush()
        return record

    async def list_exams(self, teacher_id: int) -> Sequence[ExamRecord]:
        result = await self.db.execute(
            select(ExamRecord)
            .where(ExamRecord.teacher_id == teacher_id)
            .order_by(ExamRecord.exam_date, ExamRecord.id)
        )
        return result.scalars().all()

    async def create_exam(
        self,
        teacher_id: int,
        student_id: int,
        subject: str,
        score: int,
        max_score: int,
        exam_date: date,
    ) -> ExamRecord:
        obj = ExamRecord(
            teacher_id=teacher_id,
            student_id=student_id,
            subject=subject,
            score=score,
            max_score=max_score,
            exam_date=exam_date,
        )
        self.db.add(obj)
        await self.db.flush()
        return obj

    async def commit(self) -> None:
        await self.db.commit()


async def get_store(db: AsyncSession = Depends(get_db)) -> SqlRecordStore:
    return SqlRecordStore(db)
