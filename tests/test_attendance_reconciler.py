"""Unit tests for the attendance reconciler, driven through the in-memory store."""

from datetime import date

import pytest

from app.api.v1.attendance.schemas import AttendanceBatchMark, AttendanceMark
from app.api.v1.attendance.service import mark_attendance_batch, reconcile_attendance
from app.core.exceptions import DuplicateRecordError, ServiceError


TEACHER_ID = 1
DAY = date(2024, 3, 1)


async def _students(store, count: int, teacher_id: int = TEACHER_ID):
    return [await store.create_student(teacher_id, f"Student {i}", None) for i in range(count)]


@pytest.mark.asyncio
async def test_inserts_missing_records_in_input_order(store) -> None:
    s1, s2, s3 = await _students(store, 3)
    marks = [
        AttendanceMark(student_id=s3.id, present=True),
        AttendanceMark(student_id=s1.id, present=False),
        AttendanceMark(student_id=s2.id, present=True),
    ]

    result = await reconcile_attendance(store, TEACHER_ID, DAY, marks)

    assert [r.student_id for r in result] == [s3.id, s1.id, s2.id]
    assert [r.present for r in result] == [True, False, True]
    assert all(r.date == DAY and r.teacher_id == TEACHER_ID for r in result)
    assert len(store.attendance) == 3
    assert store.commits == 1


@pytest.mark.asyncio
async def test_resubmitting_same_batch_is_idempotent(store) -> None:
    s1, s2 = await _students(store, 2)
    marks = [
        AttendanceMark(student_id=s1.id, present=True),
        AttendanceMark(student_id=s2.id, present=False),
    ]

    first = await reconcile_attendance(store, TEACHER_ID, DAY, marks)
    snapshot = {(r.id, r.student_id, r.date, r.present) for r in store.attendance.values()}
    second = await reconcile_attendance(store, TEACHER_ID, DAY, marks)

    assert [r.id for r in second] == [r.id for r in first]
    assert {(r.id, r.student_id, r.date, r.present) for r in store.attendance.values()} == snapshot


@pytest.mark.asyncio
async def test_existing_record_is_updated_in_place(store) -> None:
    (student,) = await _students(store, 1)
    original = await store.insert_attendance(TEACHER_ID, student.id, DAY, True)

    result = await reconcile_attendance(
        store, TEACHER_ID, DAY, [AttendanceMark(student_id=student.id, present=False)]
    )

    assert result[0].id == original.id
    assert result[0].present is False
    assert len([r for r in store.attendance.values() if r.date == DAY]) == 1


@pytest.mark.asyncio
async def test_other_dates_are_left_alone(store) -> None:
    (student,) = await _students(store, 1)
    other_day = date(2024, 2, 29)
    await store.insert_attendance(TEACHER_ID, student.id, other_day, True)

    await reconcile_attendance(store, TEACHER_ID, DAY, [AttendanceMark(student_id=student.id, present=False)])

    assert store.attendance[(student.id, other_day)].present is True
    assert store.attendance[(student.id, DAY)].present is False


@pytest.mark.asyncio
async def test_empty_batch_returns_empty_list(store) -> None:
    assert await reconcile_attendance(store, TEACHER_ID, DAY, []) == []
    assert store.attendance == {}


@pytest.mark.asyncio
async def test_repeated_student_in_batch_keeps_one_record(store) -> None:
    (student,) = await _students(store, 1)
    marks = [
        AttendanceMark(student_id=student.id, present=True),
        AttendanceMark(student_id=student.id, present=False),
    ]

    result = await reconcile_attendance(store, TEACHER_ID, DAY, marks)

    assert len(result) == 2
    assert result[0].id == result[1].id
    assert len(store.attendance) == 1
    assert store.attendance[(student.id, DAY)].present is False


@pytest.mark.asyncio
async def test_insert_conflict_is_retried_as_update(store) -> None:
    """A concurrent writer inserts the row after our lookup; we must update it, not fail."""
    (student,) = await _students(store, 1)
    real_find = store.find_attendance
    calls = {"n": 0}

    async def racing_find(teacher_id, student_id, att_date):
        calls["n"] += 1
        if calls["n"] == 1:
            # Lookup misses, then the other request inserts before we do
            await store.insert_attendance(teacher_id, student_id, att_date, True)
            return None
        return await real_find(teacher_id, student_id, att_date)

    store.find_attendance = racing_find

    result = await reconcile_attendance(
        store, TEACHER_ID, DAY, [AttendanceMark(student_id=student.id, present=False)]
    )

    assert len(store.attendance) == 1
    assert result[0].present is False
    assert store.attendance[(student.id, DAY)].present is False


@pytest.mark.asyncio
async def test_conflict_without_winner_row_propagates(store) -> None:
    (student,) = await _students(store, 1)

    async def always_conflict(*args, **kwargs):
        raise DuplicateRecordError("constraint violated")

    store.insert_attendance = always_conflict

    with pytest.raises(DuplicateRecordError):
        await reconcile_attendance(
            store, TEACHER_ID, DAY, [AttendanceMark(student_id=student.id, present=True)]
        )


@pytest.mark.asyncio
async def test_batch_rejects_student_of_another_teacher(store) -> None:
    (mine,) = await _students(store, 1)
    (theirs,) = await _students(store, 1, teacher_id=2)
    payload = AttendanceBatchMark(
        date=DAY,
        records=[
            AttendanceMark(student_id=mine.id, present=True),
            AttendanceMark(student_id=theirs.id, present=True),
        ],
    )

    with pytest.raises(ServiceError) as exc:
        await mark_attendance_batch(store, TEACHER_ID, payload)

    assert exc.value.status_code == 400
    assert exc.value.field == "records.1.studentId"
    assert store.attendance == {}


@pytest.mark.asyncio
async def test_batch_accepts_camel_case_payload(store) -> None:
    (student,) = await _students(store, 1)
    payload = AttendanceBatchMark.model_validate(
        {"date": "2024-03-01", "records": [{"studentId": student.id, "present": True}]}
    )

    result = await mark_attendance_batch(store, TEACHER_ID, payload)

    assert result[0].date == DAY
    assert result[0].present is True
