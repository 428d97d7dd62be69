import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from dataclasses import dataclass
from datetime import date
from typing import AsyncGenerator, Dict, List, Optional, Tuple

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.exceptions import DuplicateRecordError
from app.db.session import Base, enable_sqlite_savepoints, get_db
from app.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture()
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test. StaticPool keeps the single connection alive."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_savepoints(test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def client(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app, one session per request."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def register_and_login(client: AsyncClient, username: str = "teacher1") -> Dict[str, str]:
    payload = {
        "username": username,
        "password": "secret123",
        "fullName": "Meera Iyer",
        "classCode": "7B",
        "teacherUniqueId": f"T-{username}",
    }
    resp = await client.post("/api/auth/register", json=payload)
    assert resp.status_code == 201, resp.text
    resp = await client.post(
        "/api/auth/login",
        json={"username": username, "password": "secret123"},
    )
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['accessToken']}"}


@pytest.fixture()
async def auth_headers(client: AsyncClient) -> Dict[str, str]:
    return await register_and_login(client)


@pytest.fixture()
def login(client: AsyncClient):
    """Register and log in another teacher, returning its Authorization header."""

    async def _login(username: str) -> Dict[str, str]:
        return await register_and_login(client, username)

    return _login


# ----- In-memory record store for reconciler/aggregator unit tests -----
@dataclass
class FakeStudent:
    id: int
    teacher_id: int
    name: str
    roll_number: Optional[str] = None
    active: bool = True


@dataclass
class FakeAttendance:
    id: int
    student_id: int
    date: date
    present: bool
    teacher_id: int


@dataclass
class FakeExam:
    id: int
    student_id: int
    subject: str
    score: int
    max_score: int
    exam_date: date
    teacher_id: int


class InMemoryRecordStore:
    def __init__(self) -> None:
        self.students: Dict[int, FakeStudent] = {}
        self.attendance: Dict[Tuple[int, date], FakeAttendance] = {}
        self.exams: List[FakeExam] = []
        self.commits = 0
        self._next_id = 0

    def _id(self) -> int:
        self._next_id += 1
        return self._next_id

    async def list_students(self, teacher_id: int):
        return [s for s in self.students.values() if s.teacher_id == teacher_id and s.active]

    async def count_active_students(self, teacher_id: int) -> int:
        return len(await self.list_students(teacher_id))

    async def get_student(self, teacher_id: int, student_id: int, active_only: bool = False):
        s = self.students.get(student_id)
        if s is None or s.teacher_id != teacher_id or (active_only and not s.active):
            return None
        return s

    async def create_student(self, teacher_id: int, name: str, roll_number: Optional[str]):
        s = FakeStudent(id=self._id(), teacher_id=teacher_id, name=name, roll_number=roll_number)
        self.students[s.id] = s
        return s

    async def deactivate_student(self, teacher_id: int, student_id: int) -> bool:
        s = await self.get_student(teacher_id, student_id, active_only=True)
        if s is None:
            return False
        s.active = False
        return True

    async def list_attendance(self, teacher_id: int, start=None, end=None):
        rows = [
            r for r in self.attendance.values()
            if r.teacher_id == teacher_id
            and (start is None or r.date >= start)
            and (end is None or r.date < end)
        ]
        return rows

    async def find_attendance(self, teacher_id: int, student_id: int, att_date: date):
        rec = self.attendance.get((student_id, att_date))
        if rec is None or rec.teacher_id != teacher_id:
            return None
        return rec

    async def insert_attendance(self, teacher_id: int, student_id: int, att_date: date, present: bool):
        if (student_id, att_date) in self.attendance:
            raise DuplicateRecordError(f"{student_id} {att_date}")
        rec = FakeAttendance(
            id=self._id(), student_id=student_id, date=att_date, present=present, teacher_id=teacher_id
        )
        self.attendance[(student_id, att_date)] = rec
        return rec

    async def set_attendance_present(self, record, present: bool):
        record.present = present
        return record

    async def list_exams(self, teacher_id: int):
        return [e for e in self.exams if e.teacher_id == teacher_id]

    async def create_exam(self, teacher_id, student_id, subject, score, max_score, exam_date):
        e = FakeExam(
            id=self._id(),
            student_id=student_id,
            subject=subject,
            score=score,
            max_score=max_score,
            exam_date=exam_date,
            teacher_id=teacher_id,
        )
        self.exams.append(e)
        return e

    async def commit(self) -> None:
        self.commits += 1


@pytest.fixture()
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()
