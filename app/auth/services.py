import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import status
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import RefreshToken, Teacher
from app.auth.schemas import (
    AccessTokenResponse,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RegisterRequest,
    TeacherResponse,
)
from app.auth.security import (
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
)
from app.core.exceptions import ServiceError

logger = logging.getLogger(__name__)


async def _get_teacher_by_username(db: AsyncSession, username: str) -> Optional[Teacher]:
    # Case-insensitive login handle
    result = await db.execute(
        select(Teacher).where(func.lower(Teacher.username) == func.lower(username))
    )
    return result.scalar_one_or_none()


async def register_teacher(db: AsyncSession, payload: RegisterRequest) -> TeacherResponse:
    if await _get_teacher_by_username(db, payload.username):
        raise ServiceError("Username already exists", status.HTTP_409_CONFLICT, field="username")

    teacher = Teacher(
        username=payload.username,
        password_hash=hash_password(payload.password),
        full_name=payload.full_name,
        class_code=payload.class_code,
        teacher_unique_id=payload.teacher_unique_id,
        is_admin=False,
    )
    db.add(teacher)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ServiceError("Username already exists", status.HTTP_409_CONFLICT, field="username") from e
    await db.refresh(teacher)

    logger.info("teacher_registered", extra={"teacher_id": teacher.id})
    return TeacherResponse.model_validate(teacher)


async def _issue_refresh_token(db: AsyncSession, teacher: Teacher) -> str:
    token, expires_at = create_refresh_token()
    db.add(RefreshToken(teacher_id=teacher.id, token=token, expires_at=expires_at))
    try:
        await db.commit()
    except Exception as e:
        await db.rollback()
        raise ServiceError(
            "Failed to persist authentication state",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        ) from e
    return token


async def login_teacher(db: AsyncSession, payload: LoginRequest) -> LoginResponse:
    teacher = await _get_teacher_by_username(db, payload.username.strip())
    if not teacher or not verify_password(payload.password, teacher.password_hash):
        logger.info("login_failed", extra={"username": payload.username})
        raise ServiceError("Invalid credentials", status.HTTP_401_UNAUTHORIZED)

    issued_at = datetime.now(timezone.utc)
    access_token = create_access_token(teacher.id, teacher.username)
    refresh_token = await _issue_refresh_token(db, teacher)

    logger.info("teacher_logged_in", extra={"teacher_id": teacher.id})
    return LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        teacher=TeacherResponse.model_validate(teacher),
        issued_at=issued_at,
    )


async def refresh_access_token(db: AsyncSession, payload: RefreshRequest) -> AccessTokenResponse:
    result = await db.execute(
        select(RefreshToken).where(RefreshToken.token == payload.refresh_token)
    )
    stored = result.scalar_one_or_none()
    if not stored:
        raise ServiceError("Invalid refresh token", status.HTTP_401_UNAUTHORIZED)

    expires_at = stored.expires_at
    if expires_at.tzinfo is None:
        # sqlite drops tzinfo; values are written as UTC
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at <= datetime.now(timezone.utc):
        await db.delete(stored)
        await db.commit()
        raise ServiceError("Refresh token expired", status.HTTP_401_UNAUTHORIZED)

    teacher = await db.get(Teacher, stored.teacher_id)
    if not teacher:
        raise ServiceError("Invalid refresh token", status.HTTP_401_UNAUTHORIZED)
    return AccessTokenResponse(access_token=create_access_token(teacher.id, teacher.username))


async def logout_teacher(db: AsyncSession, teacher_id: int) -> None:
    """Revoke every refresh token of the teacher. Access tokens expire on their own."""
    await db.execute(delete(RefreshToken).where(RefreshToken.teacher_id == teacher_id))
    await db.commit()
    logger.info("teacher_logged_out", extra={"teacher_id": teacher_id})


async def get_teacher(db: AsyncSession, teacher_id: int) -> Optional[TeacherResponse]:
    teacher = await db.get(Teacher, teacher_id)
    return TeacherResponse.model_validate(teacher) if teacher else None
