from fastapi import APIRouter, Depends, HTTPException
from fastapi import status as http_status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.schemas import (
    AccessTokenResponse,
    CurrentUser,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RegisterRequest,
    TeacherResponse,
)
from app.auth.services import (
    get_teacher,
    login_teacher,
    logout_teacher,
    refresh_access_token,
    register_teacher,
)
from app.core.exceptions import ServiceError, to_http_exception
from app.db.session import get_db

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=TeacherResponse,
    status_code=http_status.HTTP_201_CREATED,
)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> TeacherResponse:
    try:
        return await register_teacher(db, payload)
    except ServiceError as e:
        raise to_http_exception(e)


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=http_status.HTTP_200_OK,
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    try:
        return await login_teacher(db, payload)
    except ServiceError as e:
        raise to_http_exception(e)


@router.post("/login-oauth")
async def login_oauth(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
):
    payload = LoginRequest(username=form_data.username.strip(), password=form_data.password)
    try:
        result = await login_teacher(db, payload)
    except ServiceError as e:
        raise to_http_exception(e)
    return {
        "access_token": result.access_token,
        "token_type": "bearer",
    }


@router.post("/refresh", response_model=AccessTokenResponse)
async def refresh(
    payload: RefreshRequest,
    db: AsyncSession = Depends(get_db),
) -> AccessTokenResponse:
    try:
        return await refresh_access_token(db, payload)
    except ServiceError as e:
        raise to_http_exception(e)


@router.post("/logout", status_code=http_status.HTTP_200_OK)
async def logout(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    await logout_teacher(db, current_user.id)
    return {"message": "Logged out"}


@router.get("/me", response_model=TeacherResponse)
async def me(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> TeacherResponse:
    teacher = await get_teacher(db, current_user.id)
    if not teacher:
        raise HTTPException(status_code=http_status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return teacher
