from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.core.schemas import CamelModel


class RegisterRequest(CamelModel):
    username: str = Field(..., min_length=3, max_length=150)
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1, max_length=255)
    class_code: str = Field(..., min_length=1, max_length=50)
    teacher_unique_id: str = Field(..., min_length=1, max_length=100)

    @field_validator("username", "full_name", "class_code", "teacher_unique_id")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class LoginRequest(CamelModel):
    username: str
    password: str


class RefreshRequest(CamelModel):
    refresh_token: str


class TeacherResponse(CamelModel):
    """Teacher account as returned by the API (never includes the password hash)."""

    id: int
    username: str
    full_name: str
    class_code: str
    teacher_unique_id: str
    is_admin: bool = False
    created_at: Optional[datetime] = None


class LoginResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    teacher: TeacherResponse
    issued_at: datetime


class AccessTokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"


class CurrentUser(BaseModel):
    """Lightweight representation of the authenticated teacher."""

    id: int
    username: str
    is_admin: bool = False
