from typing import Optional

from pydantic import Field, field_validator

from app.core.schemas import CamelModel


class StudentCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    roll_number: Optional[str] = Field(None, max_length=50)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("roll_number")
    @classmethod
    def empty_roll_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class StudentResponse(CamelModel):
    id: int
    name: str
    roll_number: Optional[str] = None
    teacher_id: int
    active: bool
