from datetime import date

from pydantic import Field, field_validator

from app.core.schemas import CamelModel


class ExamCreate(CamelModel):
    student_id: int
    subject: str = Field(..., min_length=1, max_length=255)
    # score may exceed max_score (bonus marks); analytics puts it in the top bucket
    score: int = Field(..., ge=0)
    max_score: int = Field(..., ge=1)
    exam_date: date

    @field_validator("subject")
    @classmethod
    def subject_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Subject is required")
        return v


class ExamResponse(CamelModel):
    id: int
    student_id: int
    subject: str
    score: int
    max_score: int
    exam_date: date
    teacher_id: int
