from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.db.session import Base


class Teacher(Base):
    """Teacher account. The teacher is the tenant: students, attendance and exams are scoped by teacher_id."""

    __tablename__ = "teachers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Login handle, unique across the platform
    username = Column(String(150), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    full_name = Column(String(255), nullable=False)
    class_code = Column(String(50), nullable=False)
    teacher_unique_id = Column(String(100), nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    refresh_tokens = relationship(
        "RefreshToken", back_populates="teacher", cascade="all, delete-orphan"
    )


class RefreshToken(Base):
    """Stored refresh tokens for teachers."""

    __tablename__ = "refresh_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False)
    token = Column(String(512), nullable=False, unique=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    teacher = relationship("Teacher", back_populates="refresh_tokens")
