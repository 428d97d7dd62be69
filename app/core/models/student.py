from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.db.session import Base


class Student(Base):
    """Roster entry. Deleting a student only clears `active` so attendance and exam history stay linked."""

    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    roll_number = Column(String(50), nullable=True)  # Free text, optional
    active = Column(Boolean, nullable=False, default=True)

    teacher = relationship("Teacher", foreign_keys=[teacher_id])
