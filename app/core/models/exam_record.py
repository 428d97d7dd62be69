from sqlalchemy import CheckConstraint, Column, Date, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.db.session import Base


class ExamRecord(Base):
    """Single exam score. Immutable once created."""

    __tablename__ = "exams"
    __table_args__ = (
        CheckConstraint("score >= 0", name="ck_exam_score_non_negative"),
        CheckConstraint("max_score >= 1", name="ck_exam_max_score_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    subject = Column(String(255), nullable=False)
    score = Column(Integer, nullable=False)
    max_score = Column(Integer, nullable=False)
    exam_date = Column(Date, nullable=False)
    teacher_id = Column(Integer, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False, index=True)

    student = relationship("Student", foreign_keys=[student_id])
