from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db.session import Base


class AttendanceRecord(Base):
    """Presence of one student on one calendar date. Written only by the attendance reconciler."""

    __tablename__ = "attendance"
    __table_args__ = (
        # At most one record per student per date
        UniqueConstraint("student_id", "date", name="uq_attendance_student_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    date = Column(Date, nullable=False, index=True)
    present = Column(Boolean, nullable=False)
    teacher_id = Column(Integer, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False, index=True)

    student = relationship("Student", foreign_keys=[student_id])
