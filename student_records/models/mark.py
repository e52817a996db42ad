from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from student_records.core.database import Base
from student_records.models.student import IdType


class Mark(Base):
    __tablename__ = "marks"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(IdType, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    subject: Mapped[str] = mapped_column(String, nullable=False)
    marks: Mapped[int] = mapped_column(Integer, nullable=True)
    term: Mapped[str] = mapped_column(String, nullable=True)

    student: Mapped["Student"] = relationship("Student", back_populates="marks", passive_deletes=True)
