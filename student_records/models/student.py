from datetime import datetime

from sqlalchemy import BigInteger, Integer, String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from student_records.core.database import Base

# SQLite only autoincrements an INTEGER PRIMARY KEY
IdType = BigInteger().with_variant(Integer, "sqlite")


class Student(Base):
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=True)
    email: Mapped[str] = mapped_column(String, nullable=False)
    dob: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    marks: Mapped[list["Mark"]] = relationship(
        "Mark",
        back_populates="student",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Mark.id"
    )
