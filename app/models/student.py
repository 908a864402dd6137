# app/models/student.py - Student records
from __future__ import annotations
import uuid
from datetime import date, datetime
from sqlalchemy import String, Text, Date, DateTime, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import Base, utcnow

STUDENT_STATUSES = ("active", "inactive", "graduated", "suspended")


class Student(Base):
    __tablename__ = "students"
    __default_order__ = ("name",)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(150), nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(String(255))
    registration_number: Mapped[str | None] = mapped_column(String(32), unique=True)
    class_name: Mapped[str | None] = mapped_column(String(40), index=True)
    guardian: Mapped[str | None] = mapped_column(String(150))
    phone: Mapped[str | None] = mapped_column(String(40))
    address: Mapped[str | None] = mapped_column(Text)
    date_of_birth: Mapped[date | None] = mapped_column(Date())
    enrollment_date: Mapped[date | None] = mapped_column(Date())
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    subjects: Mapped[list["Subject"]] = relationship(
        "Subject", secondary="student_subjects", back_populates="students"
    )
    results: Mapped[list["Result"]] = relationship(
        "Result", back_populates="student", cascade="all, delete-orphan", passive_deletes=True
    )
    payments: Mapped[list["Payment"]] = relationship(
        "Payment", back_populates="student", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('active','inactive','graduated','suspended')", name="ck_student_status"
        ),
    )

    def __repr__(self):
        return f"<Student(id={self.id}, name='{self.name}', class='{self.class_name}')>"
