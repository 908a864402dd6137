# app/models/teacher.py - Teaching staff
from __future__ import annotations
import uuid
from datetime import date, datetime
from sqlalchemy import String, Integer, Date, DateTime, JSON, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import Base, utcnow


class Teacher(Base):
    __tablename__ = "teachers"
    __default_order__ = ("name",)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(150), nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(String(255), unique=True)
    phone: Mapped[str | None] = mapped_column(String(40))
    qualification: Mapped[str | None] = mapped_column(String(150))
    experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    join_date: Mapped[date | None] = mapped_column(Date())
    classes: Mapped[list | None] = mapped_column(JSON)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    subjects: Mapped[list["Subject"]] = relationship(
        "Subject", secondary="teacher_subjects", back_populates="teachers"
    )

    __table_args__ = (
        CheckConstraint("status IN ('active','inactive')", name="ck_teacher_status"),
        CheckConstraint("experience >= 0", name="ck_teacher_experience_positive"),
    )

    def __repr__(self):
        return f"<Teacher(id={self.id}, name='{self.name}')>"
