# app/models/subject.py - Subjects and their links to students, teachers and classes
from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import (
    String, Text, Integer, DateTime, ForeignKey, JSON, Table, Column,
    CheckConstraint, UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import Base, utcnow

student_subjects = Table(
    "student_subjects",
    Base.metadata,
    Column("student_id", UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), primary_key=True),
    Column("subject_id", UUID(as_uuid=True), ForeignKey("subjects.id", ondelete="CASCADE"), primary_key=True),
)

teacher_subjects = Table(
    "teacher_subjects",
    Base.metadata,
    Column("teacher_id", UUID(as_uuid=True), ForeignKey("teachers.id", ondelete="CASCADE"), primary_key=True),
    Column("subject_id", UUID(as_uuid=True), ForeignKey("subjects.id", ondelete="CASCADE"), primary_key=True),
)


class Subject(Base):
    __tablename__ = "subjects"
    __default_order__ = ("sort_order", "title")

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(20), unique=True, index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(150), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    department: Mapped[str | None] = mapped_column(String(100))
    level: Mapped[str | None] = mapped_column(String(50))
    credits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    schedule: Mapped[dict | None] = mapped_column(JSON)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    students: Mapped[list["Student"]] = relationship(
        "Student", secondary=student_subjects, back_populates="subjects"
    )
    teachers: Mapped[list["Teacher"]] = relationship(
        "Teacher", secondary=teacher_subjects, back_populates="subjects"
    )

    __table_args__ = (
        CheckConstraint("status IN ('active','inactive')", name="ck_subject_status"),
        CheckConstraint("credits >= 0", name="ck_subject_credits_positive"),
    )

    def __repr__(self):
        return f"<Subject(code='{self.code}', title='{self.title}')>"


class ClassSubject(Base):
    """Subjects that count towards a class ranking"""
    __tablename__ = "class_subjects"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    class_name: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    subject_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    subject: Mapped["Subject"] = relationship("Subject")

    __table_args__ = (
        UniqueConstraint("class_name", "subject_id", name="uq_class_subject"),
    )
