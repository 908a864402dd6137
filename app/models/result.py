# app/models/result.py - Assessment results and grading policy
from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import (
    String, Text, Integer, Float, DateTime, ForeignKey, JSON,
    CheckConstraint, Index, UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import Base, utcnow

TERMS = ("1st Term", "2nd Term", "3rd Term")


class Result(Base):
    """One student's CA/Test/Exam scores for one subject in one term"""
    __tablename__ = "results"
    __default_order__ = ("-recorded_at",)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    subject_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    class_name: Mapped[str] = mapped_column(String(40), nullable=False)
    session: Mapped[str] = mapped_column(String(20), nullable=False)
    term: Mapped[str] = mapped_column(String(50), nullable=False)

    # Component scores, clamped to the scoring policy
    ca: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    test: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    exam: Mapped[float] = mapped_column(Float, nullable=False, default=0)

    # Derived
    total: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    percentage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    grade: Mapped[str] = mapped_column(String(5), nullable=False, default="F")
    remark: Mapped[str | None] = mapped_column(String(255))

    # Class ranking
    position: Mapped[int | None] = mapped_column(Integer)
    total_class_score: Mapped[float | None] = mapped_column(Float)
    class_average: Mapped[float | None] = mapped_column(Float)
    percentile: Mapped[int | None] = mapped_column(Integer)

    remarks: Mapped[str | None] = mapped_column(Text)
    published_at: Mapped[datetime | None] = mapped_column(DateTime)
    recorded_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    extra_data: Mapped[dict | None] = mapped_column("metadata", JSON)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    student: Mapped["Student"] = relationship("Student", back_populates="results")
    subject: Mapped["Subject"] = relationship("Subject")

    __table_args__ = (
        UniqueConstraint(
            "student_id", "subject_id", "class_name", "session", "term", name="uq_result_student_subject_period"
        ),
        CheckConstraint("ca >= 0 AND test >= 0 AND exam >= 0", name="ck_result_scores_positive"),
        Index("ix_results_class_period", "class_name", "session", "term"),
    )

    def __repr__(self):
        return f"<Result(student={self.student_id}, subject={self.subject_id}, total={self.total}, grade={self.grade})>"


class GradingPolicy(Base):
    """Scoring maxima and grade scale, global (no period) or per session/term"""
    __tablename__ = "grading_policies"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session: Mapped[str | None] = mapped_column(String(20))
    term: Mapped[str | None] = mapped_column(String(50))

    ca_max: Mapped[float] = mapped_column(Float, nullable=False)
    test_max: Mapped[float] = mapped_column(Float, nullable=False)
    exam_max: Mapped[float] = mapped_column(Float, nullable=False)
    total_max: Mapped[float] = mapped_column(Float, nullable=False)
    pass_mark: Mapped[float] = mapped_column(Float, nullable=False)
    scale: Mapped[list | None] = mapped_column(JSON)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("session", "term", name="uq_grading_policy_period"),
        CheckConstraint("total_max > 0", name="ck_grading_policy_total_positive"),
    )
