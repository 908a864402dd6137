# app/models/payment.py - Fee items, payments and their allocations
from __future__ import annotations
import uuid
from datetime import date, datetime
from decimal import Decimal
from sqlalchemy import (
    String, Text, Boolean, Numeric, Date, DateTime, ForeignKey, JSON,
    CheckConstraint, Index,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import Base, utcnow

PAYMENT_STATUSES = ("pending", "paid", "overdue", "canceled", "refunded")
PAYMENT_METHODS = ("cash", "credit_card", "bank_transfer", "check", "online", "other")


class PaymentItem(Base):
    """A configurable fee (tuition, uniform...) for a term, optionally limited to classes"""
    __tablename__ = "payment_items"
    __default_order__ = ("name",)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    category: Mapped[str] = mapped_column(String(32), nullable=False, default="other")
    description: Mapped[str | None] = mapped_column(Text)
    mandatory: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    term: Mapped[str] = mapped_column(String(50), nullable=False)
    session: Mapped[str] = mapped_column(String(20), nullable=False)
    # Empty list applies to every class
    classes: Mapped[list | None] = mapped_column(JSON)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    lines: Mapped[list["PaymentLine"]] = relationship(
        "PaymentLine", back_populates="item", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_payment_item_amount_positive"),
        Index("ix_payment_items_period", "session", "term"),
    )

    def applies_to(self, class_name: str | None) -> bool:
        return not self.classes or (class_name is not None and class_name in self.classes)


class Payment(Base):
    __tablename__ = "payments"
    __default_order__ = ("-payment_date", "-created_at")

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    payment_date: Mapped[date | None] = mapped_column(Date)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    payment_method: Mapped[str] = mapped_column(String(16), nullable=False, default="cash")
    reference: Mapped[str | None] = mapped_column(String(64))
    term: Mapped[str | None] = mapped_column(String(50))
    session: Mapped[str | None] = mapped_column(String(20))
    notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    student: Mapped["Student"] = relationship("Student", back_populates="payments")
    lines: Mapped[list["PaymentLine"]] = relationship(
        "PaymentLine", back_populates="payment", cascade="all, delete-orphan", lazy="selectin"
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending','paid','overdue','canceled','refunded')", name="ck_payment_status"
        ),
        CheckConstraint(
            "payment_method IN ('cash','credit_card','bank_transfer','check','online','other')",
            name="ck_payment_method",
        ),
        CheckConstraint("amount >= 0", name="ck_payment_amount_positive"),
        Index("ix_payments_status_due", "status", "due_date"),
    )


class PaymentLine(Base):
    """Part of a payment allocated to one payment item"""
    __tablename__ = "payment_lines"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    payment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("payments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("payment_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="unpaid")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    payment: Mapped["Payment"] = relationship("Payment", back_populates="lines")
    item: Mapped["PaymentItem"] = relationship("PaymentItem", back_populates="lines")

    __table_args__ = (
        CheckConstraint("status IN ('paid','partial','unpaid')", name="ck_payment_line_status"),
        CheckConstraint("paid_amount >= 0", name="ck_payment_line_paid_positive"),
    )
