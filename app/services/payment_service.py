# app/services/payment_service.py - Fee items, payments and payment reporting
import calendar
import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional
from uuid import UUID

import pandas as pd
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import AppError, NotFoundError, ValidationError
from app.models.payment import PAYMENT_STATUSES, Payment, PaymentItem, PaymentLine
from app.models.student import Student
from app.schemas.payment import PaymentCreate
from app.services.base_service import BaseService

logger = logging.getLogger(__name__)

STATISTICS_PERIODS = ("day", "week", "month", "year")
EXPORT_COLUMNS = [
    "id", "student_id", "amount", "description", "payment_date",
    "due_date", "status", "created_at", "updated_at",
]
PENDING_WINDOW_DAYS = 7


def to_decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value if value is not None else 0)).quantize(Decimal("0.01"))
    except InvalidOperation:
        raise ValidationError(f"Invalid amount: {value}")


def export_value(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, UUID):
        return str(value)
    return value


def line_status(paid: Decimal, amount: Decimal) -> str:
    if paid <= 0:
        return "unpaid"
    if paid >= amount:
        return "paid"
    return "partial"


class PaymentItemService(BaseService[PaymentItem]):
    model = PaymentItem
    entity_name = "Payment item"

    def list_items(
        self,
        class_name: Optional[str] = None,
        term: Optional[str] = None,
        session: Optional[str] = None,
    ) -> List[PaymentItem]:
        """Items of a period; items without classes apply to every class"""
        items = self.find_many(filters={"term": term, "session": session})
        if class_name:
            items = [item for item in items if item.applies_to(class_name)]
        return items


class PaymentService(BaseService[Payment]):
    model = Payment
    entity_name = "Payment"

    def __init__(self, db: Session):
        super().__init__(db)
        self.items = PaymentItemService(db)

    def _ensure_student(self, student_id: Any) -> Student:
        student = self.db.get(Student, student_id)
        if student is None:
            raise NotFoundError("Student not found")
        return student

    def _build_lines(self, lines: List[Dict[str, Any]]) -> List[PaymentLine]:
        """Price each line from its item and clamp the paid amount to it"""
        built = []
        for line in lines:
            item = self.db.get(PaymentItem, line["item_id"])
            if item is None:
                raise NotFoundError("Payment item not found")

            amount = to_decimal(item.amount)
            paid = min(max(to_decimal(line.get("paid_amount")), Decimal("0.00")), amount)
            built.append(PaymentLine(
                item_id=item.id,
                name=item.name,
                amount=amount,
                paid_amount=paid,
                status=line_status(paid, amount),
            ))
        return built

    def create_payment(self, data: Dict[str, Any]) -> Payment:
        """
        Create a payment for an existing student.

        When ``lines`` are given the payment amount is the sum of the
        allocated paid amounts, not the submitted ``amount``.
        """
        data = dict(data)
        self._ensure_student(data["student_id"])
        lines = data.pop("lines", None)

        if lines:
            built = self._build_lines(lines)
            data["amount"] = sum((line.paid_amount for line in built), Decimal("0.00"))
            if not data.get("description"):
                data["description"] = ", ".join(line.name for line in built)
            data["lines"] = built

        return self.create(data)

    def update_payment(self, id: UUID, data: Dict[str, Any]) -> Payment:
        data = dict(data)
        if data.get("student_id") is not None:
            self._ensure_student(data["student_id"])

        lines = data.pop("lines", None)
        if lines is not None:
            payment = self.get_or_404(id)
            payment.lines = self._build_lines(lines)
            data["amount"] = sum((line.paid_amount for line in payment.lines), Decimal("0.00"))

        return self.update(id, data)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def find_by_student(self, student_id: UUID, page: int = 1, limit: Optional[int] = None, **kwargs) -> Dict[str, Any]:
        self._ensure_student(student_id)
        return self.find_all(page=page, limit=limit, filters={"student_id": student_id}, **kwargs)

    def find_by_status(self, status: str, page: int = 1, limit: Optional[int] = None, **kwargs) -> Dict[str, Any]:
        if status not in PAYMENT_STATUSES:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(PAYMENT_STATUSES)}")
        return self.find_all(page=page, limit=limit, filters={"status": status}, **kwargs)

    def count_by_status(self, since: Optional[datetime] = None) -> Dict[str, Dict[str, float]]:
        stmt = select(Payment.status, func.count(), func.coalesce(func.sum(Payment.amount), 0)).group_by(Payment.status)
        if since is not None:
            stmt = stmt.where(Payment.created_at >= since)

        counts = {status: {"count": 0, "total": 0.0} for status in PAYMENT_STATUSES}
        for status, count, total in self.db.execute(stmt).all():
            counts[status] = {"count": count, "total": float(total)}
        return counts

    def monthly_totals(self, year: Optional[int] = None) -> List[Dict[str, Any]]:
        """Paid amount per calendar month of ``year``"""
        year = year or date.today().year
        rows = self.db.execute(
            select(Payment.payment_date, Payment.amount).where(
                Payment.status == "paid",
                Payment.payment_date >= date(year, 1, 1),
                Payment.payment_date <= date(year, 12, 31),
            )
        ).all()

        totals = [Decimal("0.00")] * 12
        for payment_date, amount in rows:
            totals[payment_date.month - 1] += to_decimal(amount)
        return [
            {"month": month, "name": calendar.month_name[month], "total": float(totals[month - 1])}
            for month in range(1, 13)
        ]

    def pending_payments(self) -> List[Payment]:
        """Pending payments falling due within the next week"""
        today = date.today()
        return self.find_many(stmt=select(Payment).where(
            Payment.status == "pending",
            Payment.due_date >= today,
            Payment.due_date <= today + timedelta(days=PENDING_WINDOW_DAYS),
        ))

    def overdue_payments(self) -> List[Payment]:
        return self.find_many(stmt=select(Payment).where(
            Payment.status.in_(("pending", "overdue")),
            Payment.due_date < date.today(),
        ))

    def recent_payments(self, limit: int = 10) -> List[Payment]:
        limit = min(max(limit, 1), settings.MAX_PAGE_SIZE)
        return list(self.db.execute(
            select(Payment).order_by(Payment.created_at.desc()).limit(limit)
        ).scalars().all())

    def statistics(self, period: str = "month") -> Dict[str, Any]:
        if period not in STATISTICS_PERIODS:
            raise ValidationError(f"Invalid period. Must be one of: {', '.join(STATISTICS_PERIODS)}")

        today = date.today()
        if period == "day":
            start = today
        elif period == "week":
            start = today - timedelta(days=7)
        elif period == "month":
            start = today.replace(day=1)
        else:
            start = today.replace(month=1, day=1)
        since = datetime.combine(start, time.min)

        total_payments, total_amount = self.db.execute(
            select(func.count(), func.coalesce(func.sum(Payment.amount), 0)).where(Payment.created_at >= since)
        ).one()

        return {
            "period": period,
            "start_date": start.isoformat(),
            "total_payments": total_payments,
            "total_amount": float(total_amount),
            "status_counts": self.count_by_status(since),
            "monthly_totals": self.monthly_totals(today.year),
        }

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------
    def import_payments(self, rows: List[Dict[str, Any]]) -> Dict[str, Any]:
        outcomes = []
        for index, row in enumerate(rows, start=1):
            try:
                payload = PaymentCreate.model_validate(row).model_dump(exclude_none=True)
                payment = self.create_payment(payload)
                outcomes.append({"row": index, "success": True, "id": str(payment.id)})
            except PydanticValidationError as e:
                outcomes.append({
                    "row": index,
                    "success": False,
                    "error": "; ".join(err["msg"] for err in e.errors()),
                })
            except AppError as e:
                outcomes.append({"row": index, "success": False, "error": e.message})

        imported = sum(1 for outcome in outcomes if outcome["success"])
        logger.info(f"Imported {imported} of {len(rows)} payments")
        return {
            "success": imported == len(rows),
            "imported": imported,
            "total": len(rows),
            "results": outcomes,
            "message": f"Successfully imported {imported} of {len(rows)} payments",
        }

    def export_payments(self, fmt: str = "csv"):
        """CSV text, or a list of plain dicts for ``json``"""
        if fmt not in ("csv", "json"):
            raise ValidationError("Invalid format. Must be one of: csv, json")

        payments = self.find_many()
        rows = [
            {column: export_value(getattr(payment, column)) for column in EXPORT_COLUMNS}
            for payment in payments
        ]

        logger.info(f"Exported {len(payments)} payments as {fmt}")
        if fmt == "csv":
            return pd.DataFrame(rows, columns=EXPORT_COLUMNS).to_csv(index=False)
        return rows

    # ------------------------------------------------------------------
    # Student balance
    # ------------------------------------------------------------------
    def student_summary(
        self,
        student_id: UUID,
        session: Optional[str] = None,
        term: Optional[str] = None,
    ) -> Dict[str, Any]:
        student = self._ensure_student(student_id)
        session = session or settings.CURRENT_SESSION
        term = term or settings.CURRENT_TERM

        items = self.items.list_items(student.class_name, term, session)
        payments = self.db.execute(
            select(Payment).where(
                Payment.student_id == student.id,
                Payment.session == session,
                Payment.term == term,
                Payment.status.notin_(("canceled", "refunded")),
                or_(Payment.status == "paid", Payment.lines.any()),
            )
        ).scalars().all()

        total_expected = sum((to_decimal(item.amount) for item in items), Decimal("0.00"))
        total_paid = Decimal("0.00")
        for payment in payments:
            if payment.lines:
                total_paid += sum((to_decimal(line.paid_amount) for line in payment.lines), Decimal("0.00"))
            else:
                total_paid += to_decimal(payment.amount)

        if total_expected <= 0:
            status = "not_configured"
        elif total_paid >= total_expected:
            status = "paid"
        elif total_paid > 0:
            status = "partial"
        else:
            status = "unpaid"

        dates = [payment.payment_date for payment in payments if payment.payment_date]
        return {
            "student_id": str(student.id),
            "class_name": student.class_name,
            "session": session,
            "term": term,
            "items": [
                {"id": str(item.id), "name": item.name, "amount": float(item.amount), "mandatory": item.mandatory}
                for item in items
            ],
            "total_expected": float(total_expected),
            "total_paid": float(total_paid),
            "balance": float(max(total_expected - total_paid, Decimal("0.00"))),
            "status": status,
            "latest_payment_date": max(dates).isoformat() if dates else None,
        }
