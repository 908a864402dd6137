# app/api/routers/payments.py - Payments and fee items (admin only)
from fastapi import APIRouter, Depends, status, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import Dict, Any, List, Optional
from datetime import date
from uuid import UUID
import logging

from app.core.db import get_db
from app.api.deps.auth import require_admin
from app.services.payment_service import PaymentService
from app.schemas.common import Page, MessageOut, ImportOut
from app.schemas.payment import (
    PaymentCreate,
    PaymentUpdate,
    PaymentOut,
    PaymentImportIn,
    PaymentItemCreate,
    PaymentItemUpdate,
    PaymentItemOut,
)

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/", response_model=Page[PaymentOut])
async def list_payments(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    payment_method: Optional[str] = Query(None),
    term: Optional[str] = Query(None),
    session: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    sort_by: Optional[str] = Query(None),
    order: str = Query("asc"),
    db: Session = Depends(get_db)
):
    return PaymentService(db).find_all(
        page=page,
        limit=limit,
        sort_by=sort_by,
        order=order,
        filters={
            "status": status_filter,
            "payment_method": payment_method,
            "term": term,
            "session": session,
            "start_date": start_date,
            "end_date": end_date,
        },
    )


@router.post("/", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
async def create_payment(
    data: PaymentCreate,
    db: Session = Depends(get_db)
):
    """Record a payment; with lines the amount is allocated across fee items"""
    return PaymentService(db).create_payment(data.model_dump(exclude_none=True))


# ==================== REPORTS ====================

@router.get("/student/{student_id}", response_model=Page[PaymentOut])
async def get_student_payments(
    student_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    return PaymentService(db).find_by_student(student_id, page=page, limit=limit)


@router.get("/status/{payment_status}", response_model=Page[PaymentOut])
async def get_payments_by_status(
    payment_status: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    return PaymentService(db).find_by_status(payment_status, page=page, limit=limit)


@router.get("/pending", response_model=List[PaymentOut])
async def get_pending_payments(db: Session = Depends(get_db)):
    """Pending payments due within the next seven days"""
    return PaymentService(db).pending_payments()


@router.get("/overdue", response_model=List[PaymentOut])
async def get_overdue_payments(db: Session = Depends(get_db)):
    return PaymentService(db).overdue_payments()


@router.get("/recent", response_model=List[PaymentOut])
async def get_recent_payments(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    return PaymentService(db).recent_payments(limit)


@router.get("/statistics")
async def get_statistics(
    period: str = Query("month"),
    db: Session = Depends(get_db)
):
    return PaymentService(db).statistics(period)


@router.post("/import", response_model=ImportOut)
async def import_payments(
    data: PaymentImportIn,
    db: Session = Depends(get_db)
):
    return PaymentService(db).import_payments(data.rows)


@router.get("/export")
async def export_payments(
    format: str = Query("csv"),
    db: Session = Depends(get_db)
):
    exported = PaymentService(db).export_payments(format)
    if format == "csv":
        return Response(
            content=exported,
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="payments.csv"'},
        )
    return exported


# ==================== FEE ITEMS ====================

@router.get("/items", response_model=List[PaymentItemOut])
async def list_items(
    class_name: Optional[str] = Query(None),
    term: Optional[str] = Query(None),
    session: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    return PaymentService(db).items.list_items(class_name, term, session)


@router.post("/items", response_model=PaymentItemOut, status_code=status.HTTP_201_CREATED)
async def create_item(
    data: PaymentItemCreate,
    db: Session = Depends(get_db)
):
    return PaymentService(db).items.create(data.model_dump())


@router.get("/items/{item_id}", response_model=PaymentItemOut)
async def get_item(
    item_id: UUID,
    db: Session = Depends(get_db)
):
    return PaymentService(db).items.get_or_404(item_id)


@router.put("/items/{item_id}", response_model=PaymentItemOut)
async def update_item(
    item_id: UUID,
    data: PaymentItemUpdate,
    db: Session = Depends(get_db)
):
    return PaymentService(db).items.update(item_id, data.model_dump(exclude_unset=True))


@router.delete("/items/{item_id}", response_model=MessageOut)
async def delete_item(
    item_id: UUID,
    db: Session = Depends(get_db)
):
    PaymentService(db).items.delete_or_404(item_id)
    return {"message": "Payment item deleted successfully"}


# ==================== SINGLE PAYMENT ====================

@router.get("/{payment_id}", response_model=PaymentOut)
async def get_payment(
    payment_id: UUID,
    db: Session = Depends(get_db)
):
    return PaymentService(db).get_or_404(payment_id)


@router.put("/{payment_id}", response_model=PaymentOut)
async def update_payment(
    payment_id: UUID,
    data: PaymentUpdate,
    db: Session = Depends(get_db)
):
    return PaymentService(db).update_payment(payment_id, data.model_dump(exclude_unset=True))


@router.delete("/{payment_id}", response_model=MessageOut)
async def delete_payment(
    payment_id: UUID,
    db: Session = Depends(get_db)
):
    PaymentService(db).delete_or_404(payment_id)
    return {"message": "Payment deleted successfully"}
