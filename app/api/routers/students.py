# app/api/routers/students.py
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import Dict, Any, List, Optional
from uuid import UUID
import logging

from app.core.config import settings
from app.core.db import get_db
from app.api.deps.auth import get_current_user, require_admin, ensure_student_access
from app.services.payment_service import PaymentService
from app.services.result_service import ResultService
from app.services.student_service import StudentService
from app.schemas.common import Page, MessageOut
from app.schemas.payment import PaymentOut
from app.schemas.result import ResultOut
from app.schemas.student import StudentCreate, StudentUpdate, StudentOut, StudentDetail, SubjectBrief

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=Page[StudentOut])
async def list_students(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    class_name: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    sort_by: Optional[str] = Query(None),
    order: str = Query("asc"),
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List students with search, class and status filters"""
    return StudentService(db).search(
        search=search,
        page=page,
        limit=limit,
        sort_by=sort_by,
        order=order,
        filters={"class_name": class_name, "status": status_filter},
    )


@router.post("/", response_model=StudentDetail, status_code=status.HTTP_201_CREATED)
async def create_student(
    student_data: StudentCreate,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return StudentService(db).create_student(student_data.model_dump())


@router.get("/{student_id}", response_model=StudentDetail)
async def get_student(
    student_id: UUID,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ensure_student_access(ctx, student_id)
    return StudentService(db).get_or_404(student_id)


@router.put("/{student_id}", response_model=StudentDetail)
async def update_student(
    student_id: UUID,
    student_data: StudentUpdate,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return StudentService(db).update_student(student_id, student_data.model_dump(exclude_unset=True))


@router.delete("/{student_id}", response_model=MessageOut)
async def delete_student(
    student_id: UUID,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    results = ResultService(db)
    periods = results.student_periods(student_id)
    StudentService(db).delete_or_404(student_id)
    results.refresh_periods(periods)
    return {"message": "Student deleted successfully"}


@router.get("/{student_id}/subjects", response_model=List[SubjectBrief])
async def get_student_subjects(
    student_id: UUID,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ensure_student_access(ctx, student_id)
    return StudentService(db).get_subjects(student_id)


@router.get("/{student_id}/results", response_model=List[ResultOut])
async def get_student_results(
    student_id: UUID,
    session: Optional[str] = Query(None),
    term: Optional[str] = Query(None),
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ensure_student_access(ctx, student_id)
    return StudentService(db).get_results(student_id, session, term)


@router.get("/{student_id}/result-sheet")
async def get_student_result_sheet(
    student_id: UUID,
    session: str = Query(settings.CURRENT_SESSION),
    term: str = Query(settings.CURRENT_TERM),
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Report card: every class subject with scores plus the overall summary"""
    ensure_student_access(ctx, student_id)
    return ResultService(db).get_student_result_sheet(student_id, session, term)


@router.get("/{student_id}/payments", response_model=Page[PaymentOut])
async def get_student_payments(
    student_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return PaymentService(db).find_by_student(student_id, page=page, limit=limit)


@router.get("/{student_id}/payment-summary")
async def get_student_payment_summary(
    student_id: UUID,
    session: Optional[str] = Query(None),
    term: Optional[str] = Query(None),
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return PaymentService(db).student_summary(student_id, session, term)
