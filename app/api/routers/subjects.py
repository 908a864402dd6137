# app/api/routers/subjects.py
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from sqlalchemy import select, or_
from typing import Dict, Any, List, Optional
from uuid import UUID
import logging

from app.core.db import get_db
from app.api.deps.auth import get_current_user, require_admin, require_roles
from app.models.subject import Subject
from app.models.user import UserRole
from app.services.result_service import ResultService
from app.services.subject_service import SubjectService
from app.schemas.common import Page, MessageOut
from app.schemas.student import StudentOut
from app.schemas.subject import SubjectCreate, SubjectUpdate, SubjectOut
from app.schemas.teacher import TeacherOut

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=Page[SubjectOut])
async def list_subjects(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    department: Optional[str] = Query(None),
    level: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    sort_by: Optional[str] = Query(None),
    order: str = Query("asc"),
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    query = select(Subject)
    if search:
        search_term = f"%{search}%"
        query = query.where(or_(Subject.code.ilike(search_term), Subject.title.ilike(search_term)))

    return SubjectService(db).find_all(
        page=page,
        limit=limit,
        sort_by=sort_by,
        order=order,
        filters={"department": department, "level": level, "status": status_filter},
        stmt=query,
    )


@router.post("/", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
async def create_subject(
    data: SubjectCreate,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return SubjectService(db).create(data.model_dump())


@router.get("/{subject_id}", response_model=SubjectOut)
async def get_subject(
    subject_id: UUID,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return SubjectService(db).get_or_404(subject_id)


@router.put("/{subject_id}", response_model=SubjectOut)
async def update_subject(
    subject_id: UUID,
    data: SubjectUpdate,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return SubjectService(db).update(subject_id, data.model_dump(exclude_unset=True))


@router.delete("/{subject_id}", response_model=MessageOut)
async def delete_subject(
    subject_id: UUID,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    SubjectService(db).delete_or_404(subject_id)
    # Results and class mappings of the subject cascade away
    results = ResultService(db)
    results.clear_cache()
    results.recalculate_all()
    return {"message": "Subject deleted successfully"}


@router.get("/{subject_id}/students", response_model=List[StudentOut])
async def get_subject_students(
    subject_id: UUID,
    ctx: Dict[str, Any] = Depends(require_roles([UserRole.TEACHER.value])),
    db: Session = Depends(get_db)
):
    return SubjectService(db).get_students(subject_id)


@router.get("/{subject_id}/teachers", response_model=List[TeacherOut])
async def get_subject_teachers(
    subject_id: UUID,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return SubjectService(db).get_teachers(subject_id)
