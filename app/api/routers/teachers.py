# app/api/routers/teachers.py
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from sqlalchemy import select, or_
from typing import Dict, Any, List, Optional
from uuid import UUID
import logging

from app.core.db import get_db
from app.api.deps.auth import get_current_user, require_admin
from app.models.teacher import Teacher
from app.services.teacher_service import TeacherService
from app.schemas.common import Page, MessageOut
from app.schemas.student import SubjectBrief
from app.schemas.teacher import TeacherCreate, TeacherUpdate, TeacherOut, TeacherSubjectIn

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=Page[TeacherOut])
async def list_teachers(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    sort_by: Optional[str] = Query(None),
    order: str = Query("asc"),
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    query = select(Teacher)
    if search:
        search_term = f"%{search}%"
        query = query.where(or_(Teacher.name.ilike(search_term), Teacher.email.ilike(search_term)))

    return TeacherService(db).find_all(
        page=page,
        limit=limit,
        sort_by=sort_by,
        order=order,
        filters={"status": status_filter},
        stmt=query,
    )


@router.post("/", response_model=TeacherOut, status_code=status.HTTP_201_CREATED)
async def create_teacher(
    data: TeacherCreate,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return TeacherService(db).create(data.model_dump())


@router.get("/{teacher_id}", response_model=TeacherOut)
async def get_teacher(
    teacher_id: UUID,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return TeacherService(db).get_or_404(teacher_id)


@router.put("/{teacher_id}", response_model=TeacherOut)
async def update_teacher(
    teacher_id: UUID,
    data: TeacherUpdate,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return TeacherService(db).update(teacher_id, data.model_dump(exclude_unset=True))


@router.delete("/{teacher_id}", response_model=MessageOut)
async def delete_teacher(
    teacher_id: UUID,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    TeacherService(db).delete_or_404(teacher_id)
    return {"message": "Teacher deleted successfully"}


@router.get("/{teacher_id}/subjects", response_model=List[SubjectBrief])
async def get_teacher_subjects(
    teacher_id: UUID,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return TeacherService(db).get_subjects(teacher_id)


@router.post("/{teacher_id}/subjects", response_model=TeacherOut)
async def assign_subject(
    teacher_id: UUID,
    data: TeacherSubjectIn,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return TeacherService(db).assign_subject(teacher_id, data.subject_id)


@router.delete("/{teacher_id}/subjects/{subject_id}", response_model=TeacherOut)
async def remove_subject(
    teacher_id: UUID,
    subject_id: UUID,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return TeacherService(db).remove_subject(teacher_id, subject_id)
