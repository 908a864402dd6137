# app/api/routers/results.py - Result recording, class reports and grading configuration
from fastapi import APIRouter, Depends, status, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import Dict, Any, List, Optional
from uuid import UUID
import logging

from app.core.config import settings
from app.core.db import get_db
from app.api.deps.auth import get_current_user, require_admin, require_teacher, ensure_student_access
from app.models.user import UserRole
from app.services import grading
from app.services.result_service import ResultService
from app.schemas.common import Page, MessageOut, ImportOut
from app.schemas.result import (
    ResultCreate,
    ResultUpdate,
    ResultOut,
    BulkResultIn,
    BulkResultOut,
    ImportResultsIn,
    RecalculateIn,
    ScoringConfigIn,
    GradingScaleIn,
    ClassSubjectIn,
)
from app.schemas.subject import SubjectOut

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=Page[ResultOut])
async def list_results(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    class_name: Optional[str] = Query(None),
    session: Optional[str] = Query(None),
    term: Optional[str] = Query(None),
    student_id: Optional[UUID] = Query(None),
    subject_id: Optional[UUID] = Query(None),
    sort_by: Optional[str] = Query(None),
    order: str = Query("asc"),
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    user = ctx["user"]
    if user.role == UserRole.STUDENT.value:
        student_id = student_id or user.linked_id
        ensure_student_access(ctx, student_id)

    return ResultService(db).find_all(
        page=page,
        limit=limit,
        sort_by=sort_by,
        order=order,
        filters={
            "class_name": class_name,
            "session": session,
            "term": term,
            "student_id": student_id,
            "subject_id": subject_id,
        },
    )


@router.post("/", response_model=ResultOut, status_code=status.HTTP_201_CREATED)
async def record_result(
    data: ResultCreate,
    ctx: Dict[str, Any] = Depends(require_teacher),
    db: Session = Depends(get_db)
):
    """Record or overwrite a student's scores for one subject in a term"""
    return ResultService(db).record_result(data.model_dump())


# ==================== CLASS REPORTS ====================

@router.get("/class-results")
async def get_class_results(
    class_name: str = Query(..., min_length=1),
    session: str = Query(settings.CURRENT_SESSION),
    term: str = Query(settings.CURRENT_TERM),
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ResultService(db).get_class_results(class_name, session, term)


@router.get("/class-summary")
async def get_class_summary(
    class_name: str = Query(..., min_length=1),
    session: str = Query(settings.CURRENT_SESSION),
    term: str = Query(settings.CURRENT_TERM),
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ResultService(db).get_class_summary(class_name, session, term)


@router.get("/class-stats")
async def get_class_stats(
    class_name: str = Query(..., min_length=1),
    session: str = Query(settings.CURRENT_SESSION),
    term: str = Query(settings.CURRENT_TERM),
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ResultService(db).get_class_stats(class_name, session, term)


@router.get("/summary")
async def get_summary(
    session: str = Query(settings.CURRENT_SESSION),
    term: str = Query(settings.CURRENT_TERM),
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ResultService(db).get_summary_statistics(session, term)


@router.get("/subject/{subject_id}", response_model=Page[ResultOut])
async def get_subject_results(
    subject_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    class_name: Optional[str] = Query(None),
    session: Optional[str] = Query(None),
    term: Optional[str] = Query(None),
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ResultService(db).find_all(
        page=page,
        limit=limit,
        sort_by="total",
        order="desc",
        filters={"subject_id": subject_id, "class_name": class_name, "session": session, "term": term},
    )


@router.get("/student/{student_id}", response_model=List[ResultOut])
async def get_student_results(
    student_id: UUID,
    session: Optional[str] = Query(None),
    term: Optional[str] = Query(None),
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ensure_student_access(ctx, student_id)
    return ResultService(db).find_many(
        filters={"student_id": student_id, "session": session, "term": term}
    )


# ==================== BULK / IMPORT / EXPORT ====================

@router.post("/bulk", response_model=BulkResultOut)
async def bulk_update(
    data: BulkResultIn,
    ctx: Dict[str, Any] = Depends(require_teacher),
    db: Session = Depends(get_db)
):
    return ResultService(db).bulk_update(
        data.class_name,
        data.subject_id,
        data.session,
        data.term,
        [row.model_dump() for row in data.results],
    )


@router.post("/recalculate")
async def recalculate(
    data: RecalculateIn,
    ctx: Dict[str, Any] = Depends(require_teacher),
    db: Session = Depends(get_db)
):
    """Recompute positions for one class period, or for every period on file"""
    service = ResultService(db)
    if data.class_name:
        session = data.session or settings.CURRENT_SESSION
        term = data.term or settings.CURRENT_TERM
        service.invalidate(data.class_name, session, term)
        return {
            "message": "Class positions recalculated",
            "stats": service.calculate_class_positions(data.class_name, session, term),
        }

    service.clear_cache()
    count = service.recalculate_all(data.session, data.term)
    return {"message": f"Recalculated {count} class periods", "periods": count}


@router.post("/import", response_model=ImportOut)
async def import_results(
    data: ImportResultsIn,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return ResultService(db).import_results(data.rows)


@router.get("/export")
async def export_results(
    class_name: str = Query(..., min_length=1),
    session: str = Query(settings.CURRENT_SESSION),
    term: str = Query(settings.CURRENT_TERM),
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    filename, content = ResultService(db).export_class_results_csv(class_name, session, term)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ==================== GRADING CONFIGURATION ====================

@router.get("/config/scoring")
async def get_scoring_config(
    session: Optional[str] = Query(None),
    term: Optional[str] = Query(None),
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ResultService(db).get_scoring_config(session, term)


@router.put("/config/scoring")
async def update_scoring_config(
    data: ScoringConfigIn,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    values = data.model_dump(exclude_none=True, exclude={"session", "term"})
    config = ResultService(db).update_scoring_config(values, data.session, data.term)
    logger.info(f"Scoring config changed by {ctx['user'].email}")
    return config


@router.get("/config/grading-scale")
async def get_grading_scale(
    session: Optional[str] = Query(None),
    term: Optional[str] = Query(None),
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ResultService(db)
    scale = service.get_grading_scale(session, term)
    return {
        "scale": scale,
        "bands": grading.grade_bands(scale),
        "default_bands": service.default_bands(),
    }


@router.put("/config/grading-scale")
async def update_grading_scale(
    data: GradingScaleIn,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    scale = data.scale
    if isinstance(scale, list):
        scale = [band.model_dump(exclude_none=True) for band in scale]

    scale = ResultService(db).update_grading_scale(scale, data.session, data.term)
    logger.info(f"Grading scale changed by {ctx['user'].email}")
    return {"scale": scale, "bands": grading.grade_bands(scale)}


# ==================== CLASS SUBJECTS ====================

@router.get("/class-subjects/{class_name}", response_model=List[SubjectOut])
async def list_class_subjects(
    class_name: str,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ResultService(db).list_class_subjects(class_name)


@router.post("/class-subjects", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
async def add_class_subject(
    data: ClassSubjectIn,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    ResultService(db).add_class_subject(data.class_name, data.subject_id)
    return {"message": "Subject added to class successfully"}


@router.delete("/class-subjects/{class_name}/{subject_id}", response_model=MessageOut)
async def remove_class_subject(
    class_name: str,
    subject_id: UUID,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    removed = ResultService(db).remove_class_subject(class_name, subject_id)
    return {"message": f"Subject removed from class successfully ({removed} results deleted)"}


# ==================== SINGLE RESULT ====================

@router.get("/{result_id}", response_model=ResultOut)
async def get_result(
    result_id: UUID,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    result = ResultService(db).get_or_404(result_id)
    ensure_student_access(ctx, result.student_id)
    return result


@router.put("/{result_id}", response_model=ResultOut)
async def update_result(
    result_id: UUID,
    data: ResultUpdate,
    ctx: Dict[str, Any] = Depends(require_teacher),
    db: Session = Depends(get_db)
):
    return ResultService(db).update_result(result_id, data.model_dump(exclude_unset=True))


@router.delete("/{result_id}", response_model=MessageOut)
async def delete_result(
    result_id: UUID,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    ResultService(db).delete_result(result_id)
    return {"message": "Result deleted successfully"}
