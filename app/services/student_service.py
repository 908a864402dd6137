# app/services/student_service.py
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.core.cache import CacheManager, cache as default_cache
from app.core.errors import NotFoundError
from app.models.result import Result
from app.models.student import Student
from app.models.subject import Subject
from app.services.base_service import BaseService
from app.services.result_service import STUDENT_SHEET, period_key

logger = logging.getLogger(__name__)


class StudentService(BaseService[Student]):
    model = Student
    entity_name = "Student"

    def __init__(self, db: Session, cache: Optional[CacheManager] = None):
        super().__init__(db)
        self.cache = cache or default_cache

    def search(
        self,
        search: Optional[str] = None,
        page: int = 1,
        limit: Optional[int] = None,
        sort_by: Optional[str] = None,
        order: str = "asc",
        filters: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Paginated listing with a name / registration number / email search"""
        stmt = select(Student)
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(or_(
                Student.name.ilike(pattern),
                Student.registration_number.ilike(pattern),
                Student.email.ilike(pattern),
            ))
        return self.find_all(page=page, limit=limit, sort_by=sort_by, order=order, filters=filters, stmt=stmt)

    def _subjects(self, subject_ids: List[UUID]) -> List[Subject]:
        subjects = self.db.execute(select(Subject).where(Subject.id.in_(subject_ids))).scalars().all()
        if len(subjects) != len(set(subject_ids)):
            raise NotFoundError("Subject not found")
        return list(subjects)

    def create_student(self, data: Dict[str, Any]) -> Student:
        data = dict(data)
        subject_ids = data.pop("subject_ids", None)
        if subject_ids:
            data["subjects"] = self._subjects(subject_ids)
        return self.create(data)

    def update_student(self, id: UUID, data: Dict[str, Any]) -> Student:
        data = dict(data)
        subject_ids = data.pop("subject_ids", None)
        if subject_ids is not None:
            data["subjects"] = self._subjects(subject_ids)
        student = self.update(id, data)
        # Result sheets embed the name and registration number
        self.cache.delete_prefix(period_key(STUDENT_SHEET, id) + ":")
        return student

    def get_subjects(self, id: UUID) -> List[Subject]:
        return sorted(self.get_or_404(id).subjects, key=lambda s: (s.sort_order, s.title))

    def get_results(
        self,
        id: UUID,
        session: Optional[str] = None,
        term: Optional[str] = None,
    ) -> List[Result]:
        self.get_or_404(id)
        stmt = select(Result).where(Result.student_id == id)
        if session:
            stmt = stmt.where(Result.session == session)
        if term:
            stmt = stmt.where(Result.term == term)
        return list(self.db.execute(stmt.order_by(Result.recorded_at.desc())).scalars().all())
