# app/services/teacher_service.py
import logging
from typing import List
from uuid import UUID

from app.core.errors import NotFoundError
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.services.base_service import BaseService

logger = logging.getLogger(__name__)


class TeacherService(BaseService[Teacher]):
    model = Teacher
    entity_name = "Teacher"

    def assign_subject(self, id: UUID, subject_id: UUID) -> Teacher:
        """Attach a subject to a teacher; assigning twice is a no-op"""
        teacher = self.get_or_404(id)
        subject = self.db.get(Subject, subject_id)
        if subject is None:
            raise NotFoundError("Subject not found")

        if subject not in teacher.subjects:
            teacher.subjects.append(subject)
            self._run("update", self.db.commit)
            logger.info(f"Subject {subject.code} assigned to teacher {id}")
        return teacher

    def remove_subject(self, id: UUID, subject_id: UUID) -> Teacher:
        teacher = self.get_or_404(id)
        subject = next((s for s in teacher.subjects if s.id == subject_id), None)
        if subject is None:
            raise NotFoundError("Subject is not assigned to this teacher")

        teacher.subjects.remove(subject)
        self._run("update", self.db.commit)
        logger.info(f"Subject {subject.code} removed from teacher {id}")
        return teacher

    def get_subjects(self, id: UUID) -> List[Subject]:
        return sorted(self.get_or_404(id).subjects, key=lambda s: (s.sort_order, s.title))
