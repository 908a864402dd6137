# app/services/subject_service.py
from typing import List
from uuid import UUID

from app.models.student import Student
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.services.base_service import BaseService


class SubjectService(BaseService[Subject]):
    model = Subject
    entity_name = "Subject"

    def get_students(self, id: UUID) -> List[Student]:
        return sorted(self.get_or_404(id).students, key=lambda s: s.name)

    def get_teachers(self, id: UUID) -> List[Teacher]:
        return sorted(self.get_or_404(id).teachers, key=lambda t: t.name)
