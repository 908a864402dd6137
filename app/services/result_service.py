# app/services/result_service.py - Result recording, class ranking and report data
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

import pandas as pd
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete, distinct, func, select
from sqlalchemy.orm import Session

from app.core.cache import CacheManager, cache as default_cache
from app.core.config import settings
from app.core.errors import AppError, NotFoundError, ValidationError
from app.models.base import utcnow
from app.models.result import GradingPolicy, Result
from app.models.student import Student
from app.models.subject import ClassSubject, Subject
from app.schemas.result import ResultCreate
from app.services import grading
from app.services.base_service import BaseService
from app.services.grading import GradeBand, ScoringConfig

logger = logging.getLogger(__name__)

# Cache key prefixes
CLASS_STATS = "class_stats"
CLASS_SUMMARY = "class_summary"
STUDENT_SHEET = "student_sheet"
GRADING_PREFIXES = (CLASS_STATS, CLASS_SUMMARY, STUDENT_SHEET)

UPDATABLE_FIELDS = ("remarks", "published_at", "extra_data")


def period_key(prefix: str, *parts: Any) -> str:
    return ":".join([prefix, *(str(part) for part in parts)])


def export_filename(class_name: str, session: str, term: str) -> str:
    name = f"{class_name}_{term}_{session}_Results.csv"
    return name.replace("/", "_").replace(" ", "_")


class ResultService(BaseService[Result]):
    """
    Owns everything derived from results: per-row grades, class positions and
    the cached class statistics. Every write path ends by invalidating the
    affected cache keys and re-ranking the class period it touched.
    """

    model = Result
    entity_name = "Result"

    def __init__(self, db: Session, cache: Optional[CacheManager] = None):
        super().__init__(db)
        self.cache = cache or default_cache

    # ------------------------------------------------------------------
    # Grading policy
    # ------------------------------------------------------------------
    def _policy(self, session: Optional[str], term: Optional[str]) -> Optional[GradingPolicy]:
        return self.db.execute(
            select(GradingPolicy).where(
                GradingPolicy.session.is_(None) if session is None else GradingPolicy.session == session,
                GradingPolicy.term.is_(None) if term is None else GradingPolicy.term == term,
            )
        ).scalar_one_or_none()

    def _effective_policy(self, session: Optional[str], term: Optional[str]) -> Optional[GradingPolicy]:
        policy = self._policy(session, term) if session and term else None
        return policy or self._policy(None, None)

    def get_scoring_config(self, session: Optional[str] = None, term: Optional[str] = None) -> ScoringConfig:
        policy = self._effective_policy(session, term)
        if policy is None:
            return ScoringConfig.from_settings()
        return ScoringConfig(
            ca=policy.ca_max,
            test=policy.test_max,
            exam=policy.exam_max,
            total=policy.total_max,
            pass_mark=policy.pass_mark,
        )

    def get_grading_scale(self, session: Optional[str] = None, term: Optional[str] = None) -> List[GradeBand]:
        for policy in (self._policy(session, term) if session and term else None, self._policy(None, None)):
            if policy is not None and policy.scale:
                return [GradeBand(**band) for band in policy.scale]
        return list(grading.DEFAULT_GRADING_SCALE)

    def _upsert_policy(self, session: Optional[str], term: Optional[str]) -> GradingPolicy:
        policy = self._policy(session, term)
        if policy is None:
            config = self.get_scoring_config(session, term)
            policy = GradingPolicy(
                session=session,
                term=term,
                ca_max=config.ca,
                test_max=config.test,
                exam_max=config.exam,
                total_max=config.total,
                pass_mark=config.pass_mark,
            )
            self.db.add(policy)
        return policy

    def update_scoring_config(
        self,
        values: Dict[str, Any],
        session: Optional[str] = None,
        term: Optional[str] = None,
    ) -> ScoringConfig:
        """Store new maxima for a period (or globally) and regrade its results"""
        if bool(session) != bool(term):
            raise ValidationError("Session and term must be given together")

        config = grading.normalize_scoring_config(values, base=self.get_scoring_config(session, term))
        policy = self._upsert_policy(session, term)
        policy.ca_max = config.ca
        policy.test_max = config.test
        policy.exam_max = config.exam
        policy.total_max = config.total
        policy.pass_mark = config.pass_mark
        self._run("update", self.db.commit)

        logger.info(f"Scoring config updated for {session or 'all sessions'} {term or ''}: {config.model_dump()}")
        self.regrade(session, term)
        return config

    def update_grading_scale(
        self,
        value: Any,
        session: Optional[str] = None,
        term: Optional[str] = None,
    ) -> List[GradeBand]:
        if bool(session) != bool(term):
            raise ValidationError("Session and term must be given together")

        scale = grading.normalize_grading_scale(value)
        policy = self._upsert_policy(session, term)
        policy.scale = [band.model_dump() for band in scale]
        self._run("update", self.db.commit)

        logger.info(f"Grading scale updated for {session or 'all sessions'} {term or ''}")
        self.regrade(session, term)
        return scale

    def regrade(self, session: Optional[str] = None, term: Optional[str] = None) -> int:
        """Recompute every result's derived fields and positions; returns rows touched"""
        stmt = select(Result)
        if session and term:
            stmt = stmt.where(Result.session == session, Result.term == term)
        results = self.db.execute(stmt).scalars().all()

        policies: Dict[Tuple[str, str], Tuple[ScoringConfig, List[GradeBand]]] = {}
        for result in results:
            period = (result.session, result.term)
            if period not in policies:
                policies[period] = (
                    self.get_scoring_config(*period),
                    self.get_grading_scale(*period),
                )
            self._apply_scores(result, result.ca, result.test, result.exam, *policies[period])
        self._run("update", self.db.commit)

        self.clear_cache()
        self.recalculate_all(session, term)
        return len(results)

    def default_bands(self) -> List[Dict[str, Any]]:
        return grading.grade_bands(grading.DEFAULT_GRADING_SCALE)

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------
    def invalidate(self, class_name: str, session: str, term: str) -> None:
        self.cache.delete(period_key(CLASS_STATS, class_name, session, term))
        self.cache.delete(period_key(CLASS_SUMMARY, class_name, session, term))
        # Sheets embed class positions
        self.cache.delete_prefix(f"{STUDENT_SHEET}:")

    def clear_cache(self) -> None:
        for prefix in GRADING_PREFIXES:
            self.cache.delete_prefix(f"{prefix}:")

    # ------------------------------------------------------------------
    # Class subjects
    # ------------------------------------------------------------------
    def list_class_subjects(self, class_name: str) -> List[Subject]:
        return list(self.db.execute(
            select(Subject)
            .join(ClassSubject, ClassSubject.subject_id == Subject.id)
            .where(ClassSubject.class_name == class_name)
            .order_by(Subject.sort_order, Subject.title)
        ).scalars().all())

    def class_subjects(self, class_name: str, session: str, term: str) -> List[Subject]:
        """Mapped subjects, or the subjects already recorded when none are mapped"""
        subjects = self.list_class_subjects(class_name)
        if subjects:
            return subjects
        return list(self.db.execute(
            select(Subject)
            .where(Subject.id.in_(
                select(distinct(Result.subject_id)).where(
                    Result.class_name == class_name,
                    Result.session == session,
                    Result.term == term,
                )
            ))
            .order_by(Subject.sort_order, Subject.title)
        ).scalars().all())

    def add_class_subject(self, class_name: str, subject_id: UUID) -> ClassSubject:
        if self.db.get(Subject, subject_id) is None:
            raise NotFoundError("Subject not found")

        mapping = self.db.execute(
            select(ClassSubject).where(
                ClassSubject.class_name == class_name,
                ClassSubject.subject_id == subject_id,
            )
        ).scalar_one_or_none()
        if mapping is not None:
            return mapping

        mapping = ClassSubject(class_name=class_name, subject_id=subject_id)
        self.db.add(mapping)
        self._run("create", self.db.commit)
        logger.info(f"Subject {subject_id} added to class {class_name}")

        self._recalculate_class(class_name)
        return mapping

    def remove_class_subject(self, class_name: str, subject_id: UUID) -> int:
        """Unmap a subject and delete its results for the class; returns results removed"""
        mapping = self.db.execute(
            select(ClassSubject).where(
                ClassSubject.class_name == class_name,
                ClassSubject.subject_id == subject_id,
            )
        ).scalar_one_or_none()
        if mapping is None:
            raise NotFoundError("Subject is not assigned to this class")

        def _remove():
            removed = self.db.execute(
                delete(Result).where(Result.class_name == class_name, Result.subject_id == subject_id)
            ).rowcount
            self.db.delete(mapping)
            self.db.commit()
            return removed

        removed = self._run("delete", _remove)
        logger.info(f"Subject {subject_id} removed from class {class_name}, {removed} results deleted")

        self._recalculate_class(class_name)
        return removed

    def _recalculate_class(self, class_name: str) -> None:
        periods = self.db.execute(
            select(Result.session, Result.term).where(Result.class_name == class_name).distinct()
        ).all()
        self.cache.delete_prefix(period_key(CLASS_STATS, class_name) + ":")
        self.cache.delete_prefix(period_key(CLASS_SUMMARY, class_name) + ":")
        self.cache.delete_prefix(f"{STUDENT_SHEET}:")
        for session, term in periods:
            self.calculate_class_positions(class_name, session, term)

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------
    def _apply_scores(
        self,
        result: Result,
        ca: Any,
        test: Any,
        exam: Any,
        config: ScoringConfig,
        scale: List[GradeBand],
    ) -> Result:
        scores = grading.clamp_scores(ca, test, exam, config)
        result.ca = scores["ca"]
        result.test = scores["test"]
        result.exam = scores["exam"]
        result.total = scores["total"]
        result.percentage = grading.calculate_percentage(scores["total"], config)
        result.grade = grading.calculate_grade(scores["total"], config, scale)
        result.remark = grading.generate_remark(scores["total"], config)
        return result

    def _find_existing(self, student_id, subject_id, class_name, session, term) -> Optional[Result]:
        return self.db.execute(
            select(Result).where(
                Result.student_id == student_id,
                Result.subject_id == subject_id,
                Result.class_name == class_name,
                Result.session == session,
                Result.term == term,
            )
        ).scalar_one_or_none()

    def _upsert(self, data: Dict[str, Any]) -> Result:
        """Create or update one result row without committing or ranking"""
        student = self.db.get(Student, data["student_id"])
        if student is None:
            raise NotFoundError("Student not found")
        if self.db.get(Subject, data["subject_id"]) is None:
            raise NotFoundError("Subject not found")

        class_name = data.get("class_name") or student.class_name
        if not class_name:
            raise ValidationError("Class is required when the student has no class")
        session = data.get("session") or settings.CURRENT_SESSION
        term = data.get("term") or settings.CURRENT_TERM

        result = self._find_existing(student.id, data["subject_id"], class_name, session, term)
        if result is None:
            result = Result(
                student_id=student.id,
                subject_id=data["subject_id"],
                class_name=class_name,
                session=session,
                term=term,
            )
            self.db.add(result)

        self._apply_scores(
            result,
            data.get("ca"),
            data.get("test"),
            data.get("exam"),
            self.get_scoring_config(session, term),
            self.get_grading_scale(session, term),
        )
        for field in UPDATABLE_FIELDS:
            if data.get(field) is not None:
                setattr(result, field, data[field])
        result.recorded_at = utcnow()
        return result

    def record_result(self, data: Dict[str, Any]) -> Result:
        """
        Record (or overwrite) a student's scores for a subject in a term.

        Args:
            data: student_id, subject_id, optional class_name/session/term,
                ca/test/exam scores, remarks, published_at, extra_data

        Returns:
            The stored result with grade and class position filled in

        Raises:
            NotFoundError: unknown student or subject
            ValidationError: no class could be determined
        """
        result = self._upsert(data)
        self._run("create", self.db.commit)
        logger.info(
            f"Result recorded: student={result.student_id} subject={result.subject_id} "
            f"{result.class_name} {result.term} {result.session} total={result.total} grade={result.grade}"
        )

        self.invalidate(result.class_name, result.session, result.term)
        self.calculate_class_positions(result.class_name, result.session, result.term)
        self.db.refresh(result)
        return result

    def update_result(self, id: UUID, data: Dict[str, Any]) -> Result:
        result = self.get_or_404(id)
        if not data:
            return result

        previous = (result.class_name, result.session, result.term)
        for key in ("class_name", "session", "term"):
            if data.get(key):
                setattr(result, key, data[key])

        session, term = result.session, result.term
        self._apply_scores(
            result,
            data.get("ca", result.ca),
            data.get("test", result.test),
            data.get("exam", result.exam),
            self.get_scoring_config(session, term),
            self.get_grading_scale(session, term),
        )
        for field in UPDATABLE_FIELDS:
            if field in data:
                setattr(result, field, data[field])
        result.recorded_at = utcnow()
        self._run("update", self.db.commit)
        logger.info(f"Result updated: {id}")

        current = (result.class_name, result.session, result.term)
        for period in {previous, current}:
            self.invalidate(*period)
            self.calculate_class_positions(*period)
        self.db.refresh(result)
        return result

    def delete_result(self, id: UUID) -> None:
        result = self.get_or_404(id)
        period = (result.class_name, result.session, result.term)

        def _delete():
            self.db.delete(result)
            self.db.commit()

        self._run("delete", _delete)
        logger.info(f"Result deleted: {id}")

        self.invalidate(*period)
        self.calculate_class_positions(*period)

    def bulk_update(
        self,
        class_name: str,
        subject_id: UUID,
        session: str,
        term: str,
        rows: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """Record one subject's scores for many students, ranking once at the end"""
        errors = []
        success_count = 0

        for row in rows:
            student_id = row.get("student_id")
            try:
                self._upsert({
                    "student_id": student_id,
                    "subject_id": subject_id,
                    "class_name": class_name,
                    "session": session,
                    "term": term,
                    "ca": row.get("ca"),
                    "test": row.get("test"),
                    "exam": row.get("exam"),
                    "remarks": row.get("remarks"),
                })
                self._run("update", self.db.commit)
                success_count += 1
            except AppError as e:
                self.db.rollback()
                errors.append({"student_id": str(student_id), "error": e.message})

        total_count = len(rows)
        self.invalidate(class_name, session, term)
        self.calculate_class_positions(class_name, session, term)
        logger.info(f"Bulk result update for {class_name} {term} {session}: {success_count}/{total_count}")

        return {
            "success": not errors,
            "success_count": success_count,
            "total_count": total_count,
            "errors": errors,
            "message": f"Updated {success_count} out of {total_count} results",
        }

    def import_results(self, rows: List[Dict[str, Any]]) -> Dict[str, Any]:
        outcomes = []
        periods = set()

        for index, row in enumerate(rows, start=1):
            try:
                payload = ResultCreate.model_validate(row).model_dump()
                result = self._upsert(payload)
                self._run("create", self.db.commit)
                periods.add((result.class_name, result.session, result.term))
                outcomes.append({"row": index, "success": True, "id": str(result.id)})
            except PydanticValidationError as e:
                outcomes.append({
                    "row": index,
                    "success": False,
                    "error": "; ".join(err["msg"] for err in e.errors()),
                })
            except AppError as e:
                self.db.rollback()
                outcomes.append({"row": index, "success": False, "error": e.message})

        for period in periods:
            self.invalidate(*period)
            self.calculate_class_positions(*period)

        imported = sum(1 for outcome in outcomes if outcome["success"])
        logger.info(f"Imported {imported} of {len(rows)} results")
        return {
            "success": imported == len(rows),
            "imported": imported,
            "total": len(rows),
            "results": outcomes,
            "message": f"Successfully imported {imported} of {len(rows)} results",
        }

    # ------------------------------------------------------------------
    # Ranking
    # ------------------------------------------------------------------
    def _period_results(self, class_name: str, session: str, term: str) -> List[Result]:
        return list(self.db.execute(
            select(Result).where(
                Result.class_name == class_name,
                Result.session == session,
                Result.term == term,
            )
        ).scalars().all())

    def calculate_class_positions(self, class_name: str, session: str, term: str) -> Dict[str, Any]:
        """
        Rank every student of a class period on their summed subject totals.

        A subject the student has no result for counts as 0. Ties share a
        position (1, 1, 3). Each of the student's result rows receives the
        position, the summed total, the per-subject average and a percentile.
        The resulting class stats are cached.
        """
        results = self._period_results(class_name, session, term)
        subject_ids = {subject.id for subject in self.class_subjects(class_name, session, term)}
        subject_count = len(subject_ids) or 1

        totals: Dict[UUID, float] = {}
        rows_by_student: Dict[UUID, List[Result]] = {}
        for result in results:
            rows_by_student.setdefault(result.student_id, []).append(result)
            totals.setdefault(result.student_id, 0.0)
            if result.subject_id in subject_ids:
                totals[result.student_id] += result.total

        ranked = grading.rank(totals.items())
        count = len(ranked)
        for student_id, total, position in ranked:
            for result in rows_by_student[student_id]:
                result.position = position
                result.total_class_score = total
                result.class_average = round(total / subject_count, 2)
                result.percentile = grading.percentile(position, count)
        self._run("update", self.db.commit)

        scores = list(totals.values())
        stats = {
            "class_name": class_name,
            "session": session,
            "term": term,
            "highest": max(scores) if scores else 0,
            "lowest": min(scores) if scores else 0,
            "average": round(sum(scores) / len(scores), 1) if scores else 0,
            "student_count": count,
            "subject_count": len(subject_ids),
            "last_updated": utcnow().isoformat(),
        }
        self.cache.set(period_key(CLASS_STATS, class_name, session, term), stats)
        logger.debug(f"Positions calculated for {class_name} {term} {session}: {count} students")
        return stats

    def get_class_stats(self, class_name: str, session: str, term: str) -> Dict[str, Any]:
        cached = self.cache.get(period_key(CLASS_STATS, class_name, session, term))
        if cached is not None:
            return cached
        return self.calculate_class_positions(class_name, session, term)

    def student_periods(self, student_id: UUID) -> List[Tuple[str, str, str]]:
        return [tuple(row) for row in self.db.execute(
            select(Result.class_name, Result.session, Result.term)
            .where(Result.student_id == student_id)
            .distinct()
        ).all()]

    def refresh_periods(self, periods: Iterable[Tuple[str, str, str]]) -> None:
        for period in periods:
            self.invalidate(*period)
            self.calculate_class_positions(*period)

    def recalculate_all(self, session: Optional[str] = None, term: Optional[str] = None) -> int:
        stmt = select(Result.class_name, Result.session, Result.term).distinct()
        if session and term:
            stmt = stmt.where(Result.session == session, Result.term == term)
        periods = self.db.execute(stmt).all()
        for period in periods:
            self.calculate_class_positions(*period)
        return len(periods)

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------
    def get_class_summary(self, class_name: str, session: str, term: str) -> Dict[str, Any]:
        key = period_key(CLASS_SUMMARY, class_name, session, term)
        return self.cache.get_or_set(key, lambda: self._build_class_summary(class_name, session, term))

    def _build_class_summary(self, class_name: str, session: str, term: str) -> Dict[str, Any]:
        grades = [band.grade for band in self.get_grading_scale(session, term)]
        results = self._period_results(class_name, session, term)

        def summarize(rows: List[Result]) -> Dict[str, Any]:
            scores = [row.total for row in rows]
            positive = [score for score in scores if score > 0]
            distribution = {grade: 0 for grade in grades}
            for row in rows:
                distribution[row.grade] = distribution.get(row.grade, 0) + 1
            return {
                "average": round(sum(positive) / len(positive), 2) if positive else 0,
                "highest": max(scores) if scores else 0,
                "lowest": min(scores) if scores else 0,
                "total_students": len({row.student_id for row in rows}),
                "grade_distribution": distribution,
            }

        subjects = []
        for subject in self.class_subjects(class_name, session, term):
            rows = [result for result in results if result.subject_id == subject.id]
            subjects.append({
                "subject_id": str(subject.id),
                "code": subject.code,
                "title": subject.title,
                **summarize(rows),
            })

        return {
            "class_name": class_name,
            "session": session,
            "term": term,
            "subjects": subjects,
            "overall": {**summarize(results), "total_results": len(results)},
        }

    def get_summary_statistics(self, session: str, term: str) -> Dict[str, Any]:
        total_students = self.db.execute(
            select(func.count()).select_from(Student).where(Student.status == "active")
        ).scalar_one()
        results = self.db.execute(
            select(Result.student_id, Result.total).where(Result.session == session, Result.term == term)
        ).all()

        scores = [row.total for row in results]
        with_results = {row.student_id for row in results}
        return {
            "session": session,
            "term": term,
            "total_students": total_students,
            "results_submitted": len(results),
            "students_with_results": len(with_results),
            "average_score": round(sum(scores) / len(scores), 1) if scores else 0,
            "outstanding": max(total_students - len(with_results), 0),
        }

    def get_class_results(self, class_name: str, session: str, term: str) -> List[Dict[str, Any]]:
        """One summary row per student of the class, best total first"""
        config = self.get_scoring_config(session, term)
        scale = self.get_grading_scale(session, term)
        subjects = self.class_subjects(class_name, session, term)
        subject_ids = {subject.id for subject in subjects}
        subject_count = len(subjects)

        results = self._period_results(class_name, session, term)
        by_student: Dict[UUID, List[Result]] = {}
        for result in results:
            by_student.setdefault(result.student_id, []).append(result)

        students = self.db.execute(
            select(Student).where(
                (Student.class_name == class_name) | Student.id.in_(list(by_student))
            )
        ).scalars().all()

        rows = []
        for student in students:
            recorded = [r for r in by_student.get(student.id, []) if r.subject_id in subject_ids]
            total = sum(r.total for r in recorded)
            average = round(total / subject_count, 2) if subject_count else 0
            if subject_count and len(recorded) == subject_count:
                status = "Completed"
            elif recorded:
                status = "In Progress"
            else:
                status = "Pending"

            rows.append({
                "student_id": str(student.id),
                "student_name": student.name,
                "registration_number": student.registration_number,
                "subjects_recorded": len(recorded),
                "total_subjects": subject_count,
                "total_score": total,
                "average_score": average,
                "grade": grading.calculate_grade(average, config, scale),
                "position": recorded[0].position if recorded else None,
                "ca_score": _mean(r.ca for r in recorded),
                "test_score": _mean(r.test for r in recorded),
                "exam_score": _mean(r.exam for r in recorded),
                "status": status,
            })

        rows.sort(key=lambda row: (-row["total_score"], row["student_name"]))
        return rows

    def get_student_result_sheet(self, student_id: UUID, session: str, term: str) -> Dict[str, Any]:
        student = self.db.get(Student, student_id)
        if student is None:
            raise NotFoundError("Student not found")

        key = period_key(STUDENT_SHEET, student.id, session, term)
        return self.cache.get_or_set(key, lambda: self._build_result_sheet(student, session, term))

    def _build_result_sheet(self, student: Student, session: str, term: str) -> Dict[str, Any]:
        config = self.get_scoring_config(session, term)
        scale = self.get_grading_scale(session, term)

        results = self.db.execute(
            select(Result).where(
                Result.student_id == student.id,
                Result.session == session,
                Result.term == term,
            )
        ).scalars().all()
        by_subject = {result.subject_id: result for result in results}
        class_name = results[0].class_name if results else student.class_name

        subjects = self.class_subjects(class_name, session, term) if class_name else []
        known = {subject.id for subject in subjects}
        subjects += [result.subject for result in results if result.subject_id not in known]

        subject_results = []
        for subject in subjects:
            result = by_subject.get(subject.id)
            if result is None:
                subject_results.append({
                    "subject_id": str(subject.id),
                    "subject_code": subject.code,
                    "subject_title": subject.title,
                    "ca": 0, "test": 0, "exam": 0, "total": 0, "percentage": 0,
                    "grade": "F",
                    "remark": "No result available",
                })
            else:
                subject_results.append({
                    "subject_id": str(subject.id),
                    "subject_code": subject.code,
                    "subject_title": subject.title,
                    "ca": result.ca,
                    "test": result.test,
                    "exam": result.exam,
                    "total": result.total,
                    "percentage": result.percentage,
                    "grade": result.grade,
                    "remark": result.remark,
                })

        total_subjects = len(subject_results)
        total_score = sum(row["total"] for row in subject_results)
        average = round(total_score / total_subjects, 2) if total_subjects else 0
        stats = self.get_class_stats(class_name, session, term) if class_name else None

        return {
            "student": {
                "id": str(student.id),
                "name": student.name,
                "registration_number": student.registration_number,
                "class_name": class_name,
            },
            "session": session,
            "term": term,
            "subject_results": subject_results,
            "summary": {
                "total_subjects": total_subjects,
                "total_score": total_score,
                "average_score": average,
                "average_percentage": grading.calculate_percentage(average, config),
                "overall_grade": grading.calculate_grade(average, config, scale),
                "position": results[0].position if results else None,
                "out_of": stats["student_count"] if stats else 0,
                "remark": grading.generate_remark(average, config),
            },
        }

    def export_class_results_csv(self, class_name: str, session: str, term: str) -> Tuple[str, str]:
        """Return (filename, csv text) for the class broadsheet"""
        subjects = self.class_subjects(class_name, session, term)
        results = self._period_results(class_name, session, term)
        by_student: Dict[UUID, Dict[UUID, Result]] = {}
        for result in results:
            by_student.setdefault(result.student_id, {})[result.subject_id] = result

        headers = ["S/N", "Student Name", "Registration Number"]
        for subject in subjects:
            headers += [f"{subject.code}_{part}" for part in ("CA", "Test", "Exam", "Total", "Grade")]
        headers += ["Grand Total", "Average", "Position"]

        students = self.db.execute(
            select(Student).where(Student.id.in_(list(by_student)))
        ).scalars().all()

        entries = []
        for student in students:
            student_results = by_student[student.id]
            row = {"Student Name": student.name, "Registration Number": student.registration_number or ""}
            grand_total = 0.0
            position = None
            for subject in subjects:
                result = student_results.get(subject.id)
                if result is not None:
                    grand_total += result.total
                    position = result.position
                row[f"{subject.code}_CA"] = result.ca if result else 0
                row[f"{subject.code}_Test"] = result.test if result else 0
                row[f"{subject.code}_Exam"] = result.exam if result else 0
                row[f"{subject.code}_Total"] = result.total if result else 0
                row[f"{subject.code}_Grade"] = result.grade if result else "F"
            row["Grand Total"] = grand_total
            row["Average"] = round(grand_total / len(subjects), 1) if subjects else 0
            row["Position"] = position if position is not None else ""
            entries.append((position or len(students) + 1, student.name, row))

        entries.sort(key=lambda entry: (entry[0], entry[1]))
        rows = []
        for index, (_, _, row) in enumerate(entries, start=1):
            row["S/N"] = index
            rows.append(row)

        frame = pd.DataFrame(rows, columns=headers)
        logger.info(f"Exported {len(rows)} result rows for {class_name} {term} {session}")
        return export_filename(class_name, session, term), frame.to_csv(index=False)


def _mean(values: Iterable[float]) -> float:
    values = list(values)
    return round(sum(values) / len(values), 2) if values else 0
