# app/services/base_service.py
"""Base service with common CRUD operations."""
from datetime import date, datetime, time
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar
import logging
import math

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ConflictError, DatabaseError, NotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Filter keys handled outside plain column equality
DATE_RANGE_KEYS = ("start_date", "end_date")


class BaseService(Generic[T]):
    """CRUD over one model; subclasses set ``model`` and ``entity_name``."""

    model: Type[T]
    entity_name: str = "Record"

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    def _apply_filters(self, stmt, filters: Optional[Dict[str, Any]]):
        if not filters:
            return stmt

        for key, value in filters.items():
            if value is None or key in DATE_RANGE_KEYS:
                continue
            column = getattr(self.model, key, None)
            if column is not None and hasattr(column, "property"):
                stmt = stmt.where(column == value)

        created_at = getattr(self.model, "created_at", None)
        if created_at is not None:
            start = filters.get("start_date")
            end = filters.get("end_date")
            if start is not None:
                stmt = stmt.where(created_at >= _as_datetime(start))
            if end is not None:
                stmt = stmt.where(created_at <= _as_datetime(end, end_of_day=True))
        return stmt

    def _order_clauses(self, sort_by: Optional[str] = None, order: str = "asc") -> list:
        if sort_by and hasattr(self.model, sort_by):
            column = getattr(self.model, sort_by)
            return [column.desc() if order.lower() == "desc" else column.asc()]

        clauses = []
        for name in getattr(self.model, "__default_order__", ()):
            descending = name.startswith("-")
            column = getattr(self.model, name.lstrip("-"))
            clauses.append(column.desc() if descending else column.asc())
        return clauses

    def _run(self, action: str, fn):
        """Run a write, translating database failures into AppErrors"""
        try:
            return fn()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity error during {action} {self.entity_name}: {e.orig}")
            raise ConflictError(f"{self.entity_name} conflicts with an existing record")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error during {action} {self.entity_name}: {e}")
            raise DatabaseError(f"Error during {action} {self.entity_name.lower()}")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def find_all(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        sort_by: Optional[str] = None,
        order: str = "asc",
        filters: Optional[Dict[str, Any]] = None,
        stmt=None,
    ) -> Dict[str, Any]:
        """
        Paginated listing.

        Args:
            page: 1-based page number
            limit: page size, capped at MAX_PAGE_SIZE
            sort_by: column name; unknown names fall back to the default order
            order: "asc" or "desc"
            filters: column equality filters plus start_date/end_date on created_at
            stmt: optional pre-filtered select to paginate instead of select(model)

        Returns:
            Dict with items, total, page, limit, total_pages, has_next, has_previous
        """
        page = max(page, 1)
        limit = min(max(limit or settings.DEFAULT_PAGE_SIZE, 1), settings.MAX_PAGE_SIZE)

        base = stmt if stmt is not None else select(self.model)
        base = self._apply_filters(base, filters)

        try:
            total = self.db.execute(
                select(func.count()).select_from(base.order_by(None).subquery())
            ).scalar_one()
            items = self.db.execute(
                base.order_by(*self._order_clauses(sort_by, order))
                .offset((page - 1) * limit)
                .limit(limit)
            ).scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Error listing {self.entity_name}: {e}")
            raise DatabaseError(f"Error fetching {self.entity_name.lower()} records")

        return {
            "items": list(items),
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit) if total else 0,
            "has_next": page * limit < total,
            "has_previous": page > 1,
        }

    def find_many(self, filters: Optional[Dict[str, Any]] = None, stmt=None) -> List[T]:
        """Unpaginated listing in default order"""
        base = stmt if stmt is not None else select(self.model)
        base = self._apply_filters(base, filters)
        return list(self.db.execute(base.order_by(*self._order_clauses())).scalars().all())

    def find_by_id(self, id: Any) -> Optional[T]:
        return self.db.get(self.model, id)

    def get_or_404(self, id: Any) -> T:
        obj = self.find_by_id(id)
        if obj is None:
            raise NotFoundError(f"{self.entity_name} not found")
        return obj

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        stmt = self._apply_filters(select(func.count()).select_from(self.model), filters)
        return self.db.execute(stmt).scalar_one()

    def sum(self, column: str, filters: Optional[Dict[str, Any]] = None) -> float:
        stmt = select(func.coalesce(func.sum(getattr(self.model, column)), 0)).select_from(self.model)
        stmt = self._apply_filters(stmt, filters)
        return float(self.db.execute(stmt).scalar_one())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def create(self, data: Dict[str, Any]) -> T:
        obj = self.model(**data)

        def _create():
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
            return obj

        created = self._run("create", _create)
        logger.info(f"{self.entity_name} created: {created.id}")
        return created

    def update(self, id: Any, data: Dict[str, Any]) -> T:
        obj = self.get_or_404(id)
        if not data:
            return obj

        def _update():
            for key, value in data.items():
                setattr(obj, key, value)
            self.db.commit()
            self.db.refresh(obj)
            return obj

        updated = self._run("update", _update)
        logger.info(f"{self.entity_name} updated: {id}")
        return updated

    def delete(self, id: Any) -> bool:
        obj = self.find_by_id(id)
        if obj is None:
            return False

        def _delete():
            self.db.delete(obj)
            self.db.commit()
            return True

        self._run("delete", _delete)
        logger.info(f"{self.entity_name} deleted: {id}")
        return True

    def delete_or_404(self, id: Any) -> None:
        if not self.delete(id):
            raise NotFoundError(f"{self.entity_name} not found")


def _as_datetime(value: Any, end_of_day: bool = False) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.max if end_of_day else time.min)
    parsed = datetime.fromisoformat(str(value))
    if end_of_day and len(str(value)) <= 10:
        parsed = datetime.combine(parsed.date(), time.max)
    return parsed
