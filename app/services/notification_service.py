# app/services/notification_service.py - Per-user notifications
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, select, update

from app.core.errors import AppError, ForbiddenError, NotFoundError
from app.models.base import utcnow
from app.models.notification import Notification
from app.models.user import User
from app.services.base_service import BaseService

logger = logging.getLogger(__name__)


class NotificationService(BaseService[Notification]):
    model = Notification
    entity_name = "Notification"

    def list_for_user(
        self,
        user_id: UUID,
        is_read: Optional[bool] = None,
        type: Optional[str] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        return self.find_all(
            page=page,
            limit=limit,
            filters={"user_id": user_id, "is_read": is_read, "type": type},
        )

    def create_notification(self, data: Dict[str, Any]) -> Notification:
        if self.db.get(User, data["user_id"]) is None:
            raise NotFoundError("User not found")
        return self.create(data)

    def send_to_multiple(self, user_ids: List[UUID], payload: Dict[str, Any]) -> Dict[str, Any]:
        sent, failed = [], []
        for user_id in user_ids:
            try:
                notification = self.create_notification({**payload, "user_id": user_id})
                sent.append(str(notification.id))
            except AppError as e:
                failed.append({"user_id": str(user_id), "error": e.message})

        logger.info(f"Notification '{payload.get('title')}' sent to {len(sent)} of {len(user_ids)} users")
        return {"sent": len(sent), "failed": len(failed), "ids": sent, "errors": failed}

    def get_for_user(self, id: UUID, user: User) -> Notification:
        notification = self.get_or_404(id)
        if notification.user_id != user.id and not user.is_admin():
            raise ForbiddenError("You do not have access to this notification")
        return notification

    def delete_for_user(self, id: UUID, user: User) -> None:
        self.get_for_user(id, user)
        self.delete(id)

    def mark_as_read(self, id: UUID, user: User) -> Notification:
        notification = self.get_for_user(id, user)
        if notification.is_read:
            return notification
        return self.update(id, {"is_read": True, "read_at": utcnow()})

    def mark_all_as_read(self, user_id: UUID) -> int:
        def _mark():
            count = self.db.execute(
                update(Notification)
                .where(Notification.user_id == user_id, Notification.is_read.is_(False))
                .values(is_read=True, read_at=utcnow())
            ).rowcount
            self.db.commit()
            return count

        count = self._run("update", _mark)
        logger.info(f"Marked {count} notifications as read for user {user_id}")
        return count

    def count_unread(self, user_id: UUID) -> int:
        return self.db.execute(
            select(func.count()).select_from(Notification).where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
        ).scalar_one()
