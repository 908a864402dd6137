# app/services/feed_service.py - Announcements with audience targeting and read receipts
import logging
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import String, cast, or_, select
from sqlalchemy.exc import IntegrityError

from app.core.errors import ForbiddenError
from app.models.base import utcnow
from app.models.feed import Feed, FeedRead
from app.models.user import User
from app.services.base_service import BaseService

logger = logging.getLogger(__name__)


class FeedService(BaseService[Feed]):
    model = Feed
    entity_name = "Feed"

    def _visible_to(self, user: Optional[User]):
        stmt = select(Feed)
        if user is None or user.is_admin():
            return stmt
        # target_ids is a JSON array of id strings
        return stmt.where(
            Feed.target_type.in_(("all", user.role)),
            or_(
                Feed.target_ids.is_(None),
                cast(Feed.target_ids, String).like(f'%"{user.id}"%'),
            ),
        )

    @staticmethod
    def _targets(feed: Feed, user: Optional[User]) -> bool:
        if user is None or user.is_admin() or not feed.target_ids:
            return True
        return str(user.id) in {str(target) for target in feed.target_ids}

    @staticmethod
    def _normalize_targets(data: Dict[str, Any]) -> Dict[str, Any]:
        if "target_ids" in data:
            targets = data["target_ids"]
            data = {**data, "target_ids": [str(target) for target in targets] if targets else None}
        return data

    def serialize(self, feed: Feed, user: Optional[User] = None) -> Dict[str, Any]:
        data = {
            "id": str(feed.id),
            "title": feed.title,
            "content": feed.content,
            "category": feed.category,
            "target_type": feed.target_type,
            "target_ids": feed.target_ids,
            "publish_date": feed.publish_date,
            "expiry_date": feed.expiry_date,
            "is_pinned": feed.is_pinned,
            "author_id": str(feed.author_id) if feed.author_id else None,
            "metadata": feed.extra_data,
            "read_count": feed.read_count,
            "read_by_users": feed.read_by_users,
            "created_at": feed.created_at,
            "updated_at": feed.updated_at,
        }
        if user is not None:
            data["is_read"] = str(user.id) in data["read_by_users"]
        return data

    def list_feeds(
        self,
        user: Optional[User] = None,
        category: Optional[str] = None,
        target_type: Optional[str] = None,
        from_date=None,
        to_date=None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Feeds visible to ``user`` (everything when anonymous or admin), pinned
        first then newest. Totals count only the feeds the user can see.
        """
        stmt = self._visible_to(user)
        if from_date is not None:
            stmt = stmt.where(Feed.publish_date >= from_date)
        if to_date is not None:
            stmt = stmt.where(Feed.publish_date <= to_date)

        page_data = self.find_all(
            page=page,
            limit=limit,
            filters={"category": category, "target_type": target_type},
            stmt=stmt,
        )
        page_data["items"] = [self.serialize(feed, user) for feed in page_data["items"]]
        return page_data

    def get_feed(self, id: UUID, user: Optional[User] = None) -> Feed:
        feed = self.get_or_404(id)
        if user is not None and not user.is_admin():
            if feed.target_type not in ("all", user.role) or not self._targets(feed, user):
                raise ForbiddenError("You do not have access to this feed")
        return feed

    def create_feed(self, data: Dict[str, Any], author: User) -> Feed:
        data = self._normalize_targets(dict(data))
        if data.get("publish_date") is None:
            data["publish_date"] = utcnow()
        return self.create({**data, "author_id": author.id})

    def _check_owner(self, feed: Feed, user: User, action: str) -> None:
        if not user.is_admin() and feed.author_id != user.id:
            raise ForbiddenError(f"Only the author or an admin can {action} this feed")

    def update_feed(self, id: UUID, data: Dict[str, Any], user: User) -> Feed:
        feed = self.get_or_404(id)
        self._check_owner(feed, user, "update")
        return self.update(id, self._normalize_targets(data))

    def delete_feed(self, id: UUID, user: User) -> None:
        feed = self.get_or_404(id)
        self._check_owner(feed, user, "delete")
        self.delete(id)

    def mark_as_read(self, id: UUID, user: User) -> Feed:
        feed = self.get_feed(id, user)
        if str(user.id) not in feed.read_by_users:
            try:
                feed.reads.append(FeedRead(user_id=user.id))
                self.db.commit()
            except IntegrityError:
                # Concurrent read of the same feed
                self.db.rollback()
            self.db.refresh(feed)
        return feed

    def mark_all_as_read(self, user: User, category: Optional[str] = None) -> int:
        """Mark every visible feed read; returns how many were newly read"""
        stmt = self._visible_to(user).where(
            or_(Feed.expiry_date.is_(None), Feed.expiry_date > utcnow())
        )
        if category:
            stmt = stmt.where(Feed.category == category)

        marked = 0
        for feed in self.db.execute(stmt).scalars().all():
            if str(user.id) not in feed.read_by_users:
                feed.reads.append(FeedRead(user_id=user.id))
                marked += 1
        self._run("update", self.db.commit)

        logger.info(f"User {user.id} marked {marked} feeds as read")
        return marked
