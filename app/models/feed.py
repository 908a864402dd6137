# app/models/feed.py - Broadcast announcements and per-user read receipts
from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import String, Text, Boolean, DateTime, ForeignKey, JSON, CheckConstraint, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import Base, utcnow

FEED_TARGETS = ("all", "admin", "teacher", "student")


class Feed(Base):
    __tablename__ = "feeds"
    __default_order__ = ("-is_pinned", "-publish_date")

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False, default="general")
    target_type: Mapped[str] = mapped_column(String(16), nullable=False, default="all")
    # Restricts the audience to these user ids when set
    target_ids: Mapped[list | None] = mapped_column(JSON(none_as_null=True))
    publish_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, index=True)
    expiry_date: Mapped[datetime | None] = mapped_column(DateTime)
    is_pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    author_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), index=True
    )
    extra_data: Mapped[dict | None] = mapped_column("metadata", JSON)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    reads: Mapped[list["FeedRead"]] = relationship(
        "FeedRead", back_populates="feed", cascade="all, delete-orphan", lazy="selectin"
    )

    __table_args__ = (
        CheckConstraint("target_type IN ('all','admin','teacher','student')", name="ck_feed_target_type"),
    )

    @property
    def read_by_users(self) -> list[str]:
        return [str(read.user_id) for read in self.reads]

    @property
    def read_count(self) -> int:
        return len(self.reads)


class FeedRead(Base):
    __tablename__ = "feed_reads"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    feed_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("feeds.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    read_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    feed: Mapped["Feed"] = relationship("Feed", back_populates="reads")

    __table_args__ = (
        UniqueConstraint("feed_id", "user_id", name="uq_feed_read_user"),
    )
