# app/models/user.py - Login accounts with a single role
from __future__ import annotations
import enum
import uuid
from datetime import datetime
from sqlalchemy import String, DateTime, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, utcnow


class UserRole(str, enum.Enum):
    """System-wide user roles"""
    ADMIN = "admin"        # Full access
    TEACHER = "teacher"    # Records results, reads class data
    STUDENT = "student"    # Reads own data


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=UserRole.STUDENT.value)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")

    # Student or teacher record this login belongs to
    linked_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    last_login: Mapped[datetime | None] = mapped_column(DateTime)

    __table_args__ = (
        CheckConstraint("role IN ('admin','teacher','student')", name="ck_user_role"),
        CheckConstraint("status IN ('active','inactive')", name="ck_user_status"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def has_role(self, role: str) -> bool:
        """Check if user has a specific role"""
        return self.role == role

    def has_any_role(self, roles: list[str]) -> bool:
        """Check if user has any of the specified roles; admins pass every check"""
        return self.is_admin() or self.role in roles

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role={self.role})>"
