# app/services/auth_service.py - Authentication and account management
from sqlalchemy.orm import Session
from sqlalchemy import select
from typing import Optional, Dict, Any
import logging

from app.core.errors import ConflictError, UnauthorizedError, ValidationError
from app.core.security import (
    hash_password,
    verify_password,
    create_access_token,
    password_manager,
)
from app.models.base import utcnow
from app.models.user import User
from app.services.base_service import BaseService

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "email")


class AuthService(BaseService[User]):
    """Service class for authentication operations"""

    model = User
    entity_name = "User"

    def __init__(self, db: Session):
        super().__init__(db)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.execute(
            select(User).where(User.email == email.lower().strip())
        ).scalar_one_or_none()

    def _check_password(self, password: str) -> None:
        check = password_manager.validate_password_strength(password)
        if not check["valid"]:
            raise ValidationError("; ".join(check["feedback"]))

    def create_user(
        self,
        email: str,
        name: str,
        password: str,
        role: str = "student",
        status: str = "active",
        linked_id=None,
    ) -> User:
        """
        Create a new user account

        Args:
            email: User email (will be lowercased)
            name: Display name
            password: Plain text password (will be hashed)
            role: admin, teacher or student
            linked_id: Student or teacher record the login belongs to

        Returns:
            Created User object

        Raises:
            ConflictError: If a user with this email already exists
            ValidationError: If the password is too weak
        """
        email = email.lower().strip()
        if self.get_by_email(email):
            raise ConflictError("User with this email already exists")
        self._check_password(password)

        return self.create({
            "email": email,
            "name": name.strip(),
            "password_hash": hash_password(password),
            "role": role,
            "status": status,
            "linked_id": linked_id,
        })

    def update_user(self, id, data: Dict[str, Any]) -> User:
        """Admin update; a ``password`` key is re-hashed"""
        data = dict(data)
        if data.get("email"):
            data["email"] = data["email"].lower().strip()
            existing = self.get_by_email(data["email"])
            if existing and existing.id != id:
                raise ConflictError("User with this email already exists")
        if data.get("password"):
            self._check_password(data["password"])
            data["password_hash"] = hash_password(data.pop("password"))
        data.pop("password", None)
        return self.update(id, data)

    def update_profile(self, user: User, data: Dict[str, Any]) -> User:
        """Self-service update; role, status and password are never touched here"""
        changes = {key: value for key, value in data.items() if key in PROFILE_FIELDS and value is not None}
        return self.update_user(user.id, changes)

    def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.password_hash):
            raise UnauthorizedError("Current password is incorrect")
        self._check_password(new_password)

        user.password_hash = hash_password(new_password)
        self._run("update", self.db.commit)
        logger.info(f"Password changed for: {user.email}")

    def authenticate(self, email: str, password: str) -> User:
        """
        Authenticate user with email and password

        Raises:
            UnauthorizedError: unknown email, wrong password or disabled account
        """
        user = self.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.info(f"Failed login attempt for: {email}")
            raise UnauthorizedError("Invalid email or password")

        if not user.is_active:
            raise UnauthorizedError("Account is disabled")

        user.last_login = utcnow()
        self._run("update", self.db.commit)

        logger.info(f"User authenticated: {user.email}")
        return user

    def create_access_token_for_user(self, user: User) -> str:
        return create_access_token(
            subject=user.id,
            additional_claims={"email": user.email, "role": user.role},
        )
