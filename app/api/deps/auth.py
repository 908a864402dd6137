# app/api/deps/auth.py - Bearer authentication and role-based authorization
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.core.db import get_db
from app.core.errors import ForbiddenError, UnauthorizedError
from app.core.security import decode_token
from app.models.user import User, UserRole
from uuid import UUID
from typing import Dict, Any, List, Optional

# Missing credentials are rejected in get_current_user
security = HTTPBearer(auto_error=False)


def _load_user(token: str, db: Session) -> Dict[str, Any]:
    claims = decode_token(token)

    user_id_str = claims.get("sub")
    if not user_id_str:
        raise UnauthorizedError("Token missing user ID")

    try:
        user_uuid = UUID(user_id_str)
    except ValueError:
        raise UnauthorizedError("Invalid user ID format")

    user = db.get(User, user_uuid)
    if not user:
        raise UnauthorizedError("User not found")

    if not user.is_active:
        raise UnauthorizedError("Account is disabled")

    return {
        "user": user,
        "claims": claims
    }


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Decode JWT and return user + claims.
    Returns: {"user": User, "claims": dict}
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Authentication required")
    return _load_user(credentials.credentials, db)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Optional[Dict[str, Any]]:
    """Same as get_current_user, but anonymous requests get None"""
    if credentials is None or not credentials.credentials:
        return None
    return _load_user(credentials.credentials, db)


def require_roles(required_roles: List[str]):
    """
    Create a dependency that requires specific roles.
    Usage: @router.get("/x", dependencies=[Depends(require_roles(["teacher"]))])
    """
    def role_checker(ctx = Depends(get_current_user)):
        user = ctx["user"]
        if not user.has_any_role(required_roles):
            raise ForbiddenError(f"Access denied. Required roles: {', '.join(required_roles)}")
        return ctx
    return role_checker


def require_admin(ctx = Depends(get_current_user)):
    """Require admin role"""
    user = ctx["user"]
    if not user.is_admin():
        raise ForbiddenError("Admin access required")
    return ctx


def require_teacher(ctx = Depends(get_current_user)):
    """Require teacher role or admin"""
    user = ctx["user"]
    if not user.has_any_role([UserRole.TEACHER.value]):
        raise ForbiddenError("Teacher access required")
    return ctx


def ensure_student_access(ctx: Dict[str, Any], student_id: UUID) -> None:
    """Students may only read the student record their login is linked to"""
    user = ctx["user"]
    if user.role == UserRole.STUDENT.value and (user.linked_id is None or user.linked_id != student_id):
        raise ForbiddenError("You can only access your own records")
