# app/api/routers/users.py - Own profile and admin user management
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from sqlalchemy import select, or_
from typing import Dict, Any, Optional
from uuid import UUID
import logging

from app.core.db import get_db
from app.core.errors import ValidationError
from app.api.deps.auth import get_current_user, require_admin
from app.models.user import User
from app.services.auth_service import AuthService
from app.schemas.auth import ChangePasswordIn
from app.schemas.common import Page, MessageOut
from app.schemas.user import UserOut, UserCreate, UserUpdate, ProfileUpdate

logger = logging.getLogger(__name__)
router = APIRouter()


# ==================== OWN PROFILE ====================

@router.get("/profile", response_model=UserOut)
async def get_profile(ctx: Dict[str, Any] = Depends(get_current_user)):
    return ctx["user"]


@router.put("/profile", response_model=UserOut)
async def update_profile(
    data: ProfileUpdate,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return AuthService(db).update_profile(ctx["user"], data.model_dump(exclude_unset=True))


@router.post("/change-password", response_model=MessageOut)
async def change_password(
    data: ChangePasswordIn,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    AuthService(db).change_password(ctx["user"], data.current_password, data.new_password)
    return {"message": "Password changed successfully"}


# ==================== USER MANAGEMENT ====================

@router.get("/", response_model=Page[UserOut])
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    sort_by: Optional[str] = Query(None),
    order: str = Query("asc"),
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List all users with pagination and filtering"""
    query = select(User)
    if search:
        search_term = f"%{search}%"
        query = query.where(or_(User.email.ilike(search_term), User.name.ilike(search_term)))

    return AuthService(db).find_all(
        page=page,
        limit=limit,
        sort_by=sort_by or "created_at",
        order=order if sort_by else "desc",
        filters={"role": role, "status": status_filter},
        stmt=query,
    )


@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: UUID,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return AuthService(db).get_or_404(user_id)


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return AuthService(db).create_user(**data.model_dump())


@router.put("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return AuthService(db).update_user(user_id, data.model_dump(exclude_unset=True))


@router.delete("/{user_id}", response_model=MessageOut)
async def delete_user(
    user_id: UUID,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    if ctx["user"].id == user_id:
        raise ValidationError("You cannot delete your own account")

    AuthService(db).delete_or_404(user_id)
    return {"message": "User deleted successfully"}
