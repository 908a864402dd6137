# app/api/routers/auth.py - Login, logout and current user
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Dict, Any
import logging

from app.core.config import settings
from app.core.db import get_db
from app.api.deps.auth import get_current_user
from app.services.auth_service import AuthService
from app.schemas.auth import LoginIn, LoginOut
from app.schemas.common import MessageOut
from app.schemas.user import UserOut

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/login", response_model=LoginOut)
async def login(
    credentials: LoginIn,
    db: Session = Depends(get_db)
):
    """Exchange email and password for a bearer token"""
    service = AuthService(db)
    user = service.authenticate(credentials.email, credentials.password)

    return {
        "access_token": service.create_access_token_for_user(user),
        "token_type": "bearer",
        "expires_in": settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        "user": user,
    }


@router.post("/logout", response_model=MessageOut)
async def logout(ctx: Dict[str, Any] = Depends(get_current_user)):
    """Tokens are stateless; the client discards its copy"""
    logger.info(f"User logged out: {ctx['user'].email}")
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserOut)
async def me(ctx: Dict[str, Any] = Depends(get_current_user)):
    return ctx["user"]
