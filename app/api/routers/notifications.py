# app/api/routers/notifications.py - In-app notifications
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import Dict, Any, Optional
from uuid import UUID
import logging

from app.core.db import get_db
from app.api.deps.auth import get_current_user, require_admin
from app.services.notification_service import NotificationService
from app.schemas.common import Page, MessageOut
from app.schemas.notification import (
    NotificationCreate,
    NotificationBroadcast,
    NotificationOut,
    SendResultOut,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=Page[NotificationOut])
async def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    is_read: Optional[bool] = Query(None),
    type: Optional[str] = Query(None),
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Notifications of the current user, newest first"""
    return NotificationService(db).list_for_user(
        ctx["user"].id, is_read=is_read, type=type, page=page, limit=limit
    )


@router.get("/unread-count")
async def unread_count(
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return {"count": NotificationService(db).count_unread(ctx["user"].id)}


@router.put("/read-all")
async def mark_all_read(
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    count = NotificationService(db).mark_all_as_read(ctx["user"].id)
    return {"message": f"Marked {count} notifications as read", "count": count}


@router.post("/", response_model=NotificationOut, status_code=status.HTTP_201_CREATED)
async def create_notification(
    data: NotificationCreate,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return NotificationService(db).create_notification(data.model_dump())


@router.post("/send-multiple", response_model=SendResultOut)
async def send_multiple(
    data: NotificationBroadcast,
    ctx: Dict[str, Any] = Depends(require_admin),
    db: Session = Depends(get_db)
):
    payload = data.model_dump(exclude={"user_ids"})
    return NotificationService(db).send_to_multiple(data.user_ids, payload)


@router.get("/{notification_id}", response_model=NotificationOut)
async def get_notification(
    notification_id: UUID,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return NotificationService(db).get_for_user(notification_id, ctx["user"])


@router.put("/{notification_id}/read", response_model=NotificationOut)
async def mark_read(
    notification_id: UUID,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return NotificationService(db).mark_as_read(notification_id, ctx["user"])


@router.delete("/{notification_id}", response_model=MessageOut)
async def delete_notification(
    notification_id: UUID,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    NotificationService(db).delete_for_user(notification_id, ctx["user"])
    return {"message": "Notification deleted successfully"}
