# app/api/routers/feeds.py - Announcements
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import Dict, Any, Optional
from datetime import datetime
from uuid import UUID
import logging

from app.core.db import get_db
from app.api.deps.auth import get_current_user, get_optional_user
from app.services.feed_service import FeedService
from app.schemas.common import Page, MessageOut
from app.schemas.feed import FeedCreate, FeedUpdate, FeedOut

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=Page[FeedOut])
async def list_feeds(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: Optional[str] = Query(None),
    target_type: Optional[str] = Query(None),
    from_date: Optional[datetime] = Query(None),
    to_date: Optional[datetime] = Query(None),
    ctx: Optional[Dict[str, Any]] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """Pinned first, newest first; signed-in users only see feeds aimed at them"""
    return FeedService(db).list_feeds(
        user=ctx["user"] if ctx else None,
        category=category,
        target_type=target_type,
        from_date=from_date,
        to_date=to_date,
        page=page,
        limit=limit,
    )


@router.post("/", response_model=FeedOut, status_code=status.HTTP_201_CREATED)
async def create_feed(
    data: FeedCreate,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = FeedService(db)
    feed = service.create_feed(data.model_dump(), ctx["user"])
    return service.serialize(feed, ctx["user"])


@router.post("/read-all")
async def mark_all_read(
    category: Optional[str] = Query(None),
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    count = FeedService(db).mark_all_as_read(ctx["user"], category)
    return {"message": f"Marked {count} feeds as read", "count": count}


@router.get("/{feed_id}", response_model=FeedOut)
async def get_feed(
    feed_id: UUID,
    ctx: Optional[Dict[str, Any]] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    user = ctx["user"] if ctx else None
    service = FeedService(db)
    return service.serialize(service.get_feed(feed_id, user), user)


@router.put("/{feed_id}", response_model=FeedOut)
async def update_feed(
    feed_id: UUID,
    data: FeedUpdate,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = FeedService(db)
    feed = service.update_feed(feed_id, data.model_dump(exclude_unset=True), ctx["user"])
    return service.serialize(feed, ctx["user"])


@router.delete("/{feed_id}", response_model=MessageOut)
async def delete_feed(
    feed_id: UUID,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    FeedService(db).delete_feed(feed_id, ctx["user"])
    return {"message": "Feed deleted successfully"}


@router.post("/{feed_id}/read", response_model=FeedOut)
async def mark_read(
    feed_id: UUID,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = FeedService(db)
    feed = service.mark_as_read(feed_id, ctx["user"])
    return service.serialize(feed, ctx["user"])
