# app/schemas/feed.py
from pydantic import BaseModel, Field, validator
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime
from uuid import UUID

FeedTarget = Literal['all', 'admin', 'teacher', 'student']


class FeedCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    category: str = 'general'
    target_type: FeedTarget = 'all'
    target_ids: Optional[List[UUID]] = None
    publish_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    is_pinned: bool = False
    extra_data: Optional[Dict[str, Any]] = None

    @validator('title', 'content')
    def validate_text(cls, v):
        if not v.strip():
            raise ValueError('Title and content cannot be empty')
        return v.strip()


class FeedUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    target_type: Optional[FeedTarget] = None
    target_ids: Optional[List[UUID]] = None
    publish_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    is_pinned: Optional[bool] = None
    extra_data: Optional[Dict[str, Any]] = None


class FeedOut(BaseModel):
    id: UUID
    title: str
    content: str
    category: str
    target_type: str
    target_ids: Optional[List[str]]
    publish_date: datetime
    expiry_date: Optional[datetime]
    is_pinned: bool
    author_id: Optional[UUID]
    metadata: Optional[Dict[str, Any]] = None
    read_count: int
    read_by_users: List[str]
    is_read: Optional[bool] = None
    created_at: datetime
    updated_at: datetime
