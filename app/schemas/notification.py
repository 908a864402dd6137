# app/schemas/notification.py
from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime
from uuid import UUID

NotificationType = Literal['info', 'success', 'warning', 'error']


class NotificationCreate(BaseModel):
    user_id: UUID
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    type: NotificationType = 'info'
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[str] = None


class NotificationBroadcast(BaseModel):
    user_ids: List[UUID] = Field(min_length=1)
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    type: NotificationType = 'info'
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[str] = None


class NotificationOut(BaseModel):
    id: UUID
    user_id: UUID
    title: str
    content: str
    type: str
    related_entity_type: Optional[str]
    related_entity_id: Optional[str]
    is_read: bool
    read_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class SendResultOut(BaseModel):
    sent: int
    failed: int
    ids: List[str]
    errors: List[dict]
