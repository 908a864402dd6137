# app/schemas/common.py - Shared response envelopes
from pydantic import BaseModel
from typing import Generic, List, TypeVar

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_previous: bool


class MessageOut(BaseModel):
    message: str


class ImportRowOut(BaseModel):
    row: int
    success: bool
    id: str | None = None
    error: str | None = None


class ImportOut(BaseModel):
    success: bool
    imported: int
    total: int
    results: List[ImportRowOut]
    message: str
