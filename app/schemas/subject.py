# app/schemas/subject.py
from pydantic import BaseModel, Field, validator
from typing import Optional, Dict, Any, Literal
from datetime import datetime
from uuid import UUID


class SubjectCreate(BaseModel):
    code: str = Field(min_length=1, max_length=20)
    title: str = Field(min_length=1, max_length=150)
    description: Optional[str] = None
    department: Optional[str] = None
    level: Optional[str] = None
    credits: int = Field(default=0, ge=0)
    schedule: Optional[Dict[str, Any]] = None
    sort_order: int = 0
    status: Literal['active', 'inactive'] = 'active'

    @validator('code')
    def validate_code(cls, v):
        if not v or not v.strip():
            raise ValueError('Subject code cannot be empty')
        return v.strip().upper()

    @validator('title')
    def validate_title(cls, v):
        if not v or not v.strip():
            raise ValueError('Subject title cannot be empty')
        return v.strip()


class SubjectUpdate(BaseModel):
    code: Optional[str] = Field(default=None, min_length=1, max_length=20)
    title: Optional[str] = Field(default=None, min_length=1, max_length=150)
    description: Optional[str] = None
    department: Optional[str] = None
    level: Optional[str] = None
    credits: Optional[int] = Field(default=None, ge=0)
    schedule: Optional[Dict[str, Any]] = None
    sort_order: Optional[int] = None
    status: Optional[Literal['active', 'inactive']] = None

    @validator('code')
    def validate_code(cls, v):
        return v.strip().upper() if v else v


class SubjectOut(BaseModel):
    id: UUID
    code: str
    title: str
    description: Optional[str]
    department: Optional[str]
    level: Optional[str]
    credits: int
    schedule: Optional[Dict[str, Any]]
    sort_order: int
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
