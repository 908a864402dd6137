# app/schemas/teacher.py
from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional, List, Literal
from datetime import date, datetime
from uuid import UUID

from app.schemas.student import SubjectBrief


class TeacherCreate(BaseModel):
    name: str = Field(min_length=2, max_length=150)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    qualification: Optional[str] = None
    experience: int = Field(default=0, ge=0)
    join_date: Optional[date] = None
    classes: List[str] = []
    status: Literal['active', 'inactive'] = 'active'

    @validator('name')
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError('Name cannot be empty')
        return v.strip()


class TeacherUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=150)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    qualification: Optional[str] = None
    experience: Optional[int] = Field(default=None, ge=0)
    join_date: Optional[date] = None
    classes: Optional[List[str]] = None
    status: Optional[Literal['active', 'inactive']] = None


class TeacherSubjectIn(BaseModel):
    subject_id: UUID


class TeacherOut(BaseModel):
    id: UUID
    name: str
    email: Optional[str]
    phone: Optional[str]
    qualification: Optional[str]
    experience: int
    join_date: Optional[date]
    classes: Optional[List[str]]
    status: str
    subjects: List[SubjectBrief] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
