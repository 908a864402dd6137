# app/schemas/student.py
from pydantic import BaseModel, Field, validator
from typing import Optional, List, Literal
from datetime import date, datetime
from uuid import UUID

StudentStatus = Literal['active', 'inactive', 'graduated', 'suspended']


class StudentCreate(BaseModel):
    name: str = Field(min_length=2, max_length=150)
    email: Optional[str] = None
    registration_number: Optional[str] = Field(default=None, max_length=32)
    class_name: Optional[str] = Field(default=None, max_length=40)
    guardian: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    enrollment_date: Optional[date] = None
    status: StudentStatus = 'active'
    subject_ids: Optional[List[UUID]] = None

    @validator('name')
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError('Name cannot be empty')
        return v.strip()

    @validator('registration_number', 'class_name')
    def blank_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v


class StudentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=150)
    email: Optional[str] = None
    registration_number: Optional[str] = Field(default=None, max_length=32)
    class_name: Optional[str] = Field(default=None, max_length=40)
    guardian: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    enrollment_date: Optional[date] = None
    status: Optional[StudentStatus] = None
    subject_ids: Optional[List[UUID]] = None

    @validator('name')
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Name cannot be empty')
        return v.strip() if v else v


class SubjectBrief(BaseModel):
    id: UUID
    code: str
    title: str

    class Config:
        from_attributes = True


class StudentOut(BaseModel):
    id: UUID
    name: str
    email: Optional[str]
    registration_number: Optional[str]
    class_name: Optional[str]
    guardian: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    date_of_birth: Optional[date]
    enrollment_date: Optional[date]
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class StudentDetail(StudentOut):
    subjects: List[SubjectBrief] = []
