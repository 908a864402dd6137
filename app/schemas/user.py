# app/schemas/user.py
from pydantic import BaseModel, EmailStr, validator
from typing import Optional, Literal
from datetime import datetime
from uuid import UUID

Role = Literal['admin', 'teacher', 'student']
AccountStatus = Literal['active', 'inactive']


class UserCreate(BaseModel):
    name: str
    email: EmailStr
    password: str
    role: Role = 'student'
    status: AccountStatus = 'active'
    linked_id: Optional[UUID] = None

    @validator('name')
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError('Name cannot be empty')
        return v.strip()


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    role: Optional[Role] = None
    status: Optional[AccountStatus] = None
    linked_id: Optional[UUID] = None

    @validator('name')
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Name cannot be empty')
        return v.strip() if v else v


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None

    @validator('name')
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Name cannot be empty')
        return v.strip() if v else v


class UserOut(BaseModel):
    id: UUID
    name: str
    email: str
    role: str
    status: str
    linked_id: Optional[UUID] = None
    last_login: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True
