# app/schemas/auth.py
from pydantic import BaseModel, validator

from app.schemas.user import UserOut


class LoginIn(BaseModel):
    email: str
    password: str

    @validator('email')
    def validate_email(cls, v):
        if not v or not v.strip():
            raise ValueError('Email is required')
        return v.strip().lower()

    class Config:
        json_schema_extra = {
            "example": {
                "email": "admin@school.com",
                "password": "change-me-123"
            }
        }


class LoginOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserOut


class ChangePasswordIn(BaseModel):
    current_password: str
    new_password: str

    @validator('new_password')
    def validate_new_password(cls, v):
        if len(v) < 8:
            raise ValueError('New password must be at least 8 characters long')
        return v
