# app/schemas/payment.py
from pydantic import BaseModel, Field, validator
from typing import Optional, List, Literal
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

PaymentStatus = Literal['pending', 'paid', 'overdue', 'canceled', 'refunded']
PaymentMethod = Literal['cash', 'credit_card', 'bank_transfer', 'check', 'online', 'other']


class PaymentLineIn(BaseModel):
    item_id: UUID
    paid_amount: Decimal = Field(default=Decimal("0"), ge=0)


class PaymentCreate(BaseModel):
    student_id: UUID
    amount: Decimal = Field(default=Decimal("0"), ge=0)
    description: Optional[str] = Field(default=None, max_length=255)
    payment_date: Optional[date] = None
    due_date: date
    status: PaymentStatus = 'pending'
    payment_method: PaymentMethod = 'cash'
    reference: Optional[str] = None
    term: Optional[str] = None
    session: Optional[str] = None
    notes: Optional[str] = None
    lines: Optional[List[PaymentLineIn]] = None

    @validator('description')
    def validate_description(cls, v):
        return v.strip() if v else v

    @validator('lines', always=True)
    def require_description_or_lines(cls, v, values):
        if not v and not values.get('description'):
            raise ValueError('Description is required')
        return v


class PaymentUpdate(BaseModel):
    student_id: Optional[UUID] = None
    amount: Optional[Decimal] = Field(default=None, ge=0)
    description: Optional[str] = Field(default=None, max_length=255)
    payment_date: Optional[date] = None
    due_date: Optional[date] = None
    status: Optional[PaymentStatus] = None
    payment_method: Optional[PaymentMethod] = None
    reference: Optional[str] = None
    term: Optional[str] = None
    session: Optional[str] = None
    notes: Optional[str] = None
    lines: Optional[List[PaymentLineIn]] = None


class PaymentLineOut(BaseModel):
    id: UUID
    item_id: UUID
    name: str
    amount: float
    paid_amount: float
    status: str

    class Config:
        from_attributes = True


class PaymentOut(BaseModel):
    id: UUID
    student_id: UUID
    amount: float
    description: str
    payment_date: Optional[date]
    due_date: date
    status: str
    payment_method: str
    reference: Optional[str]
    term: Optional[str]
    session: Optional[str]
    notes: Optional[str]
    lines: List[PaymentLineOut] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PaymentImportIn(BaseModel):
    rows: List[dict]


class PaymentItemCreate(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    amount: Decimal = Field(ge=0)
    category: str = 'other'
    description: Optional[str] = None
    mandatory: bool = False
    term: str
    session: str
    classes: List[str] = []

    @validator('name')
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('Name cannot be empty')
        return v.strip()


class PaymentItemUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=128)
    amount: Optional[Decimal] = Field(default=None, ge=0)
    category: Optional[str] = None
    description: Optional[str] = None
    mandatory: Optional[bool] = None
    term: Optional[str] = None
    session: Optional[str] = None
    classes: Optional[List[str]] = None


class PaymentItemOut(BaseModel):
    id: UUID
    name: str
    amount: float
    category: str
    description: Optional[str]
    mandatory: bool
    term: str
    session: str
    classes: Optional[List[str]]
    created_at: datetime

    class Config:
        from_attributes = True
