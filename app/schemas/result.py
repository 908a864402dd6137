# app/schemas/result.py
from pydantic import BaseModel, Field, validator
from typing import Optional, List, Dict, Any, Union
from datetime import datetime
from uuid import UUID

from app.models.result import TERMS


def _check_term(cls, v):
    if v is not None and v not in TERMS:
        raise ValueError(f"Term must be one of: {', '.join(TERMS)}")
    return v


class ResultCreate(BaseModel):
    student_id: UUID
    subject_id: UUID
    class_name: Optional[str] = None
    session: Optional[str] = None
    term: Optional[str] = None
    ca: Optional[float] = None
    test: Optional[float] = None
    exam: Optional[float] = None
    remarks: Optional[str] = None
    published_at: Optional[datetime] = None
    extra_data: Optional[Dict[str, Any]] = None

    validate_term = validator('term', allow_reuse=True)(_check_term)


class ResultUpdate(BaseModel):
    class_name: Optional[str] = None
    session: Optional[str] = None
    term: Optional[str] = None
    ca: Optional[float] = None
    test: Optional[float] = None
    exam: Optional[float] = None
    remarks: Optional[str] = None
    published_at: Optional[datetime] = None
    extra_data: Optional[Dict[str, Any]] = None

    validate_term = validator('term', allow_reuse=True)(_check_term)


class BulkResultRow(BaseModel):
    student_id: UUID
    ca: Optional[float] = None
    test: Optional[float] = None
    exam: Optional[float] = None
    remarks: Optional[str] = None


class BulkResultIn(BaseModel):
    class_name: str = Field(min_length=1)
    subject_id: UUID
    session: str
    term: str
    results: List[BulkResultRow]

    validate_term = validator('term', allow_reuse=True)(_check_term)


class BulkResultOut(BaseModel):
    success: bool
    success_count: int
    total_count: int
    errors: List[Dict[str, Any]]
    message: str


class ImportResultsIn(BaseModel):
    rows: List[Dict[str, Any]]


class RecalculateIn(BaseModel):
    class_name: Optional[str] = None
    session: Optional[str] = None
    term: Optional[str] = None


class ResultOut(BaseModel):
    id: UUID
    student_id: UUID
    subject_id: UUID
    class_name: str
    session: str
    term: str
    ca: float
    test: float
    exam: float
    total: float
    percentage: int
    grade: str
    remark: Optional[str]
    position: Optional[int]
    total_class_score: Optional[float]
    class_average: Optional[float]
    percentile: Optional[int]
    remarks: Optional[str]
    published_at: Optional[datetime]
    recorded_at: datetime
    extra_data: Optional[Dict[str, Any]]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ScoringConfigIn(BaseModel):
    ca: Optional[float] = None
    test: Optional[float] = None
    exam: Optional[float] = None
    total: Optional[float] = None
    pass_mark: Optional[float] = None
    session: Optional[str] = None
    term: Optional[str] = None

    validate_term = validator('term', allow_reuse=True)(_check_term)


class GradeBandIn(BaseModel):
    grade: str
    min: float
    remark: Optional[str] = None


class GradingScaleIn(BaseModel):
    scale: Union[List[GradeBandIn], Dict[str, float]]
    session: Optional[str] = None
    term: Optional[str] = None

    validate_term = validator('term', allow_reuse=True)(_check_term)


class ClassSubjectIn(BaseModel):
    class_name: str = Field(min_length=1, max_length=40)
    subject_id: UUID

    @validator('class_name')
    def validate_class_name(cls, v):
        if not v.strip():
            raise ValueError('Class name cannot be empty')
        return v.strip()
