# app/models/__init__.py - Import all models so SQLAlchemy can discover them

from app.models.base import Base

from app.models.user import User, UserRole
from app.models.subject import Subject, ClassSubject, student_subjects, teacher_subjects
from app.models.student import Student
from app.models.teacher import Teacher
from app.models.result import Result, GradingPolicy
from app.models.payment import PaymentItem, Payment, PaymentLine
from app.models.feed import Feed, FeedRead
from app.models.notification import Notification

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Subject",
    "ClassSubject",
    "student_subjects",
    "teacher_subjects",
    "Student",
    "Teacher",
    "Result",
    "GradingPolicy",
    "PaymentItem",
    "Payment",
    "PaymentLine",
    "Feed",
    "FeedRead",
    "Notification",
]
