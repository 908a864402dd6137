# tests/conftest.py - Shared fixtures: in-memory database, API client and role users
import os

# Settings are read at import time
os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.cache import cache
from app.core.db import get_db
from app.main import app
from app.models import Base, Student, Subject
from app.services.auth_service import AuthService

PASSWORD = "password123"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    cache.clear()
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        cache.clear()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _user(db, role, email, linked_id=None):
    return AuthService(db).create_user(
        email=email,
        name=f"{role.title()} User",
        password=PASSWORD,
        role=role,
        linked_id=linked_id,
    )


def _headers(db, user):
    token = AuthService(db).create_access_token_for_user(user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(db):
    return _user(db, "admin", "admin@example.com")


@pytest.fixture
def teacher_user(db):
    return _user(db, "teacher", "teacher@example.com")


@pytest.fixture
def admin_headers(db, admin):
    return _headers(db, admin)


@pytest.fixture
def teacher_headers(db, teacher_user):
    return _headers(db, teacher_user)


@pytest.fixture
def subjects(db):
    rows = [
        Subject(code="MTH", title="Mathematics", sort_order=1),
        Subject(code="ENG", title="English", sort_order=2),
    ]
    db.add_all(rows)
    db.commit()
    return rows


@pytest.fixture
def students(db):
    rows = [
        Student(name="Ada Obi", class_name="JSS1", registration_number="REG001"),
        Student(name="Bayo Ade", class_name="JSS1", registration_number="REG002"),
        Student(name="Chika Eze", class_name="JSS1", registration_number="REG003"),
    ]
    db.add_all(rows)
    db.commit()
    return rows


@pytest.fixture
def student_user(db, students):
    return _user(db, "student", "ada@example.com", linked_id=students[0].id)


@pytest.fixture
def student_headers(db, student_user):
    return _headers(db, student_user)
