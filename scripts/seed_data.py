#!/usr/bin/env python3
# scripts/seed_data.py - Create the first admin and a small demo school
import sys
import os
import argparse
from datetime import date, timedelta

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.config import settings
from app.core.db import db_manager, get_engine
from app.core.errors import ConflictError
from app.core.logging import setup_logging
from app.models import Base, Student, Subject, Teacher, PaymentItem
from app.services.auth_service import AuthService
from app.services.payment_service import PaymentService
from app.services.result_service import ResultService

SUBJECTS = [
    ("MTH101", "Mathematics", "Sciences"),
    ("ENG101", "English Language", "Languages"),
    ("BIO101", "Biology", "Sciences"),
]

STUDENTS = [
    ("Ada Obi", "JSS1A", "REG/2024/001", (9, 18, 62)),
    ("Bayo Ade", "JSS1A", "REG/2024/002", (7, 15, 55)),
    ("Chika Eze", "JSS1A", "REG/2024/003", (9, 18, 62)),
]


def seed_admin(db) -> None:
    if not settings.FIRST_ADMIN_PASSWORD:
        print("⚠️  FIRST_ADMIN_PASSWORD is not set, skipping admin account")
        return
    try:
        user = AuthService(db).create_user(
            email=settings.FIRST_ADMIN_EMAIL,
            name=settings.FIRST_ADMIN_NAME,
            password=settings.FIRST_ADMIN_PASSWORD,
            role="admin",
        )
        print(f"✅ Admin created: {user.email}")
    except ConflictError:
        print(f"ℹ️  Admin {settings.FIRST_ADMIN_EMAIL} already exists")


def seed_demo(db) -> None:
    if db.query(Subject).count():
        print("ℹ️  Demo data already present, skipping")
        return

    subjects = []
    for index, (code, title, department) in enumerate(SUBJECTS):
        subject = Subject(code=code, title=title, department=department, credits=3, sort_order=index)
        db.add(subject)
        subjects.append(subject)

    teacher = Teacher(name="Grace Okafor", email="grace.okafor@example.com", experience=6, classes=["JSS1A"])
    teacher.subjects = subjects[:2]
    db.add(teacher)

    students = []
    for name, class_name, reg, _ in STUDENTS:
        student = Student(
            name=name,
            class_name=class_name,
            registration_number=reg,
            enrollment_date=date.today(),
        )
        student.subjects = list(subjects)
        db.add(student)
        students.append(student)

    item = PaymentItem(
        name="Tuition",
        amount=50000,
        category="tuition",
        mandatory=True,
        term=settings.CURRENT_TERM,
        session=settings.CURRENT_SESSION,
        classes=[],
    )
    db.add(item)
    db.commit()
    print(f"✅ Created {len(subjects)} subjects, 1 teacher, {len(students)} students")

    results = ResultService(db)
    for subject in subjects:
        results.add_class_subject("JSS1A", subject.id)

    rows = []
    for student, (_, _, _, (ca, test, exam)) in zip(students, STUDENTS):
        for subject in subjects:
            rows.append({
                "student_id": student.id,
                "subject_id": subject.id,
                "ca": ca,
                "test": test,
                "exam": exam,
            })
    outcome = results.import_results(rows)
    print(f"✅ {outcome['message']}")

    payments = PaymentService(db)
    payments.create_payment({
        "student_id": students[0].id,
        "due_date": date.today() + timedelta(days=14),
        "payment_date": date.today(),
        "status": "paid",
        "payment_method": "bank_transfer",
        "lines": [{"item_id": item.id, "paid_amount": 50000}],
    })
    payments.create_payment({
        "student_id": students[1].id,
        "description": "Tuition",
        "amount": 50000,
        "due_date": date.today() + timedelta(days=3),
    })
    print("✅ Created 2 payments")


def main():
    parser = argparse.ArgumentParser(description="Seed the school portal database")
    parser.add_argument("--demo", action="store_true", help="Also create demo subjects, students and results")
    parser.add_argument("--create-tables", action="store_true", help="Create tables without running migrations")
    args = parser.parse_args()

    setup_logging()
    print("🌱 Seeding School Portal database")
    print("=" * 40)

    if args.create_tables:
        Base.metadata.create_all(bind=get_engine())
        print("✅ Tables created")

    with db_manager.transaction() as db:
        seed_admin(db)
        if args.demo:
            seed_demo(db)

    print("🎉 Done")


if __name__ == "__main__":
    main()
