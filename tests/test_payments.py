# tests/test_payments.py
import uuid
from datetime import date, timedelta

import pytest

from app.core.errors import ValidationError
from app.models import Payment
from app.services.payment_service import PaymentService, line_status, to_decimal

SESSION = "2024/2025"
TERM = "1st Term"


@pytest.fixture
def items(client, admin_headers):
    created = []
    for name, amount, classes in (("Tuition", 50000, []), ("Lab Fee", 5000, ["JSS1"]), ("Bus", 3000, ["SS1"])):
        response = client.post("/api/payments/items", json={
            "name": name,
            "amount": amount,
            "term": TERM,
            "session": SESSION,
            "classes": classes,
            "mandatory": name == "Tuition",
        }, headers=admin_headers)
        assert response.status_code == 201
        created.append(response.json())
    return created


def payment_payload(student, **overrides):
    return {
        "student_id": str(student.id),
        "amount": 1000,
        "description": "Exam fee",
        "due_date": (date.today() + timedelta(days=3)).isoformat(),
        **overrides,
    }


def test_line_status():
    assert line_status(to_decimal(0), to_decimal(100)) == "unpaid"
    assert line_status(to_decimal(40), to_decimal(100)) == "partial"
    assert line_status(to_decimal(100), to_decimal(100)) == "paid"


def test_payments_are_admin_only(client, teacher_headers):
    response = client.get("/api/payments/", headers=teacher_headers)
    assert response.status_code == 403


def test_create_simple_payment(client, admin_headers, students):
    response = client.post("/api/payments/", json=payment_payload(students[0]), headers=admin_headers)
    assert response.status_code == 201
    assert response.json()["amount"] == 1000
    assert response.json()["status"] == "pending"
    assert response.json()["lines"] == []


def test_payment_requires_description_without_lines(client, admin_headers, students):
    payload = payment_payload(students[0])
    del payload["description"]
    response = client.post("/api/payments/", json=payload, headers=admin_headers)
    assert response.status_code == 400


def test_payment_for_unknown_student(client, admin_headers):
    response = client.post("/api/payments/", json={
        "student_id": str(uuid.uuid4()),
        "description": "Ghost",
        "due_date": date.today().isoformat(),
    }, headers=admin_headers)
    assert response.status_code == 404


def test_payment_lines_allocate_amount(client, admin_headers, students, items):
    response = client.post("/api/payments/", json={
        "student_id": str(students[0].id),
        "due_date": date.today().isoformat(),
        "status": "paid",
        "payment_date": date.today().isoformat(),
        "amount": 999999,
        "lines": [
            {"item_id": items[0]["id"], "paid_amount": 20000},
            {"item_id": items[1]["id"], "paid_amount": 9000},
        ],
    }, headers=admin_headers)

    body = response.json()
    assert body["amount"] == 25000
    assert body["description"] == "Tuition, Lab Fee"
    assert [(line["paid_amount"], line["status"]) for line in body["lines"]] == [(20000, "partial"), (5000, "paid")]


def test_items_filtered_by_class(client, admin_headers, items):
    response = client.get("/api/payments/items", params={"class_name": "JSS1"}, headers=admin_headers)
    assert sorted(item["name"] for item in response.json()) == ["Lab Fee", "Tuition"]


def test_student_summary(client, admin_headers, students, items):
    client.post("/api/payments/", json={
        "student_id": str(students[0].id),
        "due_date": date.today().isoformat(),
        "term": TERM,
        "session": SESSION,
        "lines": [{"item_id": items[0]["id"], "paid_amount": 50000}],
    }, headers=admin_headers)
    client.post("/api/payments/", json=payment_payload(
        students[0], term=TERM, session=SESSION, status="canceled", amount=5000,
    ), headers=admin_headers)

    summary = client.get(
        f"/api/students/{students[0].id}/payment-summary",
        params={"session": SESSION, "term": TERM},
        headers=admin_headers,
    ).json()

    assert summary["total_expected"] == 55000
    assert summary["total_paid"] == 50000
    assert summary["balance"] == 5000
    assert summary["status"] == "partial"


def test_update_payment_replaces_lines(client, admin_headers, students, items):
    created = client.post("/api/payments/", json={
        "student_id": str(students[0].id),
        "due_date": date.today().isoformat(),
        "lines": [{"item_id": items[0]["id"], "paid_amount": 1000}],
    }, headers=admin_headers).json()

    response = client.put(f"/api/payments/{created['id']}", json={
        "lines": [{"item_id": items[1]["id"], "paid_amount": 5000}],
    }, headers=admin_headers)

    body = response.json()
    assert body["amount"] == 5000
    assert [line["name"] for line in body["lines"]] == ["Lab Fee"]


def test_status_queries(client, admin_headers, students):
    today = date.today()
    client.post("/api/payments/", json=payment_payload(students[0]), headers=admin_headers)
    client.post("/api/payments/", json=payment_payload(
        students[1], due_date=(today - timedelta(days=2)).isoformat(),
    ), headers=admin_headers)
    client.post("/api/payments/", json=payment_payload(
        students[2], status="paid", payment_date=today.isoformat(),
    ), headers=admin_headers)

    assert len(client.get("/api/payments/pending", headers=admin_headers).json()) == 1
    assert len(client.get("/api/payments/overdue", headers=admin_headers).json()) == 1
    assert client.get("/api/payments/status/paid", headers=admin_headers).json()["total"] == 1
    assert client.get("/api/payments/status/bogus", headers=admin_headers).status_code == 400
    assert len(client.get("/api/payments/recent", params={"limit": 2}, headers=admin_headers).json()) == 2


def test_statistics(client, admin_headers, students):
    today = date.today()
    client.post("/api/payments/", json=payment_payload(
        students[0], status="paid", payment_date=today.isoformat(), amount=2500,
    ), headers=admin_headers)

    stats = client.get("/api/payments/statistics", params={"period": "year"}, headers=admin_headers).json()
    assert stats["total_payments"] == 1
    assert stats["status_counts"]["paid"] == {"count": 1, "total": 2500}
    assert stats["monthly_totals"][today.month - 1]["total"] == 2500
    assert len(stats["monthly_totals"]) == 12

    assert client.get("/api/payments/statistics", params={"period": "decade"}, headers=admin_headers).status_code == 400


def test_import_payments(client, admin_headers, students):
    response = client.post("/api/payments/import", json={"rows": [
        payment_payload(students[0]),
        {"student_id": str(students[1].id), "amount": 10},
        payment_payload(students[1], student_id=str(uuid.uuid4())),
    ]}, headers=admin_headers)

    body = response.json()
    assert body["imported"] == 1
    assert body["message"] == "Successfully imported 1 of 3 payments"
    assert body["results"][2]["error"] == "Student not found"


def test_export_formats(client, admin_headers, students):
    client.post("/api/payments/", json=payment_payload(students[0]), headers=admin_headers)

    csv_response = client.get("/api/payments/export", headers=admin_headers)
    assert csv_response.headers["content-type"].startswith("text/csv")
    assert csv_response.text.splitlines()[0] == (
        "id,student_id,amount,description,payment_date,due_date,status,created_at,updated_at"
    )

    rows = client.get("/api/payments/export", params={"format": "json"}, headers=admin_headers).json()
    assert rows[0]["description"] == "Exam fee"
    assert rows[0]["amount"] == 1000

    assert client.get("/api/payments/export", params={"format": "xml"}, headers=admin_headers).status_code == 400


def test_delete_payment(client, db, admin_headers, students):
    payment_id = client.post("/api/payments/", json=payment_payload(students[0]), headers=admin_headers).json()["id"]
    response = client.delete(f"/api/payments/{payment_id}", headers=admin_headers)

    assert response.json() == {"message": "Payment deleted successfully"}
    assert db.query(Payment).count() == 0


def test_count_by_status_service(db, students):
    service = PaymentService(db)
    service.create_payment({
        "student_id": students[0].id, "amount": 100, "description": "x", "due_date": date.today(),
    })
    counts = service.count_by_status()
    assert counts["pending"] == {"count": 1, "total": 100.0}
    assert counts["refunded"] == {"count": 0, "total": 0.0}


def test_export_rejects_unknown_format(db):
    with pytest.raises(ValidationError, match="Invalid format"):
        PaymentService(db).export_payments("xlsx")
