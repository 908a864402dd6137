# tests/test_feeds.py
from datetime import datetime, timedelta

import pytest


def create_feed(client, headers, **overrides):
    payload = {"title": "Sports Day", "content": "Friday at 10am", "category": "events", **overrides}
    response = client.post("/api/feeds/", json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def feeds(client, admin_headers):
    return {
        "all": create_feed(client, admin_headers),
        "teacher": create_feed(client, admin_headers, title="Staff meeting", target_type="teacher", category="staff"),
        "pinned": create_feed(client, admin_headers, title="Fees reminder", is_pinned=True),
    }


def test_anonymous_sees_everything(client, feeds):
    body = client.get("/api/feeds/").json()
    assert body["total"] == 3
    assert body["items"][0]["title"] == "Fees reminder"
    assert "is_read" not in body["items"][0] or body["items"][0]["is_read"] is None


def test_students_do_not_see_teacher_feeds(client, feeds, student_headers):
    titles = [feed["title"] for feed in client.get("/api/feeds/", headers=student_headers).json()["items"]]
    assert "Staff meeting" not in titles
    assert len(titles) == 2

    response = client.get(f"/api/feeds/{feeds['teacher']['id']}", headers=student_headers)
    assert response.status_code == 403


def test_category_filter(client, feeds, teacher_headers):
    body = client.get("/api/feeds/", params={"category": "staff"}, headers=teacher_headers).json()
    assert [feed["title"] for feed in body["items"]] == ["Staff meeting"]


def test_target_ids_restrict_audience(client, admin_headers, teacher_user, student_user, student_headers):
    create_feed(client, admin_headers, title="Private", target_ids=[str(teacher_user.id)])
    titles = [feed["title"] for feed in client.get("/api/feeds/", headers=student_headers).json()["items"]]
    assert "Private" not in titles


def test_totals_only_count_targeted_feeds(client, admin_headers, teacher_user, student_headers):
    for n in range(3):
        create_feed(client, admin_headers, title=f"Teachers only {n}", target_ids=[str(teacher_user.id)])
    create_feed(client, admin_headers, title="Everyone")

    body = client.get("/api/feeds/", params={"limit": 1}, headers=student_headers).json()
    assert body["total"] == 1
    assert body["total_pages"] == 1
    assert body["has_next"] is False
    assert [feed["title"] for feed in body["items"]] == ["Everyone"]


def test_targeted_user_sees_feed(client, admin_headers, teacher_user, teacher_headers):
    create_feed(client, admin_headers, title="Private", target_ids=[str(teacher_user.id)])
    body = client.get("/api/feeds/", headers=teacher_headers).json()
    assert [feed["title"] for feed in body["items"]] == ["Private"]


def test_empty_target_ids_reach_everyone(client, admin_headers, student_headers):
    feed = create_feed(client, admin_headers, title="Open", target_ids=[])
    assert feed["target_ids"] is None
    assert client.get("/api/feeds/", headers=student_headers).json()["total"] == 1


def test_mark_read(client, feeds, teacher_user, teacher_headers):
    feed_id = feeds["all"]["id"]
    response = client.post(f"/api/feeds/{feed_id}/read", headers=teacher_headers)
    assert response.json()["is_read"] is True
    assert response.json()["read_count"] == 1

    # second read is a no-op
    response = client.post(f"/api/feeds/{feed_id}/read", headers=teacher_headers)
    assert response.json()["read_by_users"] == [str(teacher_user.id)]


def test_mark_all_read_skips_expired(client, admin_headers, teacher_headers, feeds):
    create_feed(client, admin_headers, title="Old news", expiry_date=(datetime.utcnow() - timedelta(days=1)).isoformat())

    response = client.post("/api/feeds/read-all", headers=teacher_headers)
    assert response.json()["count"] == 3

    response = client.post("/api/feeds/read-all", headers=teacher_headers)
    assert response.json()["count"] == 0


def test_mark_all_read_by_category(client, teacher_headers, feeds):
    response = client.post("/api/feeds/read-all", params={"category": "events"}, headers=teacher_headers)
    assert response.json()["count"] == 2


def test_only_author_or_admin_can_edit(client, admin_headers, teacher_headers, feeds):
    own = create_feed(client, teacher_headers, title="Homework")

    response = client.put(f"/api/feeds/{own['id']}", json={"title": "Homework due"}, headers=teacher_headers)
    assert response.json()["title"] == "Homework due"

    response = client.put(f"/api/feeds/{feeds['all']['id']}", json={"title": "Hijack"}, headers=teacher_headers)
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Only the author or an admin can update this feed"

    response = client.delete(f"/api/feeds/{own['id']}", headers=admin_headers)
    assert response.json() == {"message": "Feed deleted successfully"}


def test_feed_metadata_round_trip(client, admin_headers):
    feed = create_feed(client, admin_headers, extra_data={"link": "https://example.com"})
    assert feed["metadata"] == {"link": "https://example.com"}


def test_blank_title_rejected(client, admin_headers):
    response = client.post("/api/feeds/", json={"title": "   ", "content": "x"}, headers=admin_headers)
    assert response.status_code == 400
