# tests/test_errors.py
import time
import uuid

import pytest

from app.core.cache import CacheManager
from app.core.errors import NotFoundError, ServerError, code_for_status, create_error


class TestErrorEnvelope:
    def test_missing_token(self, client):
        response = client.get("/api/students/")
        assert response.status_code == 401
        assert response.json() == {"error": {"message": "Authentication required", "code": "UNAUTHORIZED"}}

    def test_garbage_token(self, client, db):
        response = client.get("/api/students/", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def test_validation_error(self, client, admin_headers):
        response = client.get("/api/students/not-a-uuid", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        assert "student_id" in response.json()["error"]["message"]

    def test_not_found(self, client, admin_headers):
        response = client.get(f"/api/subjects/{uuid.uuid4()}", headers=admin_headers)
        assert response.json() == {"error": {"message": "Subject not found", "code": "NOT_FOUND"}}

    def test_unknown_route(self, client):
        response = client.get("/api/nowhere")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"


def test_health_and_root(client):
    assert client.get("/health").status_code == 200
    body = client.get("/").json()
    assert "version" in body


@pytest.mark.parametrize("code,expected", [
    ("NOT_FOUND", NotFoundError),
    ("SOMETHING_ELSE", ServerError),
])
def test_create_error(code, expected):
    error = create_error(code, "boom")
    assert isinstance(error, expected)
    assert error.message == "boom"


def test_code_for_status():
    assert code_for_status(404) == "NOT_FOUND"
    assert code_for_status(418) == "REQUEST_ERROR"
    assert code_for_status(503) == "SERVER_ERROR"


class TestCacheManager:
    def test_get_set_delete(self):
        cache = CacheManager(default_timeout=60, max_entries=10)
        cache.set("results:stats:JSS1", {"average": 50})
        assert cache.get("results:stats:JSS1") == {"average": 50}
        assert cache.delete("results:stats:JSS1") is True
        assert cache.get("results:stats:JSS1", "missing") == "missing"

    def test_expiry(self):
        cache = CacheManager(default_timeout=60)
        cache.set("key", 1, timeout=0.01)
        time.sleep(0.05)
        assert cache.exists("key") is False

    def test_default_timeout_applies_per_entry(self):
        cache = CacheManager(default_timeout=0.01)
        cache.set("short", 1)
        cache.set("long", 2, timeout=60)
        time.sleep(0.05)
        assert cache.get("short") is None
        assert cache.get("long") == 2

    def test_delete_prefix(self):
        cache = CacheManager(default_timeout=60)
        cache.set("results:JSS1:a", 1)
        cache.set("results:JSS1:b", 2)
        cache.set("results:JSS2:a", 3)
        assert cache.delete_prefix("results:JSS1") == 2
        assert cache.exists("results:JSS2:a")

    def test_lru_eviction(self):
        cache = CacheManager(default_timeout=60, max_entries=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)
        assert cache.exists("a") and cache.exists("c")
        assert not cache.exists("b")

    def test_get_or_set_calls_factory_once(self):
        cache = CacheManager(default_timeout=60)
        calls = []
        factory = lambda: calls.append(1) or "value"
        assert cache.get_or_set("k", factory) == "value"
        assert cache.get_or_set("k", factory) == "value"
        assert len(calls) == 1
