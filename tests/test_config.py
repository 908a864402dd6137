# tests/test_config.py
import pytest
from pydantic import ValidationError

from app.core.config import Settings


def test_cors_origins_from_comma_separated_env(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "http://a.com, http://b.com")
    settings = Settings(_env_file=None)
    assert settings.CORS_ORIGINS == ["http://a.com", "http://b.com"]


def test_cors_origins_default_list(monkeypatch):
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    assert "http://localhost:3000" in Settings(_env_file=None).CORS_ORIGINS


def test_short_jwt_secret_rejected(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "too-short")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_environment_is_normalized(monkeypatch):
    monkeypatch.setenv("ENV", "PRODUCTION")
    settings = Settings(_env_file=None)
    assert settings.is_production
    assert not settings.is_development
