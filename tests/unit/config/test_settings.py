"""Tests for environment-driven settings."""

import pytest

from scholar_config import Settings, get_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "DATABASE_URL_OVERRIDE",
        "POSTGRES_HOST",
        "POSTGRES_PASSWORD",
        "INDEX_ENABLED",
        "CACHE_TTL_SEARCH",
        "REDIS_ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.database_url == "postgresql+asyncpg://postgres:@localhost:5432/scholar"
    assert settings.index_query_timeout_ms == 1500
    assert settings.index_retry_backoff_seconds == 30.0
    assert settings.cache_ttl_search == 300
    assert settings.cache_ttl_index_search == 3600
    assert settings.cache_ttl_venue_detail == 7200
    assert settings.db_aggregate_timeout_ms == 8000


def test_database_url_from_components(monkeypatch):
    monkeypatch.setenv("POSTGRES_HOST", "db")
    monkeypatch.setenv("POSTGRES_PASSWORD", "s3cret")

    settings = Settings(_env_file=None)

    assert settings.database_url == "postgresql+asyncpg://postgres:s3cret@db:5432/scholar"
    assert "s3cret" not in repr(settings.postgres_password)


def test_override_replaces_components(monkeypatch):
    monkeypatch.setenv("DATABASE_URL_OVERRIDE", "mysql+aiomysql://u:p@maria/scholar")

    assert Settings(_env_file=None).database_url == "mysql+aiomysql://u:p@maria/scholar"


def test_blank_override_is_ignored(monkeypatch):
    monkeypatch.setenv("DATABASE_URL_OVERRIDE", "   ")

    assert Settings(_env_file=None).database_url.startswith("postgresql+asyncpg://")


def test_env_values_are_coerced(monkeypatch):
    monkeypatch.setenv("INDEX_ENABLED", "false")
    monkeypatch.setenv("CACHE_TTL_SEARCH", "60")

    settings = Settings(_env_file=None)

    assert settings.index_enabled is False
    assert settings.cache_ttl_search == 60


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
