"""Application settings loaded from environment variables.

Configuration file discovery (in priority order):
1. OS environment variables (always highest priority)
2. SCHOLAR_ENV_FILE environment variable (absolute path to .env file)
3. config/.env.dev - local development
4. config/.env - production/Docker

Uses pydantic-settings for automatic type coercion and validation.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_project_root() -> Path:
    """Find the project root directory."""
    current = Path(__file__).resolve().parent

    for parent in [current, *current.parents]:
        if (parent / "config").is_dir():
            return parent
        if (parent / ".git").is_dir():
            return parent
        if parent == Path("/app"):
            return parent

    return Path(__file__).resolve().parents[2]


def get_config_dir() -> Path:
    """Get the config directory path."""
    return _find_project_root() / "config"


def _resolve_env_file_path() -> Path | None:
    """Resolve the .env file path.

    Priority:
    1. SCHOLAR_ENV_FILE env var (full path)
    2. config/.env.dev (local development)
    3. config/.env (production)
    """
    env_file_path = os.environ.get("SCHOLAR_ENV_FILE")
    if env_file_path:
        path = Path(env_file_path)
        if not path.is_absolute():
            path = _find_project_root() / path
        if path.exists():
            return path

    config_dir = get_config_dir()

    dev_env = config_dir / ".env.dev"
    if dev_env.exists():
        return dev_env

    prod_env = config_dir / ".env"
    if prod_env.exists():
        return prod_env

    return None


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Values are loaded from:
    1. OS environment variables (highest priority)
    2. .env file (config/.env.dev or config/.env)
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_file=_resolve_env_file_path(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "Scholar"
    debug: bool = False

    # Database (POSTGRES_ prefix). DATABASE_URL_OVERRIDE replaces the
    # components entirely, e.g. for a MariaDB deployment.
    database_url_override: str | None = None
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: SecretStr = SecretStr("")
    postgres_db: str = "scholar"
    db_pool_size: int = 20

    # Query deadlines (milliseconds)
    db_point_timeout_ms: int = 3000
    db_hydrate_timeout_ms: int = 6000
    db_fallback_timeout_ms: int = 4000
    db_aggregate_timeout_ms: int = 8000

    # Full-text index (INDEX_ prefix)
    index_enabled: bool = True
    index_url: str = "http://localhost:9308"
    index_connect_timeout: float = 0.75
    index_query_timeout_ms: int = 1500
    index_retry_backoff_seconds: float = 30.0
    index_works_table: str = "works_poc"
    index_persons_table: str = "persons_poc"
    index_max_matches: int = 10000

    # Redis cache (REDIS_ prefix)
    redis_enabled: bool = True
    redis_url: str = "redis://localhost:6379/0"
    redis_connect_timeout: float = 10.0

    # Cache TTLs (seconds)
    cache_ttl_search: int = 300
    cache_ttl_index_search: int = 3600
    cache_ttl_venue_detail: int = 7200
    cache_ttl_venue_list: int = 7200
    cache_ttl_default: int = 1800

    # Logging (LOG_ prefix)
    log_level: str = "INFO"

    @field_validator("database_url_override", mode="before")
    @classmethod
    def _blank_url_is_none(cls, v: Any) -> str | None:
        """Treat an empty DATABASE_URL_OVERRIDE as unset."""
        if v is None or not str(v).strip():
            return None
        return str(v).strip()

    # Computed properties
    @computed_field  # type: ignore[prop-decorator]
    @property
    def database_url(self) -> str:
        """Construct the database URL from components."""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.postgres_user}:"
            f"{self.postgres_password.get_secret_value()}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for tests)."""
    get_settings.cache_clear()
