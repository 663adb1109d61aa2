from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# watchlist/core/config.py -> BASE_DIR == repository root
BASE_DIR = Path(__file__).resolve().parents[2]
PACKAGE_DIR = BASE_DIR / "watchlist"
DEFAULT_FIXTURE_CATALOG_PATH = PACKAGE_DIR / "fixtures" / "catalog_fixture.json"

SettingsBackend = Literal["sql", "redis", "memory"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        extra="ignore",
        env_prefix="",
        case_sensitive=False,
    )

    # Environment
    env: str = Field(default="dev", validation_alias="ENV")

    # Application
    app_name: str = Field(default="watchlist-core", validation_alias="APP_NAME")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    user_agent: str = Field(default="Watchlist/0.1", validation_alias="USER_AGENT")

    # Local storage
    database_url: str = Field(
        default="sqlite+pysqlite:///./watchlist.db",
        validation_alias="DATABASE_URL",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0", validation_alias="REDIS_URL"
    )
    # Where the daily call counter lives: sql | redis | memory
    settings_backend: SettingsBackend = Field(
        default="sql", validation_alias="SETTINGS_BACKEND"
    )

    @field_validator("settings_backend", mode="before")
    @classmethod
    def normalize_settings_backend(cls, v: Any) -> SettingsBackend:
        if v is None:
            return "sql"
        if not isinstance(v, str):
            raise TypeError("SETTINGS_BACKEND must be a string")
        s = v.strip().lower()
        if s not in {"sql", "redis", "memory"}:
            raise ValueError("SETTINGS_BACKEND must be one of: sql, redis, memory")
        return s  # type: ignore[return-value]

    # Catalog provider
    catalog_provider: str = Field(default="unogs", validation_alias="CATALOG_PROVIDER")
    fixture_catalog_path: str = Field(
        default=str(DEFAULT_FIXTURE_CATALOG_PATH),
        validation_alias="FIXTURE_CATALOG_PATH",
    )

    # uNoGS (RapidAPI)
    unogs_api_key: str = Field(default="", validation_alias="API_KEY")
    unogs_api_host: str = Field(
        default="unogs-unogs-v1.p.rapidapi.com", validation_alias="API_HOST"
    )
    unogs_base_url: str = Field(
        default="https://unogs-unogs-v1.p.rapidapi.com",
        validation_alias="UNOGS_BASE_URL",
    )
    unogs_timeout_secs: float = Field(
        default=15.0, gt=0, validation_alias="UNOGS_TIMEOUT_SECS"
    )

    # Call budget
    max_api_calls_per_day: int = Field(
        default=50, ge=1, validation_alias="MAX_API_CALLS_PER_DAY"
    )
    search_result_limit: int = Field(
        default=5, ge=1, validation_alias="SEARCH_RESULT_LIMIT"
    )


settings = Settings()
