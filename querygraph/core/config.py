"""Runtime settings, read from the environment (and ``.env`` when present).

Modules import the ``settings`` singleton; nothing reads ``os.environ``
directly.
"""

import json

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """DuckDB configuration — the storage engine compiled queries run against."""

    model_config = SettingsConfigDict(env_prefix="")

    duckdb_path: str = "data/database.duckdb"
    duckdb_read_only: bool = False


class QuerySettings(BaseSettings):
    """Compilation and pagination settings."""

    model_config = SettingsConfigDict(env_prefix="")

    # sqlglot dialect used to render compiled queries
    sql_dialect: str = "duckdb"

    default_page_size: int = 100
    max_page_size: int = 10_000

    @field_validator("default_page_size", "max_page_size")
    @classmethod
    def validate_page_size_positive(cls, v: int, info) -> int:
        if v < 1:
            raise ValueError(f"{info.field_name.upper()} must be at least 1")
        return v


class Settings(BaseSettings):
    """Top-level QueryGraph settings; defaults suit a local editor session."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "development"

    engine: EngineSettings = EngineSettings()
    query: QuerySettings = QuerySettings()

    # The desktop editor's dev server
    cors_origins: list[str] = ["http://localhost:1420"]

    log_level: str = "INFO"
    metrics_enabled: bool = True

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Accept a JSON list or a comma-separated string."""
        if not isinstance(v, str):
            return v
        if v.lstrip().startswith("["):
            return json.loads(v)
        return [origin.strip() for origin in v.split(",") if origin.strip()]


settings = Settings()
