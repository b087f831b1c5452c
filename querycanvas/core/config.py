"""
Centralised application settings loaded from environment / .env file.
"""
from __future__ import annotations

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load .env from project root (two levels up from this file)
_ENV_PATH = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # ── Postgres ─────────────────────────────────────────
    postgres_user: str = "querycanvas"
    postgres_password: str = "querycanvas_pw"
    postgres_db: str = "analytics"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    db_schema: str = "public"

    # ── App ──────────────────────────────────────────────
    api_port: int = 3001
    log_level: str = "INFO"
    query_timeout_ms: int = 10_000
    preview_default_limit: int = 10
    preview_max_limit: int = 1000
    validate_before_execute: bool = True
    saved_queries_table: str = "querycanvas_saved_queries"

    @property
    def database_url(self) -> str:
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
