"""
Clipshare Core Settings.

Everything is overridable through ``CLIPSHARE_*`` environment variables or a
``.env`` file next to the process.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8",
        env_prefix="CLIPSHARE_", case_sensitive=False,
    )

    # ── App ──────────────────────────────────────────────────────────────
    app_name: str = "Clipshare"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    api_prefix: str = "/api/v1"

    # ── PostgreSQL ───────────────────────────────────────────────────────
    db_host: str = "postgres"
    db_port: int = 5432
    db_user: str = "clipshare"
    db_password: str = "clipshare_secret"
    db_name: str = "clipshare"
    db_pool_size: int = 10
    db_echo: bool = False

    # Engine-level timeout for every store call; expiry surfaces as Unavailable
    db_command_timeout_seconds: float = 10.0

    # Tests point this at sqlite+aiosqlite
    database_url_override: Optional[str] = None

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # ── Pagination ───────────────────────────────────────────────────────
    pagination_default_limit: int = 10
    # Hard ceiling on a single page, requests above it are clamped
    pagination_max_limit: int = 100

    # ── Media ────────────────────────────────────────────────────────────
    temp_dir: str = "/tmp/clipshare"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
