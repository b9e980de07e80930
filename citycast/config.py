"""Runtime configuration based on environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CITYCAST_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    database_url: str = "sqlite:///citycast.db"
    http_timeout_seconds: float = Field(default=8.0, gt=0)
    user_agent: str = "citycast/1.0 (weather lookup)"
    log_level: str = "INFO"


def get_settings() -> Settings:
    return Settings()
