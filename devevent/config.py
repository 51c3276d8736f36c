"""Environment-driven settings for the DevEvent service."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings read from ``DEVEVENT_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="DEVEVENT_", extra="ignore")

    log_level: str = "INFO"
    upload_dir: Path = Path("uploads")
    image_base_url: str = "/uploads"
    image_folder: str = "DevEvent"


@lru_cache
def get_settings() -> Settings:
    return Settings()
