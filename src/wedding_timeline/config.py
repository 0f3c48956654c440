"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_key: str
    sanity_project_id: str
    sanity_dataset: str
    sanity_api_version: str = "2024-01-01"
    sanity_token: str | None = None
    sanity_use_cdn: bool = True
    admin_token: str
    guest_photo_bucket: str = "wedding-photos"
    timeline_update_interval_seconds: float = 30.0
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
