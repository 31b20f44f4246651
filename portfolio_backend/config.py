"""
Configuration and settings for the portfolio backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: str = Field(default="INFO")

    # Key-value store (SQL table or Redis)
    database_url: Optional[str] = Field(default=None)
    redis_url: Optional[str] = Field(default=None)
    redis_key_namespace: str = Field(default="portfolio:")

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Hosted identity service
    supabase_url: Optional[str] = Field(default=None)
    supabase_anon_key: Optional[str] = Field(default=None)
    supabase_service_role_key: Optional[str] = Field(default=None)

    # Local admin credentials, used when no identity service is configured
    admin_token: Optional[str] = Field(default=None)
    admin_email: Optional[str] = Field(default=None)
    admin_password: Optional[str] = Field(default=None)

    # Contact notifications (Resend)
    resend_api_key: Optional[str] = Field(default=None)
    notification_from: str = Field(
        default="Portfolio Contact <onboarding@resend.dev>"
    )
    notification_to: list[str] = Field(
        default_factory=lambda: ["shehrozshafiq03@gmail.com"]
    )
    notification_timezone: str = Field(default="Asia/Karachi")
    site_name: str = Field(default="shehroz.dev")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
