"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret shared with the auth provider to verify bearer tokens",
        min_length=1,
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Lifetime of tokens minted by the development token script",
        gt=0,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used to localize timestamps coming from the report store",
    )
    notifications_storage_key: str = Field(
        default="guardian_care_notifications",
        description="Storage key holding the serialized notification collection",
        min_length=1,
    )
    last_check_storage_key: str = Field(
        default="guardian_care_last_notification_check",
        description="Storage key holding the last time the inbox was opened",
        min_length=1,
    )
    default_last_check: str = Field(
        default="2020-01-01T00:00:00+00:00",
        description="ISO 8601 instant used when the inbox was never opened",
    )
    page_size: int = Field(
        default=20,
        description="Number of notifications returned per page",
        gt=0,
    )
    new_badge_minutes: int = Field(
        default=5,
        description="Age in minutes under which a notification counts as new",
        ge=0,
    )
    cors_origins: str = Field(
        default="http://localhost:8100",
        description="Comma separated origins allowed to call the API from the web client",
    )

    def allowed_origins(self) -> list[str]:
        """Return ``cors_origins`` split into individual origins."""

        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
