"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "reminders.db"

    # SQLite settings
    pool_size: int = Field(default=5, ge=1)
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class ReminderSettings(BaseSettings):
    """Reminder ledger configuration."""

    model_config = SettingsConfigDict(env_prefix="REMINDERS_")

    default_days_before: int = Field(default=3, ge=0, le=30)
    default_currency: str = "TRY"
    upcoming_window_days: int = Field(default=7, ge=0)

    # Listing
    default_page_size: int = Field(default=20, ge=1)
    max_page_size: int = Field(default=100, ge=1)

    # Keep instrument-linked reminders in step with amount/due date changes
    sync_check_note_drift: bool = False

    @field_validator("default_currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        v = v.strip().upper()
        if len(v) != 3 or not v.isalpha():
            raise ValueError("currency must be a three-letter code")
        return v


class SchedulerSettings(BaseSettings):
    """Notification scheduler configuration."""

    model_config = SettingsConfigDict(env_prefix="SCHEDULER_")

    claim_lease_seconds: int = Field(default=300, gt=0)


class NotificationSettings(BaseSettings):
    """Notification sink configuration."""

    model_config = SettingsConfigDict(env_prefix="NOTIFY_")

    backend: Literal["database", "webhook"] = "database"
    locale: str = "tr_TR"

    # Webhook sink
    webhook_url: str | None = None
    timeout: float = 10.0
    max_retries: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=0.5, ge=0)


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Payment Reminder Engine"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    reminders: ReminderSettings = Field(default_factory=ReminderSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    api: APISettings = Field(default_factory=APISettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
