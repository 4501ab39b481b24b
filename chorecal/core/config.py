"""Configuration management for chorecal."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # SQLite Configuration
    sqlite_db_path: str = Field(default="data/chorecal.db", description="Path to the SQLite database file")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    # Runtime Environment
    environment: str = Field(default="development", description="Deployment environment name")
    cors_origin: str = Field(default="http://localhost:5173", description="Allowed CORS origin for the web client")

    # Reminder Configuration
    reminder_hours_ahead: int = Field(
        default=24, ge=1, description="Default look-ahead window (in hours) for upcoming chore reminders"
    )


# Application Constants
class Constants:
    """Application-wide constants."""

    # Virtual instance identity: "{anchor_id}::instance::{YYYY-MM-DD}"
    INSTANCE_ID_SEPARATOR: str = "::instance::"

    # Record id prefixes
    CHORE_ID_PREFIX: str = "chore-"
    TEAM_MEMBER_ID_PREFIX: str = "tm-"

    # Team member defaults
    DEFAULT_AVATAR_COLOR: str = "#3B82F6"

    # Calendar query bounds
    CALENDAR_MIN_YEAR: int = 2000
    CALENDAR_MAX_YEAR: int = 2100

    # Pagination Defaults
    DEFAULT_PER_PAGE_LIMIT: int = 500


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
