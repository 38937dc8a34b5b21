"""Configuration management for stockpile."""

from pathlib import Path

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

    # LINE Messaging API Configuration
    line_channel_secret: str | None = Field(default=None, description="LINE channel secret for webhook signatures")
    line_channel_access_token: str | None = Field(
        default=None, description="LINE channel access token for reply and push messages"
    )
    line_api_base_url: str = Field(default="https://api.line.me", description="LINE Messaging API base URL")

    # SQLite Configuration
    sqlite_db_path: str = Field(default="data/stockpile.db", description="Path to the SQLite database file")

    # Redis Configuration (optional)
    redis_url: str | None = Field(default=None, description="Redis connection URL (e.g., redis://localhost:6379)")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    # Calendar and Scheduling
    timezone: str = Field(default="Asia/Tokyo", description="IANA timezone used to decide what 'today' is")
    notification_hour: int = Field(default=9, ge=0, le=23, description="Hour of day for the expiry notification run")

    # Conversation Sessions
    session_timeout_minutes: int = Field(
        default=30, gt=0, description="Inactivity period after which a registration draft is discarded"
    )

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required credential is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The credential value

        Raises:
            ValueError: If the credential is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # API Configuration
    API_TIMEOUT_SECONDS: int = 30

    # HTTP Status Codes
    HTTP_OK: int = 200
    HTTP_BAD_REQUEST: int = 400
    HTTP_UNAUTHORIZED: int = 401
    HTTP_SERVER_ERROR: int = 500

    # Expiry notifications, in dispatch order (days before expiry)
    NOTIFICATION_OFFSET_DAYS: tuple[int, ...] = (30, 7, 0)

    # Items this close to expiry are highlighted in the stock list
    NEAR_EXPIRY_WARNING_DAYS: int = 7

    # Quick reply choices offered while entering a quantity
    QUANTITY_CHOICES: tuple[int, ...] = (1, 2, 3, 5, 10)

    # Registration input bounds; the name appears in a confirm template limited to 240 characters
    MAX_QUANTITY: int = 9999
    MAX_NAME_LENGTH: int = 100

    # LINE allows at most five message objects per reply or push request
    LINE_MAX_MESSAGES_PER_REQUEST: int = 5

    # Session storage
    SESSION_KEY_PREFIX: str = "session"

    # Pagination Defaults
    DEFAULT_PER_PAGE_LIMIT: int = 100

    # Redis Configuration
    REDIS_MAX_CONNECTIONS: int = 10

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent.parent


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
