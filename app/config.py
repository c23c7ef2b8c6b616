"""Application configuration using Pydantic Settings."""
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # MongoDB
    mongodb_url: str
    mongodb_db_name: str = "team_time_tracker"

    # JWT (tokens are issued by the identity provider)
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expiration_minutes: int = 10080  # 7 days

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:8000"

    # Reference timezone for hour-of-day, weekday and calendar-date rules
    timezone: str = "UTC"

    # Email
    resend_api_key: str = ""
    email_from: str = "Team Time Tracker <onboarding@resend.dev>"
    app_base_url: str = "http://localhost:3000"

    # Reminders
    reminders_enabled: bool = False
    reminder_interval_minutes: int = 60
    # Shared secret for POST /reminders/run; empty disables the endpoint
    reminder_run_secret: str = ""

    # Invitations
    invitation_expiry_days: int = 7

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def tzinfo(self) -> ZoneInfo:
        """Resolve the reference timezone."""
        return ZoneInfo(self.timezone)


settings = Settings()
