"""Application settings using Pydantic BaseSettings."""

import os
import re

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_async_database_url() -> str:
    """Get database URL converted for asyncpg driver."""
    url = os.environ.get("DATABASE_URL", "") or settings.database_url
    # Convert postgres:// to postgresql+asyncpg:// for SQLAlchemy async
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://") and "+asyncpg" not in url:
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    # asyncpg doesn't support sslmode, it uses ssl parameter
    if "sslmode=" in url:
        url = re.sub(r'[?&]sslmode=[^&]*', '', url)
        url = url.rstrip('?&')
    return url


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Postgres
    database_url: str = "postgresql+asyncpg://localhost:5432/condo_intake"

    # Redis (optional, used for webhook deduplication)
    redis_url: str = "redis://localhost:6379/0"
    redis_enabled: bool = False  # Disable Redis by default for dev

    # LLM (Gemini) for message classification
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    classification_timeout_seconds: float = 8.0

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    api_v1_prefix: str = "/api/v1"
    dashboard_base_url: str = "http://localhost:3000"

    # Webhook deduplication by provider message id
    message_dedup_ttl_seconds: int = 300

    # Twilio platform credentials (shared by all buildings)
    twilio_account_sid: str | None = None
    twilio_auth_token: str | None = None
    twilio_validate_signatures: bool = True

    # Outbound dispatch
    dispatch_timeout_seconds: float = 5.0
    dispatch_max_retries: int = 3
    dispatch_rate_limit_base_delay_seconds: float = 2.0
    dispatch_retry_delay_seconds: float = 3.0
    dispatch_max_backoff_seconds: float = 8.0

    # SendGrid (admin email notifications)
    sendgrid_api_key: str | None = None
    sendgrid_from_email: str = "alerts@condo-intake.app"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
