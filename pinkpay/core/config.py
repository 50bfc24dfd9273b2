"""PinkPay Offramp - Core Configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "PinkPay Offramp"
    debug: bool = False
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")

    # Database
    database_url: str = Field(
        default="sqlite:///./pinkpay.db",
        description="SQLAlchemy connection string for the entity store",
    )

    # Redis (task queue, idempotency keys, rate snapshot)
    redis_url: str = Field(
        default="redis://localhost:6379",
        description="Redis connection URL",
    )

    # Persistence
    persistence_backend: Literal["sql", "redis", "memory"] = Field(
        default="sql", description="Backend for per-account entity storage"
    )

    # Exchange rates
    rate_source: Literal["static", "http", "redis"] = Field(
        default="static", description="Where the rate table is refreshed from"
    )
    rate_source_url: str = Field(default="", description="HTTP rate feed URL")
    rate_response_path: str = Field(
        default="data.rates",
        description="JSON path to the list of {from, to, rate} entries",
    )
    rate_poll_interval: float = Field(default=30.0, gt=0, description="Seconds between polls")
    rate_http_timeout: float = Field(default=10.0, gt=0)

    # Settlement
    settlement_delay_seconds: float = Field(default=2.0, ge=0)
    settlement_timeout_seconds: float = Field(default=30.0, gt=0)

    # KYC
    kyc_submission_policy: Literal["all_steps", "compliance_only"] = Field(
        default="all_steps",
        description="Which steps must be complete before a KYC application can be submitted",
    )

    # Payouts
    idempotency_ttl_seconds: int = Field(
        default=300, ge=1, description="How long a payout intent key stays reserved"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
