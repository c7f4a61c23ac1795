"""Application configuration via pydantic-settings."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Auto Repair Shop"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    api_prefix: str = "/api"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 3001
    workers: int = 4

    # Storage backend: "sql" for PostgreSQL, "memory" for the development server
    storage_backend: Literal["sql", "memory"] = "sql"
    seed_demo_data: bool = True

    # Database
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "repairshop"
    postgres_password: str = Field(default="repairshop_secret")
    postgres_db: str = "repairshop"
    db_pool_size: int = 10
    db_max_overflow: int = 10

    @computed_field
    @property
    def database_url(self) -> str:
        """Async PostgreSQL connection URL."""
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None
    redis_db: int = 0

    @computed_field
    @property
    def redis_url(self) -> str:
        """Redis connection URL."""
        auth = f":{self.redis_password}@" if self.redis_password else ""
        return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"

    # JWT Authentication
    jwt_secret_key: str = Field(default="dev-secret-change-in-production")
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7

    # Firebase identity provider
    firebase_project_id: Optional[str] = None
    firebase_certs_url: str = (
        "https://www.googleapis.com/robot/v1/metadata/x509/"
        "securetoken@system.gserviceaccount.com"
    )
    firebase_certs_cache_seconds: int = 3600
    # Development-only tokens mapped to fixed identities
    dev_test_token: str = "test-token"
    dev_admin_token: str = "admin-test-token"

    # SMS (Twilio)
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_phone_number: Optional[str] = None
    sms_timeout_seconds: float = 10.0

    # Rate Limiting
    rate_limit_per_minute: int = 100
    status_lookup_per_minute: int = 10

    # CORS
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:5174",
    ]

    # Booking rules
    booking_reference_prefix: str = "REP"
    reference_max_attempts: int = 5
    issue_description_min_length: int = 5
    strict_status_transitions: bool = True
    notify_on_create: bool = False

    # Worker
    reminder_hour: int = 9  # local shop time
    timezone: str = "America/New_York"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
