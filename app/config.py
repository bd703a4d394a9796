"""
Application configuration with Pydantic Settings for validation and type safety.
Supports environment-specific configurations and .env file loading.
"""

from enum import Enum
from typing import Optional
from uuid import UUID
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator

from domain.enums import StorageBackend


class Environment(str, Enum):
    """Application environment types"""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """
    Application settings with validation.
    Settings are loaded from environment variables or .env file.
    """

    # Application settings
    app_name: str = Field(default="Ander", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT, description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=5000, ge=1, le=65535, description="Server port")

    # Reading storage
    storage_backend: StorageBackend = Field(
        default=StorageBackend.MEMORY,
        description="Where readings live: memory, sql or supabase",
    )
    database_url: str = Field(
        default="sqlite:///./ander.db",
        description="SQLAlchemy connection URL (used by the sql backend)",
    )
    db_echo: bool = Field(default=False, description="SQLAlchemy echo SQL statements")
    db_init_attempts: int = Field(
        default=5, ge=1, description="Database initialization retry attempts"
    )
    db_init_delay_sec: float = Field(
        default=2.0, ge=0, description="Delay between DB init attempts"
    )

    # Glucose targets (gestational diabetes band)
    target_low: float = Field(default=70, description="Lower bound of target range, mg/dL")
    target_high: float = Field(default=140, description="Upper bound of target range, mg/dL")
    timezone: str = Field(
        default="UTC", description="Timezone used for day and week boundaries"
    )

    # Authentication
    auth_enabled: bool = Field(
        default=False, description="Require a hosted-provider bearer token"
    )
    default_user_id: UUID = Field(
        default=UUID("00000000-0000-0000-0000-000000000001"),
        description="Owner of readings when authentication is disabled",
    )

    # Hosted backend (Supabase)
    supabase_url: Optional[str] = Field(default=None, description="Supabase project URL")
    supabase_key: Optional[str] = Field(default=None, description="Supabase API key")
    readings_table: str = Field(default="readings", description="Hosted readings table")
    meal_photo_bucket: str = Field(default="meal-photos", description="Meal photo bucket")
    report_bucket: str = Field(default="reports", description="Report backup bucket")
    max_photo_bytes: int = Field(
        default=5 * 1024 * 1024, ge=1, description="Largest accepted meal photo"
    )

    # Email provider (SendGrid)
    sendgrid_api_key: Optional[str] = Field(default=None, description="SendGrid API key")
    sendgrid_from: Optional[str] = Field(
        default=None, description="Verified SendGrid sender address"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="Log format string",
    )

    # CORS settings
    cors_origins: list[str] = Field(
        default=["http://localhost:5000", "http://localhost:5173"],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = Field(
        default=True, description="Allow CORS credentials"
    )
    cors_allow_methods: list[str] = Field(
        default=["*"], description="Allowed HTTP methods"
    )
    cors_allow_headers: list[str] = Field(
        default=["*"], description="Allowed HTTP headers"
    )

    # API settings
    api_title: str = Field(
        default="Ander Blood Sugar Tracker API", description="API documentation title"
    )
    api_description: str = Field(
        default="Blood sugar logging, insights and reports for gestational diabetes",
        description="API documentation description",
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        """Validate and normalize environment value"""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator("storage_backend", mode="before")
    @classmethod
    def validate_storage_backend(cls, v):
        if isinstance(v, str):
            return StorageBackend(v.lower())
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        ZoneInfo(v)
        return v

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment == Environment.DEVELOPMENT


# Global settings instance
settings = Settings()
