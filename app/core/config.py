# app/core/config.py
"""Configuration settings for the File Storage API.

Uses Pydantic BaseSettings for environment variable management.
"""
import secrets
from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentEnum(str, Enum):
    development = "development"
    testing = "testing"
    staging = "staging"
    production = "production"


class LogLevelEnum(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormatEnum(str, Enum):
    simple = "simple"
    json = "json"


class StorageProviderEnum(str, Enum):
    local = "local"
    s3 = "s3"


MEGABYTE = 1024 * 1024
GIGABYTE = 1024 * MEGABYTE


class Settings(BaseSettings):
    # Pydantic v2 settings configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===== Application Settings =====
    app_name: str = Field(default="File Storage API", description="Application name")
    environment: EnvironmentEnum = Field(
        default=EnvironmentEnum.development, description="Environment type"
    )
    debug: bool = Field(default=False, description="Debug mode")
    version: str = Field(default="1.0.0", description="Application version")

    # ===== Security Settings =====
    secret_key: str = Field(
        default_factory=lambda: secrets.token_urlsafe(32),
        description="Secret key for JWT encoding",
    )
    algorithm: str = Field(default="HS256", description="JWT algorithm")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7, description="JWT token expiration time (7 days)"
    )

    # ===== Database Settings =====
    database_url: str | None = Field(default=None, description="Database connection URL")
    db_pool_size: int = Field(default=20, description="Database connection pool size")
    db_max_overflow: int = Field(default=0, description="Database max overflow connections")

    # Test database URL
    test_database_url: str | None = Field(default=None, description="Test database URL")

    # ===== File Storage Settings =====
    storage_provider: StorageProviderEnum = Field(
        default=StorageProviderEnum.local, description="Preferred storage provider"
    )
    local_upload_directory: str = Field(
        default="./uploads", description="Base directory of the local storage provider"
    )
    upload_temp_directory: str | None = Field(
        default=None, description="Directory for incoming uploads (system temp dir if unset)"
    )
    aws_access_key_id: str | None = Field(default=None, description="AWS access key ID")
    aws_secret_access_key: str | None = Field(default=None, description="AWS secret access key")
    s3_bucket_name: str | None = Field(default=None, description="S3 bucket name")
    s3_region: str | None = Field(default=None, description="S3 region")
    s3_endpoint_url: str | None = Field(default=None, description="S3 endpoint URL")
    cdn_url: str | None = Field(default=None, description="CDN base URL in front of the bucket")
    presigned_url_expire_seconds: int = Field(
        default=3600, description="Lifetime of signed URLs in seconds"
    )

    # ===== Upload Limits =====
    max_file_size: int = Field(
        default=100 * MEGABYTE, description="Maximum image/document/archive size in bytes"
    )
    max_video_size: int = Field(default=500 * MEGABYTE, description="Maximum video size in bytes")
    storage_quota_bytes: int = Field(default=10 * GIGABYTE, description="Per-user storage quota")
    max_filename_length: int = Field(default=255, description="Maximum original filename length")

    # ===== CORS Settings =====
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173,http://localhost:8080,http://127.0.0.1:3000",
        description="Allowed CORS origins (comma-separated)",
    )

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        if isinstance(self.allowed_origins, str):
            return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]
        return self.allowed_origins if isinstance(self.allowed_origins, list) else []

    # ===== Monitoring & Logging =====
    log_level: LogLevelEnum = Field(default=LogLevelEnum.INFO, description="Logging level")
    log_format: LogFormatEnum = Field(default=LogFormatEnum.simple, description="Log format")

    # ===== Server Settings =====
    host: str = Field(default="127.0.0.1", description="Host to bind the server")
    port: int = Field(default=8000, description="Port to bind the server")

    # ===== Computed Properties =====
    @property
    def is_development(self) -> bool:
        return self.environment == EnvironmentEnum.development

    @property
    def is_production(self) -> bool:
        return self.environment == EnvironmentEnum.production

    @property
    def is_testing(self) -> bool:
        return self.environment == EnvironmentEnum.testing

    @property
    def has_remote_storage_credentials(self) -> bool:
        return bool(
            self.s3_bucket_name
            and self.s3_region
            and self.aws_access_key_id
            and self.aws_secret_access_key
        )

    # ===== Validation Methods =====
    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        if v and isinstance(v, str):
            lv = v.lower()
            if lv in ["dev", "develop"]:
                return "development"
            if lv in ["prod"]:
                return "production"
            return lv
        return v

    @field_validator("storage_provider", mode="before")
    @classmethod
    def validate_storage_provider(cls, v):
        if v and isinstance(v, str):
            return v.lower()
        return v

    @field_validator("max_file_size")
    @classmethod
    def validate_file_size(cls, v):
        if v > GIGABYTE:
            raise ValueError("Maximum file size cannot exceed 1GB")
        return v

    @field_validator("presigned_url_expire_seconds")
    @classmethod
    def validate_presigned_expiry(cls, v):
        # S3 caps SigV4 signed URLs at seven days
        if v <= 0 or v > 7 * 24 * 3600:
            raise ValueError("Signed URL expiry must be between 1 second and 7 days")
        return v

    @model_validator(mode="after")
    def validate_limits(self):
        if self.max_video_size < self.max_file_size:
            raise ValueError("max_video_size cannot be smaller than max_file_size")
        return self


@lru_cache
def get_settings() -> Settings:
    """Build the settings once per process."""
    return Settings()


settings = get_settings()


class ConfigValidator:
    @staticmethod
    def validate_required_settings(config: Settings):
        errors = []
        if not config.database_url:
            errors.append("DATABASE_URL is required")
        if config.is_production and config.storage_provider == StorageProviderEnum.s3:
            if not config.has_remote_storage_credentials:
                errors.append("S3 credentials are required when STORAGE_PROVIDER=s3 in production")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")

    @staticmethod
    def get_feature_status(config: Settings) -> dict:
        return {
            "storage_provider": config.storage_provider.value,
            "remote_storage_configured": config.has_remote_storage_credentials,
            "cdn_enabled": bool(config.cdn_url),
            "environment": config.environment.value,
        }


def get_config_summary(config: Settings) -> dict:
    return {
        "app_name": config.app_name,
        "version": config.version,
        "environment": config.environment.value,
        "debug": config.debug,
        "features": ConfigValidator.get_feature_status(config),
        "database_configured": bool(config.database_url),
    }


__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "ConfigValidator",
    "get_config_summary",
    "EnvironmentEnum",
    "LogLevelEnum",
    "LogFormatEnum",
    "StorageProviderEnum",
]
