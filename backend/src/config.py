"""Application configuration via environment variables.

Provides type-safe settings loading using pydantic-settings.
Environment variables can be loaded from a .env file.
"""

from typing import Optional
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults for development.
    Production deployments MUST set security-critical values.

    Environment Variables:
        DATABASE_URL: SQLAlchemy URL of the document store
        JWT_SECRET: Shared secret used by the identity provider to sign tokens
        IMAGE_STORE_BACKEND: "imgbb" (upload only) or "s3" (upload and delete)
        IMGBB_API_KEY: ImgBB API key
        S3_*: S3-compatible bucket used when IMAGE_STORE_BACKEND=s3
        CELERY_BROKER_URL: Broker for the scheduled retention sweep
        LOG_LEVEL: Logging level (default INFO)
        LOG_JSON: Emit JSON log lines (default true)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Document store
    DATABASE_URL: str = "sqlite:///./maintdesk.db"

    # Identity provider tokens
    JWT_SECRET: str = "dev-jwt-secret-CHANGE-IN-PRODUCTION-32b"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRY_MINUTES: int = 60

    # Image hosting
    IMAGE_STORE_BACKEND: str = "imgbb"
    IMGBB_API_KEY: Optional[str] = None
    IMGBB_UPLOAD_URL: str = "https://api.imgbb.com/1/upload"
    IMGBB_TIMEOUT_SECONDS: float = 30.0
    MAX_IMAGE_BYTES: int = 32 * 1024 * 1024  # ImgBB upload limit

    S3_ENDPOINT_URL: Optional[str] = None
    S3_ACCESS_KEY_ID: str = "minioadmin"
    S3_SECRET_ACCESS_KEY: str = "minioadmin"
    S3_BUCKET_NAME: str = "maintdesk-images"
    S3_REGION: str = "us-east-1"
    S3_PUBLIC_BASE_URL: Optional[str] = None

    # Redis / Celery
    REDIS_URL: str = "redis://localhost:6379/0"
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"

    # Application
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    CORS_ORIGINS: str = "http://localhost:3000"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
