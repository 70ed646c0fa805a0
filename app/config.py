"""
Configuration management using Pydantic settings.
Handles database URL, JWT secrets, image hosting and geocoding credentials.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from typing import List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application configuration
    app_name: str = "ProRental API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Database configuration
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/prorental"

    # JWT / auth cookie configuration
    jwt_secret_key: str = "your-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 7 * 24 * 60
    auth_cookie_name: str = "access_token"
    auth_cookie_secure: bool = False

    # Cloudinary image hosting
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    cloudinary_folder: str = "proRental/properties"
    image_max_width: int = 1000
    image_max_height: int = 1000

    # Upload constraints
    max_image_size: int = 5 * 1024 * 1024  # 5MiB per file
    max_images_per_listing: int = 8
    allowed_image_types: List[str] = ["jpeg", "jpg", "png", "gif", "webp"]

    # Mapbox geocoding
    map_token: str = Field("", validation_alias="MAP_TOKEN")
    geocoding_base_url: str = "https://api.mapbox.com/geocoding/v5/mapbox.places"
    geocoding_timeout_seconds: float = 10.0
    regeocode_on_update: bool = False

    # API configuration
    api_prefix: str = "/api"
    cors_origins: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8080

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure an async driver is used for PostgreSQL URLs."""
        if not v:
            raise ValueError("DATABASE_URL is required")
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+asyncpg://", 1)
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("jwt_secret_key", mode="before")
    @classmethod
    def validate_jwt_secret_key(cls, v):
        """Validate JWT secret key strength."""
        if not v:
            raise ValueError("JWT_SECRET_KEY is required")
        if len(v) < 32 and v != "your-secret-key-change-in-production":
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters long")
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_envs = ["development", "testing", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {allowed_envs}")
        return v

    @field_validator("allowed_image_types", mode="after")
    @classmethod
    def normalize_image_types(cls, v):
        return [t.lower().lstrip(".") for t in v]

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def cloudinary_configured(self) -> bool:
        """Whether all Cloudinary credentials are present."""
        return bool(self.cloudinary_cloud_name and self.cloudinary_api_key and self.cloudinary_api_secret)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "populate_by_name": True,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one instance of settings throughout the app lifecycle.
    """
    return Settings()


# Global settings instance
settings = get_settings()
