# 📄 File: app/shared/config/settings.py
#
# 🧭 Purpose (Layman Explanation):
# The control panel for the Plant Sightings service. It reads passwords, web
# addresses and limits from the environment so the rest of the app never has
# to go looking for them itself.
#
# 🧪 Purpose (Technical Summary):
# Pydantic-settings configuration covering the application, database, Supabase
# photo storage, the PlantNet and Gemini providers, resilience knobs (timeouts,
# retries, circuit breakers) and HTTP rate limiting.
#
# 🔗 Dependencies:
# - pydantic-settings for configuration management
# - python-dotenv (through pydantic-settings) for .env file loading
#
# 🔄 Connected Modules / Calls From:
# - app.main (application startup)
# - app.shared.infrastructure.database.connection
# - app.modules.plant_identification.presentation.dependencies (provider wiring)

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Provider credentials are optional: a missing key switches the matching
    provider off instead of failing startup, and the identification flows
    degrade accordingly.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================

    APP_NAME: str = Field(default="Plant Sightings API", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    APP_DESCRIPTION: str = Field(
        default="Plant identification, sightings and tours",
        description="Application description"
    )
    ENVIRONMENT: str = Field(default="development", description="Runtime environment")
    DEBUG: bool = Field(default=False, description="Debug mode flag")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="text", description="Log output format (text or json)")

    # =========================================================================
    # SERVER CONFIGURATION
    # =========================================================================

    HOST: str = Field(default="0.0.0.0", description="Server host")
    PORT: int = Field(default=8000, description="Server port")
    RELOAD: bool = Field(default=False, description="Auto-reload on changes")

    CORS_ORIGINS: str = Field(
        default="http://localhost:3000,http://localhost:8081",
        description="CORS allowed origins"
    )

    # =========================================================================
    # DATABASE CONFIGURATION
    # =========================================================================

    DATABASE_URL: Optional[str] = Field(None, description="SQLAlchemy async database URL")
    DB_HOST: str = Field(default="localhost", description="Database host")
    DB_PORT: int = Field(default=5432, description="Database port")
    DB_NAME: str = Field(default="plant_sightings", description="Database name")
    DB_USER: str = Field(default="postgres", description="Database user")
    DB_PASSWORD: str = Field(default="", description="Database password")

    DB_POOL_SIZE: int = Field(default=10, description="Database pool size")
    DB_MAX_OVERFLOW: int = Field(default=20, description="Database pool overflow")
    DB_POOL_TIMEOUT: int = Field(default=30, description="Database pool timeout")
    DB_POOL_RECYCLE: int = Field(default=3600, description="Database pool recycle time")
    DB_ECHO: bool = Field(default=False, description="Echo SQL statements")
    DB_AUTO_CREATE_TABLES: bool = Field(
        default=False,
        description="Create missing tables on startup instead of relying on alembic"
    )

    # =========================================================================
    # SUPABASE STORAGE
    # =========================================================================

    SUPABASE_URL: Optional[str] = Field(None, description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(None, description="Supabase service role key")
    SUPABASE_STORAGE_BUCKET: str = Field(default="sighting-photos", description="Photo bucket")
    SUPABASE_SIGNED_URL_TTL: int = Field(default=3600, description="Signed URL lifetime (seconds)")

    MAX_PHOTO_SIZE_MB: int = Field(default=10, description="Maximum photo upload size")
    ALLOWED_PHOTO_TYPES: str = Field(
        default="image/jpeg,image/png,image/webp",
        description="Accepted photo MIME types"
    )
    PHOTO_MAX_DIMENSION: int = Field(default=2048, description="Longest edge after optimisation")
    PHOTO_JPEG_QUALITY: int = Field(default=85, description="JPEG quality after optimisation")

    # =========================================================================
    # PLANT IDENTIFICATION PROVIDERS
    # =========================================================================

    # PlantNet (visual identification)
    PLANTNET_API_KEY: Optional[str] = Field(None, description="PlantNet API key")
    PLANTNET_API_URL: str = Field(
        default="https://my-api.plantnet.org/v2/identify",
        description="PlantNet identify endpoint"
    )
    PLANTNET_PROJECT: str = Field(default="all", description="PlantNet flora project")
    PLANTNET_LANG: str = Field(default="en", description="Language for common names")

    # Google Gemini (generative content)
    GEMINI_API_KEY: Optional[str] = Field(None, description="Google Gemini API key")
    GEMINI_API_URL: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/models",
        description="Gemini models endpoint"
    )
    GEMINI_MODEL: str = Field(default="gemini-1.5-flash", description="Gemini model name")
    GEMINI_IMAGE_IDENTIFICATION_ENABLED: bool = Field(
        default=True,
        description="Allow Gemini vision as the photo identification fallback"
    )

    # =========================================================================
    # RESILIENCE SETTINGS
    # =========================================================================

    PROVIDER_TIMEOUT_SECONDS: float = Field(default=30.0, description="Per-call provider timeout")
    PROVIDER_MAX_RETRIES: int = Field(default=3, description="Attempts for transport failures")

    CIRCUIT_BREAKER_FAILURE_THRESHOLD: int = Field(
        default=5, description="Consecutive failures before opening a circuit"
    )
    CIRCUIT_BREAKER_RECOVERY_TIMEOUT: int = Field(
        default=60, description="Seconds an open circuit waits before half-open"
    )

    # =========================================================================
    # USAGE AND RATE LIMITING
    # =========================================================================

    ENFORCE_USAGE_LIMITS: bool = Field(
        default=True, description="Reject sighting/tour creation beyond plan limits"
    )
    IDENTIFICATION_RATE_LIMIT: str = Field(
        default="20/minute", description="slowapi limit for identification endpoints"
    )
    RATE_LIMIT_ENABLED: bool = Field(default=True, description="Toggle slowapi rate limiting")

    # =========================================================================
    # VALIDATORS
    # =========================================================================

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed_environments = ["development", "staging", "production", "test"]
        if v.lower() not in allowed_environments:
            raise ValueError(f"Environment must be one of {allowed_environments}")
        return v.lower()

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level value."""
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"Log level must be one of {allowed_levels}")
        return v.upper()

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in ("text", "json"):
            raise ValueError("Log format must be 'text' or 'json'")
        return v.lower()

    @field_validator("PROVIDER_TIMEOUT_SECONDS")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Provider calls must always be bounded."""
        if v <= 0:
            raise ValueError("Provider timeout must be a positive number of seconds")
        return v

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================

    @property
    def database_url(self) -> str:
        """Get the database URL, preferring explicit DATABASE_URL."""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        return (
            f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def allowed_photo_types_list(self) -> List[str]:
        return [mime.strip() for mime in self.ALLOWED_PHOTO_TYPES.split(",")]

    @property
    def storage_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_SERVICE_ROLE_KEY)

    # =========================================================================
    # API PROVIDER CONFIGURATIONS
    # =========================================================================

    def get_plant_api_config(self) -> dict:
        """Get plant identification provider configuration."""
        return {
            "plantnet": {
                "api_key": self.PLANTNET_API_KEY,
                "api_url": self.PLANTNET_API_URL,
                "project": self.PLANTNET_PROJECT,
                "lang": self.PLANTNET_LANG,
                "priority": 1,
            },
            "gemini": {
                "api_key": self.GEMINI_API_KEY,
                "api_url": self.GEMINI_API_URL,
                "model": self.GEMINI_MODEL,
                "image_identification": self.GEMINI_IMAGE_IDENTIFICATION_ENABLED,
                "priority": 2,
            },
        }


# ============================================================================
# SETTINGS FACTORY
# ============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Uses lru_cache to ensure settings are loaded only once
    and reused throughout the application lifecycle.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
