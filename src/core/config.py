"""Application configuration management using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Required settings will raise validation errors if not provided.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="mealshare-backend", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/staging/production)")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port")

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins",
    )

    # Supabase
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_secret_key: str = Field(..., description="Supabase secret key for backend operations")
    supabase_signing_key_jwk: str = Field(..., description="Supabase signing key JWK (JSON string) for JWT token verification")
    supabase_timeout_seconds: int = Field(default=10, description="Timeout for PostgREST round-trips")

    # Tables
    profiles_table: str = Field(default="user_profiles", description="Table holding one profile row per identity")
    listings_table: str = Field(default="listings", description="Table holding food listings")

    # Profiles
    volunteer_metadata_key: str = Field(
        default="is_volunteer",
        description="User metadata key carrying the volunteer flag",
    )
    profile_allowed_fields: str = Field(
        default="",
        description="Comma-separated explicit profile column allow-list. Empty means discover from the stored row.",
    )

    @field_validator("supabase_timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: int) -> int:
        """Reject non-positive collaborator timeouts."""
        if value <= 0:
            raise ValueError("supabase_timeout_seconds must be positive")
        return value

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def profile_allowed_fields_list(self) -> list[str]:
        """Parse the explicit profile allow-list into a list."""
        return [field.strip() for field in self.profile_allowed_fields.split(",") if field.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings: Application settings instance.

    Note:
        Settings are cached using lru_cache for performance.
        Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
