"""
Centralized configuration for the PictoText backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings are namespaced (e.g., OCR_*, PAYPAL_*, GOOGLE_*).
"""

from decimal import Decimal
from functools import lru_cache
from typing import Literal
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
    app_name: str = "PictoText API"
    app_version: str = "0.1.0"
    environment: Literal["development", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:5000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Storage backend, chosen once at startup
    storage_backend: Literal["memory", "supabase"] = "memory"

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_db_url: str = ""

    # Sessions
    session_secret: str = "change-me-in-production"
    session_algorithm: str = "HS256"
    session_ttl_hours: int = 24 * 7
    session_cookie_name: str = "pictotext_session"

    # Passwords
    password_hash_rounds: int = 12

    # Free tier (anonymous IP + cookie tracking)
    free_daily_limit: int = 3
    free_usage_cookie_name: str = "pictotext_free_user"
    free_usage_cookie_max_age: int = 365 * 24 * 60 * 60  # seconds
    free_usage_retention_days: int = 30

    # Premium tier
    premium_monthly_limit: int = 1500
    premium_price: Decimal = Decimal("10.00")
    premium_currency: str = "USD"

    # Provisioning (payment before registration)
    provisioning_cookie_name: str = "pictotext_provisioning"
    pending_registration_ttl_minutes: int = 60

    # Background maintenance
    maintenance_interval_seconds: int = 3600

    # OCR.space
    ocr_space_api_key: str = ""
    ocr_space_url: str = "https://api.ocr.space/parse/image"
    ocr_timeout_seconds: float = 30.0
    ocr_max_image_bytes: int = 1024 * 1024  # OCR.space free-tier limit
    max_upload_bytes: int = 10 * 1024 * 1024

    # PayPal (empty credentials -> simulated gateway)
    paypal_client_id: str = ""
    paypal_client_secret: str = ""
    paypal_api_base: str = "https://api-m.sandbox.paypal.com"

    # Google OAuth
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = "http://localhost:5000/api/auth/google/callback"

    # Frontend URLs (for redirects)
    frontend_url: str = "http://localhost:5000"

    @property
    def is_production(self) -> bool:
        """Whether the app runs in production (secure cookies, no docs)."""
        return self.environment == "production"

    @property
    def google_oauth_enabled(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)

    @property
    def paypal_enabled(self) -> bool:
        return bool(self.paypal_client_id and self.paypal_client_secret)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
