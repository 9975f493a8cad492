"""
Configuration settings for the Service Center Management API.
Uses Pydantic for type-safe configuration management.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Service Center Management API"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Database
    database_url: str = "sqlite+aiosqlite:///./service_center.db"

    # Security
    secret_key: str = "your-secret-key-change-this-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440  # 24 hours
    session_secret_key: str = "your-session-secret-change-this-in-production"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Billing
    company_name: str = "Albany Motors"
    currency_symbol: str = "Rs."
    gst_rate_percent: int = 18
    bill_download_path: str = "/api/bills/service-request/{request_id}/download"

    # Email (Brevo transactional API)
    brevo_api_key: Optional[str] = None
    mail_from_email: str = "service@albanymotors.com"
    mail_from_name: str = "Albany Motors Service Team"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
