"""
RentDesk Application Configuration
Loads settings from .env file using Pydantic v2 with BaseSettings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ==================== Project Info ====================
    PROJECT_NAME: str = "RentDesk API"
    PROJECT_DESCRIPTION: str = "Rental back-office: properties, units, contracts and payment reconciliation"
    VERSION: str = "1.0.0"

    # ==================== Database ====================
    # Supabase pooler URL in production, local SQLite for development
    DATABASE_URL: str = "sqlite:///rentdesk_local.db"
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_RECYCLE: int = 3600

    # ==================== Hosted auth (token verification only) ====================
    SUPABASE_URL: str = ""
    SUPABASE_JWT_SECRET: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"

    # ==================== CORS ====================
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # ==================== Preferences defaults ====================
    DEFAULT_CURRENCY: str = "SAR"
    DEFAULT_THEME: str = "light"
    DEFAULT_LANGUAGE: str = "ar"

    # ==================== Reconciliation ====================
    PAYMENT_SUM_TOLERANCE: float = 0.01
    EXPIRING_WINDOW_DAYS: int = 30

    # ==================== Payment status refresher ====================
    STATUS_REFRESH_ENABLED: bool = True
    STATUS_REFRESH_INTERVAL_HOURS: float = 24
    STATUS_REFRESH_INITIAL_DELAY_SECONDS: float = 5

    # ==================== Features ====================
    DEBUG: bool = False
    TESTING: bool = False
    LOG_LEVEL: str = "INFO"

    # ==================== Pagination ====================
    DEFAULT_PAGE_SIZE: int = 100
    MAX_PAGE_SIZE: int = 500

    # ==================== Configuration Loading ====================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",
        validate_default=True,
    )

    # ==================== Properties ====================
    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.lower().startswith("sqlite")

    @property
    def status_refresh_interval_seconds(self) -> float:
        return self.STATUS_REFRESH_INTERVAL_HOURS * 60 * 60


# ==================== Settings Singleton ====================
@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()


def is_development() -> bool:
    return settings.DEBUG or settings.is_sqlite
