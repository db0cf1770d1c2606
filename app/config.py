"""Configuration management"""

from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "Group Ledger"
    debug: bool = False
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./ledger.db"

    # Redis
    redis_url: str = "redis://localhost:6379/0"
    cache_enabled: bool = True
    balance_cache_ttl: int = 3600

    # CORS
    allowed_origins: List[str] = []

    # Group
    default_group_id: str = "default"
    default_group_name: str = "Expenses"
    default_currency: str = "K"

    # Ledger policy
    force_accept_grace_days: int = 7
    include_deleted_in_balances: bool = False

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL is PostgreSQL or SQLite"""
        if not v.startswith(("postgresql", "sqlite")):
            raise ValueError(
                "DATABASE_URL must be a PostgreSQL or SQLite connection string"
            )
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log level name"""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown LOG_LEVEL: {v}")
        return level

    @field_validator("force_accept_grace_days")
    @classmethod
    def validate_grace_days(cls, v: int) -> int:
        """Grace period cannot be negative"""
        if v < 0:
            raise ValueError("FORCE_ACCEPT_GRACE_DAYS must not be negative")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
