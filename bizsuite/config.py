"""
Application Configuration

Centralized configuration management using Pydantic settings.
Loads from environment variables with fallback to .env file.
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Note: get_settings() is cached, so tests that need different values
    must set the environment before the first import of the package.
    """

    # Database settings
    DATABASE_URL: str = "postgresql://localhost/bizsuite_dev"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 40

    # Tenant tokens
    SECRET_KEY: str = "dev-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Platform admin tokens use their own secret so a leaked tenant
    # secret can never mint admin tokens
    ADMIN_SECRET_KEY: str = "dev-admin-secret-key-change-in-production"
    ADMIN_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # bcrypt work factor (tests lower this to keep the suite fast)
    BCRYPT_ROUNDS: int = 12

    # Redis for rate limiting
    REDIS_URL: str = "redis://localhost:6379/0"

    # Application settings
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:3001"]

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 120
    RATE_LIMIT_BURST: int = 20

    # Registration
    TRIAL_PLAN_NAME: str = "trial"
    TRIAL_DURATION_DAYS: int = 60

    # Optional platform admin created by the seed step
    BOOTSTRAP_ADMIN_EMAIL: str = ""
    BOOTSTRAP_ADMIN_PASSWORD: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
