"""Application configuration."""
from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    APP_NAME: str = "Tenant Identity API"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10

    # JWT (REQUIRED)
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # Password hashing
    BCRYPT_ROUNDS: int = 12
    SEED_BCRYPT_ROUNDS: int = 10  # Bootstrap data only, never production users

    # Tenancy
    DEFAULT_COMPANY_SLUG: str = "default"
    INVITATION_EXPIRE_DAYS: int = 7

    # CORS (comma separated)
    CORS_ORIGINS: str = "*"

    @field_validator("DATABASE_URL")
    @classmethod
    def require_database_url(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("DATABASE_URL must not be empty")
        return v.strip()

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    class Config:
        env_file = ".env"      # Local only
        case_sensitive = True
        extra = "ignore"      # Ignore unrelated env vars


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
