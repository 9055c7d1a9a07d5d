"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]

MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    APP_NAME: str = "Boilerplate API"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "postgresql+psycopg://postgres@localhost:5432/boilerplate"

    # Each secret signs exactly one token kind.
    JWT_SECRET: str = Field(min_length=MIN_SECRET_LENGTH)
    JWT_REFRESH_SECRET: str = Field(min_length=MIN_SECRET_LENGTH)
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    CSRF_TOKEN_EXPIRE_MINUTES: int = 60
    CSRF_COOKIE_NAME: str = "csrfToken"
    CSRF_HEADER_NAME: str = "X-CSRF-Token"

    EMAIL_TOKEN_EXPIRE_HOURS: int = 24
    PASSWORD_RESET_TOKEN_EXPIRE_HOURS: int = 1

    TOKEN_CLEANUP_ENABLED: bool = True
    TOKEN_CLEANUP_HOUR: int = Field(default=3, ge=0, le=23)
    TOKEN_CLEANUP_BATCH_SIZE: int = Field(default=1000, ge=1)
    TOKEN_CLEANUP_BATCH_PAUSE_SECONDS: float = 0.05

    BACKUP_ENABLED: bool = True
    BACKUP_DIR: str = str(BASE_DIR / "backups")
    BACKUP_RETENTION_DAYS: int = 7
    BACKUP_HOUR: int = Field(default=3, ge=0, le=23)

    FRONTEND_BASE_URL: str = "http://localhost:3000"
    CORS_ORIGINS: str = "http://localhost:3000"

    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_MAX_REQUESTS: int = 120
    RATE_LIMIT_AUTH_MAX_REQUESTS: int = 20

    model_config = SettingsConfigDict(env_file=str(BASE_DIR / ".env"), env_file_encoding="utf-8", extra="ignore")

    @model_validator(mode="after")
    def _secrets_must_differ(self) -> "Settings":
        if self.JWT_SECRET == self.JWT_REFRESH_SECRET:
            raise ValueError("JWT_SECRET and JWT_REFRESH_SECRET must be different")
        return self

    @property
    def is_production(self) -> bool:
        return self.ENV.strip().lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.ENV.strip().lower() == "development"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
