"""
Settings - Application configuration using Pydantic Settings.

Loads from environment variables and .env files.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # "development", "production" or "test"
    environment: str = "development"

    # Token signing - both required, must differ
    access_token_secret: SecretStr
    refresh_token_secret: SecretStr
    jwt_algorithm: str = "HS256"

    # Credential store
    db_path: Path = Path("data/medmatch.db")
    db_timeout_seconds: float = 5.0
    bcrypt_rounds: int = 10

    # API
    frontend_url: str = "http://localhost:3000"
    api_host: str = "0.0.0.0"
    api_port: int = 4000
    api_debug: bool = False
    rate_limit_per_minute: int = 120

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def check_secrets(self) -> Settings:
        access = self.access_token_secret.get_secret_value()
        refresh = self.refresh_token_secret.get_secret_value()
        if not access or not refresh:
            raise ValueError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must be set")
        if access == refresh:
            raise ValueError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
