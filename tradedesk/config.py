"""
Configuration and settings for the service.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")

    # Database (Postgres expected, any SQLAlchemy URL accepted)
    database_url: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="TRADEDESK_USE_IN_MEMORY_BACKENDS"
    )

    # Sessions
    jwt_secret_key: str = Field(default="change-me-in-production")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 24 * 7)
    min_password_length: int = Field(default=6)

    # Seed values for the platform settings singleton
    default_partner_link: str = Field(default="https://fbs.com/partner-link")
    default_wallet_address: str = Field(default="TBD_USDT_ADDRESS")
    default_bot_username: str = Field(default="your_telegram_bot")

    # Commission terms
    commission_rate: float = Field(default=0.5)
    profit_target_multiple: float = Field(default=2.0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
