"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "postgresql+asyncpg://market:market_dev_password@db:5432/market"

    # Catalog queries
    query_timeout_seconds: float = Field(default=5.0, gt=0)
    placeholder_image: str = "/placeholder.svg"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True


settings = Settings()
