"""
Application configuration
"""
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings read from ``MIDSTRING_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(env_prefix="MIDSTRING_", env_file=".env", extra="ignore")

    # API
    API_TITLE: str = "Midstring API"
    API_VERSION: str = "1.0.0"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Storage
    STORAGE: Literal["memory", "sql"] = "memory"
    DATABASE_URL: str = "sqlite:///./midstring.db"

    LOG_LEVEL: str = "INFO"


settings = Settings()
