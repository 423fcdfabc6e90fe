"""
Configuration and settings for the site backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Document store selection
    store_backend: Literal["memory", "sql", "firestore"] = Field(default="memory")

    # SQL store (any SQLAlchemy URL)
    database_url: Optional[str] = Field(default=None)

    # Firestore store
    firebase_project_id: Optional[str] = Field(default=None)
    firebase_credentials_path: Optional[str] = Field(default=None)

    # Base URL the page builders use for same-origin content fetches.
    public_base_url: str = Field(default="http://localhost:8000")
    request_timeout_seconds: float = Field(default=10.0)

    # Remote images the pages may render, as https://host/path-glob patterns.
    allowed_image_patterns: list[str] = Field(
        default_factory=lambda: [
            "https://raw.githubusercontent.com/imtusharrai/heart2heart/main/public/**"
        ]
    )
    placeholder_image: str = Field(default="/images/placeholder.jpg")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
