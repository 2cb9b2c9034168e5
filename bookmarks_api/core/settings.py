from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application-level settings for the FastAPI service.

    This is separate from bookmarks_api.db.config.Settings, which focuses on the database layer.
    """

    # FastAPI metadata
    APP_NAME: str = Field(default="Bookmarks API")
    APP_DESCRIPTION: str = Field(
        default=(
            "Backend API for a personal bookmarking application. Stores bookmarks with "
            "extracted metadata, hierarchical categories and tags, per user."
        )
    )
    APP_VERSION: str = Field(default="0.1.0")

    # CORS
    CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Comma-separated list or JSON array of allowed origins. Default: *",
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True)
    CORS_ALLOW_METHODS: List[str] = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_HEADERS: List[str] = Field(default_factory=lambda: ["*"])

    # Startup behavior
    RUN_MIGRATIONS_ON_STARTUP: bool = Field(
        default=True,
        description="If true, run Alembic migrations (upgrade head) at app startup.",
    )
    AUTO_SEED: bool = Field(
        default=False,
        description="If true, run minimal database seeding after migrations.",
    )

    # Auth tokens and the session cookie
    JWT_SECRET_KEY: str = Field(default="change-this-secret-key-in-production")
    JWT_ALGORITHM: str = Field(default="HS256")
    AUTH_TOKEN_EXPIRE_MINUTES: int = Field(
        default=60 * 24 * 14, description="Lifetime of a session token; every refresh issues a new one."
    )
    AUTH_COOKIE_NAME: str = Field(default="bookmarks_auth")
    AUTH_COOKIE_SECURE: bool = Field(default=False)
    ADMIN_PATH_PREFIX: str = Field(
        default="/api/v1/admin",
        description="Requests under this path refresh the session as an admin account.",
    )

    # Seeded accounts (used only by bookmarks_api.db.seed)
    ADMIN_EMAIL: Optional[str] = Field(default=None)
    ADMIN_PASSWORD: Optional[str] = Field(default=None)
    DEFAULT_CATEGORY_NAME: str = Field(
        default="Uncategorized", description="Name of the initial category created for every new user."
    )

    # File storage for fetched bookmark images
    STORAGE_DIR: str = Field(default="data/files")
    IMAGE_FETCH_TIMEOUT: float = Field(default=10.0, description="Seconds before an image fetch gives up.")

    # Environment label
    ENVIRONMENT: Optional[str] = Field(
        default=None, description="Environment label (dev/test/prod)"
    )

    # Automatically load from .env at runtime.
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        """
        Accept both JSON array format and comma-separated formats for CORS origins.
        """
        if v is None:
            return ["*"]
        if isinstance(v, str):
            parts = [p.strip() for p in v.split(",") if p.strip()]
            return parts or ["*"]
        if isinstance(v, list):
            return v or ["*"]
        return ["*"]


# PUBLIC_INTERFACE
@lru_cache()
def get_app_settings() -> AppSettings:
    """
    Return the AppSettings read from environment variables.

    Note:
      The instance is cached for the process; call `get_app_settings.cache_clear()`
      after changing the environment.
    """
    return AppSettings()
