# backend/lessonbook/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    """Application settings, read from the environment (and backend/.env)."""

    model_config = SettingsConfigDict(
        env_prefix="LESSONBOOK_",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(default="development")
    is_testing: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Storage
    database_url: str = Field(default="sqlite:///./lessonbook.db")
    storage_backend: Literal["sql", "memory"] = Field(default="sql")

    # Auth (identity is resolved from a signed bearer token)
    secret_key: SecretStr = Field(default=SecretStr("dev-only-change-me"))
    algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 24)

    # Booking lifecycle policy
    default_cancel_reason: str = Field(default="Cancelled without a specific reason")
    cancel_reason_policy: Literal["default", "require"] = Field(default="default")
    admin_notification_target: Literal["student", "teacher"] = Field(default="student")

    # Listing
    default_page_limit: int = Field(default=10, ge=1, le=100)
    max_page_limit: int = Field(default=100, ge=1, le=100)

    # Message formatting fallback when a receiver has no timezone stored
    default_timezone: str = Field(default="America/New_York")

    @field_validator("default_cancel_reason")
    @classmethod
    def _non_empty_reason(cls, value: str) -> str:
        cleaned = (value or "").strip()
        if not cleaned:
            raise ValueError("default_cancel_reason must not be empty")
        return cleaned

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def get_database_url(self) -> str:
        return self.database_url


settings = Settings()
if is_running_tests():
    settings.is_testing = True
