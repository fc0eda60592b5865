"""
Application configuration.

All configuration is loaded from environment variables.
Never hardcode secrets or connection strings in code.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Cooperative Finance Review"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "postgresql://localhost:5432/finance_review"
    )

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json")

    # Workflow
    # How many times submit_edit re-reads the record after losing
    # an optimistic-concurrency race before giving up.
    EDIT_MAX_ATTEMPTS: int = int(os.getenv("EDIT_MAX_ATTEMPTS", "3"))
    COMMENT_EXCERPT_LENGTH: int = int(os.getenv("COMMENT_EXCERPT_LENGTH", "50"))
    NOTIFICATION_PAGE_SIZE: int = int(os.getenv("NOTIFICATION_PAGE_SIZE", "50"))


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    The Settings object is created once and reused for all
    subsequent calls.
    """
    return Settings()
