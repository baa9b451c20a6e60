"""
Configuration and application state management.
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv
from fastapi import HTTPException

if TYPE_CHECKING:
    from .database import Database
    from .feeds import FeedParser
    from .ingestion import IngestionEngine
    from .summarizer import Summarizer

# Load environment variables
load_dotenv()


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse boolean from environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


class Config:
    """Application configuration from environment."""
    DB_PATH: Path = Path(os.getenv("DB_PATH", "./data/feedwise.db"))
    PORT: int = int(os.getenv("PORT", "5005"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Feed fetching
    FEED_TIMEOUT: int = int(os.getenv("FEED_TIMEOUT", "30"))  # seconds
    FEED_USER_AGENT: str = os.getenv(
        "FEED_USER_AGENT", "FeedWise/1.0 (+https://github.com/feedwise)"
    )
    RESOLVE_FAVICONS: bool = _parse_bool(os.getenv("RESOLVE_FAVICONS"), default=True)

    # Number of most recent items inspected by the new-content probe
    NEW_CONTENT_PROBE_ITEMS: int = int(os.getenv("NEW_CONTENT_PROBE_ITEMS", "5"))

    # Bodies shorter than this are returned as a "brief article" passthrough
    SUMMARY_MIN_LENGTH: int = int(os.getenv("SUMMARY_MIN_LENGTH", "200"))

    # Access control
    AUTH_API_KEY: str = os.getenv("AUTH_API_KEY", "")
    DEFAULT_USER_ID: int = int(os.getenv("DEFAULT_USER_ID", "1"))
    RATE_LIMIT_PER_MINUTE: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))

    @classmethod
    def auth_enabled(cls) -> bool:
        """Check if API key authentication is configured."""
        return bool(cls.AUTH_API_KEY)


config = Config()


class AppState:
    """Shared application state."""
    db: "Database | None" = None
    feed_parser: "FeedParser | None" = None
    ingestion: "IngestionEngine | None" = None
    summarizer: "Summarizer | None" = None


state = AppState()


def get_db() -> "Database":
    """Dependency to get database instance."""
    if not state.db:
        raise HTTPException(status_code=500, detail="Database not initialized")
    return state.db
