"""
Runtime configuration for the URL scraper.

Values come from URL_SCRAPER_* environment variables (the CLI scripts load a
.env file first); anything unset keeps the default below.
"""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .logger import resolve_level

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,"
    "image/avif,image/webp,*/*;q=0.8"
)
DEFAULT_ACCEPT_LANGUAGE = "ja,en-US;q=0.7,en;q=0.3"

# Environment variable → config field
ENV_VARS = {
    "URL_SCRAPER_TIMEOUT": "timeout",
    "URL_SCRAPER_MAX_REDIRECTS": "max_redirects",
    "URL_SCRAPER_USER_AGENT": "user_agent",
    "URL_SCRAPER_DB_URL": "db_url",
    "URL_SCRAPER_HISTORY_LIMIT": "history_limit",
    "URL_SCRAPER_LOG_LEVEL": "log_level",
}


class ScraperConfig(BaseModel):
    """Settings shared by the fetcher, the history store and the CLI scripts."""
    timeout: float = Field(default=20.0, gt=0)        # Seconds, deadline for the whole fetch incl. body
    max_redirects: int = Field(default=5, ge=0)
    user_agent: str = DEFAULT_USER_AGENT
    accept: str = DEFAULT_ACCEPT
    accept_language: str = DEFAULT_ACCEPT_LANGUAGE
    db_url: str = "sqlite:///scraping_history.db"
    history_limit: int = Field(default=50, gt=0)      # Default size of `run_history.py list`
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        resolve_level(value)
        return value.strip().upper()

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "ScraperConfig":
        """
        Build a config from URL_SCRAPER_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ (handy in tests)

        Returns:
            ScraperConfig; pydantic raises ValidationError on bad values
        """
        environ = os.environ if environ is None else environ
        values = {
            field: environ[name]
            for name, field in ENV_VARS.items()
            if environ.get(name)
        }
        return cls(**values)

    def request_headers(self) -> dict:
        """Headers sent with every page request."""
        return {
            "User-Agent": self.user_agent,
            "Accept": self.accept,
            "Accept-Language": self.accept_language,
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
        }
