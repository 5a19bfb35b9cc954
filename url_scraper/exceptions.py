"""
Custom exceptions for the URL scraper.

Every failure a scrape can run into has its own class and an ErrorKind tag:

  - InvalidURLError   → raised before any network traffic.
  - FetchTimeoutError → the request deadline expired.
  - HTTPStatusError   → the server answered with 4xx.
  - ServerError       → the server answered with 5xx.
  - NoResponseError   → the request went out but nothing came back (DNS,
                        refused connection, reset).
  - UnknownFetchError → any other transport failure.
  - ExtractionError   → parsing or extraction blew up after a good fetch.

None of these reach the caller of Scraper.scrape(): the assembler turns
them into a failed ScrapeResult. HistoryError is separate; the history log
is best-effort and its failures are only logged by the scraper.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Failure categories surfaced in a failed ScrapeResult."""
    INVALID_URL = "invalid_url"
    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    SERVER_ERROR = "server_error"
    NO_RESPONSE = "no_response"
    PARSE_ERROR = "parse_error"
    UNKNOWN = "unknown"


class ScraperError(Exception):
    """Base exception for all scraper errors."""

    kind = ErrorKind.UNKNOWN

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- Fetch failures ---

class FetchError(ScraperError):
    """Raised by the Fetcher when a page could not be retrieved."""

    def __init__(self, message: str, url: str = "", details: Optional[dict] = None):
        super().__init__(message, details)
        self.url = url


class InvalidURLError(FetchError):
    """URL does not start with http:// or https://."""
    kind = ErrorKind.INVALID_URL


class FetchTimeoutError(FetchError):
    kind = ErrorKind.TIMEOUT


class HTTPStatusError(FetchError):
    """
    The server answered with an HTTP error status.

    Raised as-is for 4xx, where the page body was fetched and only the
    status is reported back; 5xx raises the ServerError subclass.
    """
    kind = ErrorKind.HTTP_ERROR

    def __init__(
        self,
        status: int,
        status_text: str,
        url: str = "",
        details: Optional[dict] = None
    ):
        super().__init__(f"HTTP {status} {status_text}".strip(), url, details)
        self.status = status
        self.status_text = status_text


class ServerError(HTTPStatusError):
    """The server answered with a 5xx status."""
    kind = ErrorKind.SERVER_ERROR


class NoResponseError(FetchError):
    kind = ErrorKind.NO_RESPONSE


class UnknownFetchError(FetchError):
    kind = ErrorKind.UNKNOWN


# --- Post-fetch failures ---

class ExtractionError(ScraperError):
    """Raised when parsing or text extraction fails after a successful fetch."""
    kind = ErrorKind.PARSE_ERROR


# --- Persistence ---

class HistoryError(ScraperError):
    """Raised by the history store when the database cannot be read or written."""
