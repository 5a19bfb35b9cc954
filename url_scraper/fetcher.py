"""
Fetcher: the outbound HTTP GET.

Validates the URL, sends the request with fixed browser-like headers, a
timeout and a redirect bound, and classifies transport failures into the
FetchError subclasses. A 4xx response is still a successful fetch: the
FetchedPage carries the status and the caller decides what to report.
No retries.
"""

import re
import time
from typing import Callable, Optional

import requests

from .config import ScraperConfig
from .exceptions import (
    FetchError,
    FetchTimeoutError,
    InvalidURLError,
    NoResponseError,
    ServerError,
    UnknownFetchError,
)
from .logger import get_module_logger
from .preprocessor import Preprocessor
from .schemas import FetchedPage

logger = get_module_logger("fetcher")

URL_PATTERN = re.compile(r'^https?://.+')

CHUNK_SIZE = 8192


def is_valid_url(url) -> bool:
    """True if url is a string starting with http:// or https://."""
    return isinstance(url, str) and URL_PATTERN.match(url) is not None


class Fetcher:
    """Fetches a single page per call."""

    def __init__(
        self,
        config: Optional[ScraperConfig] = None,
        session_factory: Callable[[], requests.Session] = requests.Session
    ):
        """
        Initialize fetcher.

        Args:
            config: Timeout, redirect bound and headers (defaults if omitted)
            session_factory: Builds the HTTP session used for one fetch.
                             A fresh session per call keeps concurrent
                             fetches independent.
        """
        self.config = config or ScraperConfig()
        self._session_factory = session_factory

    def fetch(self, url: str) -> FetchedPage:
        """
        Fetch a page.

        Args:
            url: Absolute http(s) URL

        Returns:
            FetchedPage (status may be 4xx)

        Raises:
            InvalidURLError: url is not http(s); nothing is sent
            FetchTimeoutError, ServerError, NoResponseError, UnknownFetchError
        """
        if not is_valid_url(url):
            raise InvalidURLError(f"Invalid URL: {url!r}", url=url)

        logger.info(f"Fetching {url}")
        # requests only bounds each socket operation; the deadline bounds the
        # whole fetch, body included.
        deadline = time.monotonic() + self.config.timeout
        session = self._session_factory()
        try:
            session.max_redirects = self.config.max_redirects
            response = session.get(
                url,
                headers=self.config.request_headers(),
                timeout=self.config.timeout,
                allow_redirects=True,
                stream=True,
            )
            try:
                page = self._to_page(url, response, deadline)
            finally:
                response.close()
        except FetchError:
            raise
        except Exception as e:
            raise self._classify(url, e) from e
        finally:
            session.close()

        logger.info(f"Fetched {url}: {page.status_code} ({len(page.html)} chars, {page.charset})")
        return page

    def _read_body(self, url: str, response: requests.Response, deadline: float) -> bytes:
        """Read the streamed body, giving up once the deadline has passed."""
        chunks = []
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if time.monotonic() > deadline:
                logger.warning(f"Timeout reading {url}: over {self.config.timeout}s")
                raise FetchTimeoutError(
                    f"Read of {url} exceeded {self.config.timeout}s",
                    url=url,
                    details={"timeout": self.config.timeout},
                )
            chunks.append(chunk)
        return b"".join(chunks)

    def _to_page(self, url: str, response: requests.Response, deadline: float) -> FetchedPage:
        status = response.status_code
        reason = response.reason or ""

        if status >= 500:
            logger.warning(f"Server error for {url}: {status} {reason}")
            raise ServerError(status, reason, url=url)

        content_type = response.headers.get("Content-Type", "")
        header_charset = None
        if "charset=" in content_type.lower():
            header_charset = content_type.lower().split("charset=")[-1].split(";")[0]

        body = self._read_body(url, response, deadline)
        html, charset = Preprocessor.decode(body, header_charset)
        return FetchedPage(
            url=response.url or url,
            status_code=status,
            reason=reason,
            html=html,
            charset=charset,
        )

    def _classify(self, url: str, error: Exception) -> FetchError:
        """Map a requests exception to a FetchError subclass."""
        details = {"error": str(error), "type": type(error).__name__}

        # ConnectTimeout is both a Timeout and a ConnectionError; the
        # deadline is what the user needs to hear about.
        if isinstance(error, requests.Timeout):
            logger.warning(f"Timeout fetching {url}: {error}")
            return FetchTimeoutError(str(error), url=url, details=details)

        if isinstance(error, requests.ConnectionError):
            logger.warning(f"No response from {url}: {error}")
            return NoResponseError(str(error), url=url, details=details)

        logger.error(f"Fetch failed for {url}: {error}")
        return UnknownFetchError(str(error), url=url, details=details)


def fetch(url: str, config: Optional[ScraperConfig] = None) -> FetchedPage:
    """Convenience function to fetch a page."""
    return Fetcher(config).fetch(url)
