"""
Main orchestrator for the URL scraper.

Coordinates the pipeline: Fetcher → Preprocessor → TextExtractor → assemble.
Each stage runs once per request, in order. The first failure ends the
request with a failed ScrapeResult, so nothing partial is ever returned.
"""

from typing import Optional

from .assembler import assemble
from .config import ScraperConfig
from .exceptions import ExtractionError, FetchError, HistoryError, HTTPStatusError
from .extractor import TextExtractor
from .fetcher import Fetcher
from .history import HistoryStore
from .logger import get_module_logger, setup_logger
from .preprocessor import Preprocessor
from .schemas import ScrapeResult, SelectorMap

logger = get_module_logger("main")


class Scraper:
    """
    Main orchestrator for scraping.

    Holds no per-request state, so one instance can serve concurrent
    requests. The optional history store is owned by the caller.
    """

    def __init__(
        self,
        config: Optional[ScraperConfig] = None,
        fetcher: Optional[Fetcher] = None,
        preprocessor: Optional[Preprocessor] = None,
        extractor: Optional[TextExtractor] = None,
        history: Optional[HistoryStore] = None,
        log_level: int = None
    ):
        if log_level is not None:
            setup_logger(level=log_level)

        self.config = config or ScraperConfig()
        self.fetcher = fetcher or Fetcher(self.config)
        self.preprocessor = preprocessor or Preprocessor()
        self.extractor = extractor or TextExtractor()
        self.history = history

    def scrape(self, url: str, selectors: Optional[SelectorMap] = None) -> ScrapeResult:
        """
        Scrape a URL and record the outcome.

        Args:
            url: Page to fetch (must start with http:// or https://)
            selectors: Optional mapping of field name → CSS selector

        Returns:
            ScrapeResult; this method does not raise for scrape failures
        """
        logger.info(f"Scrape started: {url}")
        result = self._run(url, selectors)
        logger.info(f"Scrape {'succeeded' if result.success else 'failed'}: {url}")

        if self.history is not None:
            self._record(url, result, selectors)
        return result

    def _run(self, url: str, selectors: Optional[SelectorMap]) -> ScrapeResult:
        # Stage 1: Fetch
        # 4xx pages arrive as a normal FetchedPage and are reported here.
        try:
            page = self.fetcher.fetch(url)
            if page.status_code >= 400:
                raise HTTPStatusError(page.status_code, page.reason, url=url)
        except FetchError as e:
            logger.warning(f"Fetch failed ({e.kind.value}): {e.message}")
            return assemble(e)

        # Stages 2 and 3: Parse + Extract
        try:
            document = self.preprocessor.parse(page.html)
            payload = self.extractor.extract(document, selectors)
        except Exception as e:
            logger.error(f"Extraction failed for {url}: {e}")
            return assemble(ExtractionError(str(e), {"url": url}))

        return assemble(payload)

    def _record(self, url: str, result: ScrapeResult, selectors: Optional[SelectorMap]):
        """Best-effort history write; a failure never changes the result."""
        try:
            self.history.save_result(url, result, selectors)
        except HistoryError as e:
            logger.error(f"History not recorded for {url!r}: {e.message}")
        except Exception as e:
            # Anything the store did not wrap still must not cost the result
            logger.error(f"History not recorded for {url!r}: {type(e).__name__}: {e}")


def scrape_url(url: str, selectors: Optional[SelectorMap] = None) -> ScrapeResult:
    """Convenience function to scrape a URL without recording history."""
    return Scraper().scrape(url, selectors)
