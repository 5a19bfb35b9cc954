"""
URL Scraper

Fetches a web page, extracts its text and keeps a history of every scrape.
- Fetcher: HTTP GET with fixed headers, timeout and redirect bound
- Preprocessor: HTML cleanup and parsing into a Document
- TextExtractor: annotated, deduplicated text (whole body or per selector)
- HistoryStore: SQLAlchemy log of past scrapes

Public API surface:
  Orchestrator: Scraper, scrape_url
  Pipeline stages: Fetcher, Preprocessor, TextExtractor, assemble
  Data models: ScrapeResult, FetchedPage, HistoryEntry, ScraperConfig
  Error types: ScraperError and its subclasses
  Persistence: HistoryStore
"""

from .main import Scraper, scrape_url

from .fetcher import Fetcher
from .preprocessor import Preprocessor
from .extractor import TextExtractor
from .assembler import assemble
from .document import BaseDocument, BaseElement

from .config import ScraperConfig
from .schemas import ScrapeResult, FetchedPage, HistoryEntry, SelectorMap

from .exceptions import (
    ErrorKind,
    ScraperError,
    FetchError,
    InvalidURLError,
    FetchTimeoutError,
    HTTPStatusError,
    ServerError,
    NoResponseError,
    UnknownFetchError,
    ExtractionError,
    HistoryError,
)

from .history import HistoryStore

__version__ = "0.1.0"
__all__ = [
    "Scraper",
    "scrape_url",
    "Fetcher",
    "Preprocessor",
    "TextExtractor",
    "assemble",
    "BaseDocument",
    "BaseElement",
    "ScraperConfig",
    "ScrapeResult",
    "FetchedPage",
    "HistoryEntry",
    "SelectorMap",
    "ErrorKind",
    "ScraperError",
    "FetchError",
    "InvalidURLError",
    "FetchTimeoutError",
    "HTTPStatusError",
    "ServerError",
    "NoResponseError",
    "UnknownFetchError",
    "ExtractionError",
    "HistoryError",
    "HistoryStore",
]
