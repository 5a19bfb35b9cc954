"""
Pydantic schemas passed between the scraper stages and to its callers.

FetchedPage:  Fetcher → Preprocessor
ScrapeResult: the success/failure envelope returned by Scraper.scrape()
HistoryEntry: one row of the scraping history, read back from the store
"""

import json
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field, model_validator

from .exceptions import ErrorKind

# Field name → CSS selector, supplied per request
SelectorMap = dict[str, str]

# Successful payload: flattened text (no selectors) or one string per field
Payload = Union[str, dict[str, str]]


class FetchedPage(BaseModel):
    """A page as returned by the Fetcher."""
    url: str                      # Final URL after redirects
    status_code: int
    reason: str = ""              # HTTP status text, e.g. "Not Found"
    html: str = ""
    charset: str = "utf-8"        # Charset used to decode the body


class ScrapeResult(BaseModel):
    """
    Outcome of one scrape.

    Exactly one of data/error is set. When the request carried selectors,
    data is a mapping with exactly the requested field names.
    """
    success: bool
    data: Optional[Payload] = None
    error: Optional[str] = None
    # Kept out of the serialized envelope so the JSON shape stays
    # {success, data?, error?} for existing consumers.
    error_kind: Optional[ErrorKind] = Field(default=None, exclude=True)

    @model_validator(mode="after")
    def _check_envelope(self) -> "ScrapeResult":
        if self.success and (self.data is None or self.error is not None):
            raise ValueError("a successful result carries data and no error")
        if not self.success and (self.error is None or self.data is not None):
            raise ValueError("a failed result carries an error and no data")
        return self

    def to_response(self) -> dict:
        """Envelope dict with unset fields left out."""
        return self.model_dump(exclude_none=True)


class HistoryEntry(BaseModel):
    """A stored scrape, as read back from the history table."""
    id: int
    url: str
    status: str                             # "success" or "error"
    error: Optional[str] = None
    content: Optional[str] = None           # Flat text, or JSON for field maps
    selectors: Optional[SelectorMap] = None
    created_at: datetime
    updated_at: datetime

    @property
    def succeeded(self) -> bool:
        return self.status == "success"

    @property
    def data(self) -> Optional[Payload]:
        """Stored payload decoded back to flat text or a field mapping."""
        if self.content is None:
            return None
        if self.selectors:
            return json.loads(self.content)
        return self.content
