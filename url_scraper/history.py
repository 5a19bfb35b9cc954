"""
Scraping history: a SQLAlchemy-backed log of every scrape.

The store is opened by the caller and handed to the Scraper; nothing here is
module-level state. Writes are best-effort from the scraper's point of view
(see Scraper._record), but the store itself reports failures as HistoryError.
"""

import json
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text, create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Mapped, declarative_base, mapped_column, sessionmaker

from .exceptions import HistoryError
from .logger import get_module_logger
from .schemas import HistoryEntry, ScrapeResult, SelectorMap

logger = get_module_logger("history")

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ScrapingHistory(Base):
    __tablename__ = "scraping_history"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False)     # "success" or "error"
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    selectors: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # JSON of the SelectorMap
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_now, onupdate=_now)

    def to_entry(self) -> HistoryEntry:
        return HistoryEntry(
            id=self.id,
            url=self.url,
            status=self.status,
            error=self.error,
            content=self.content,
            selectors=json.loads(self.selectors) if self.selectors else None,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class HistoryStore:
    """Reads and writes the scraping_history table."""

    def __init__(self, db_url: str = "sqlite:///scraping_history.db"):
        self.db_url = db_url
        try:
            self.engine = create_engine(db_url, future=True)
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            logger.error(f"Failed to open history database {db_url}: {e}")
            raise HistoryError(f"Cannot open history database: {e}", {"db_url": db_url}) from e
        self.Session = sessionmaker(self.engine, expire_on_commit=False, future=True)
        logger.info(f"History store opened at: {db_url}")

    def save_result(
        self,
        url: str,
        result: ScrapeResult,
        selectors: Optional[SelectorMap] = None
    ) -> int:
        """
        Store a scrape outcome.

        Args:
            url: URL as submitted by the user
            result: ScrapeResult from the scraper
            selectors: Selectors used, if any

        Returns:
            id of the new row
        """
        content = result.data
        if isinstance(content, dict):
            content = json.dumps(content, ensure_ascii=False)

        record = ScrapingHistory(
            url=url,
            status="success" if result.success else "error",
            error=result.error,
            content=content,
            selectors=json.dumps(selectors, ensure_ascii=False) if selectors else None,
        )
        try:
            with self.Session() as s:
                s.add(record)
                s.commit()
                logger.info(f"Saved history #{record.id} for {url!r} ({record.status})")
                return record.id
        except (SQLAlchemyError, UnicodeError) as e:
            # sqlite3 raises UnicodeEncodeError itself for lone surrogates
            logger.error(f"Failed to save history for {url!r}: {e}")
            raise HistoryError(f"Failed to save history: {e}", {"url": url}) from e

    def get_recent(self, limit: int = 10) -> list[HistoryEntry]:
        """Most recent entries, newest first."""
        stmt = (
            select(ScrapingHistory)
            .order_by(ScrapingHistory.created_at.desc(), ScrapingHistory.id.desc())
            .limit(limit)
        )
        try:
            with self.Session() as s:
                return [row.to_entry() for row in s.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Failed to read history: {e}")
            raise HistoryError(f"Failed to read history: {e}") from e

    def get_by_id(self, entry_id: int) -> Optional[HistoryEntry]:
        """A single entry, or None if no row has this id."""
        try:
            with self.Session() as s:
                row = s.get(ScrapingHistory, entry_id)
                return row.to_entry() if row else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to read history #{entry_id}: {e}")
            raise HistoryError(f"Failed to read history entry: {e}", {"id": entry_id}) from e

    def close(self):
        self.engine.dispose()

    def __enter__(self) -> "HistoryStore":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
