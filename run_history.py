#!/usr/bin/env python3
"""
CLI script to browse the scraping history.

  python run_history.py list [--limit N]   recent scrapes, newest first
  python run_history.py show ID            one scrape in detail
"""

import argparse
import logging
import sys

from dotenv import load_dotenv
load_dotenv()

from url_scraper.config import ScraperConfig
from url_scraper.exceptions import HistoryError
from url_scraper.history import HistoryStore
from url_scraper.logger import setup_logger
from url_scraper.schemas import HistoryEntry


def format_row(entry: HistoryEntry) -> str:
    mark = "✓" if entry.succeeded else "✗"
    when = entry.created_at.strftime("%Y-%m-%d %H:%M:%S")
    return f"{entry.id:>5}  {mark}  {when}  {entry.url}"


def show_entry(entry: HistoryEntry):
    print(f"ID:       {entry.id}")
    print(f"URL:      {entry.url}")
    print(f"Status:   {entry.status}")
    print(f"Created:  {entry.created_at.isoformat()}")
    if entry.selectors:
        print("Selectors:")
        for name, selector in entry.selectors.items():
            print(f"  {name}: {selector}")

    if not entry.succeeded:
        print(f"\nError: {entry.error}")
        return

    data = entry.data
    if isinstance(data, dict):
        for name, text in data.items():
            print(f"\n[{name}]")
            print(text if text else "(no match)")
    else:
        print("\n" + (data or "(no text)"))


def main():
    config = ScraperConfig.from_env()

    parser = argparse.ArgumentParser(description="Browse the scraping history")
    parser.add_argument("--db", default=config.db_url, help="History database URL")
    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List recent scrapes")
    list_cmd.add_argument("--limit", "-n", type=int, default=config.history_limit)

    show_cmd = sub.add_parser("show", help="Show one scrape")
    show_cmd.add_argument("id", type=int)

    args = parser.parse_args()
    # Quiet by default: this script's output is the listing itself
    setup_logger(level=logging.WARNING)

    try:
        with HistoryStore(args.db) as store:
            if args.command == "list":
                entries = store.get_recent(args.limit)
                if not entries:
                    print("No history yet.")
                for entry in entries:
                    print(format_row(entry))
            else:
                entry = store.get_by_id(args.id)
                if entry is None:
                    print(f"✗ No history entry with id {args.id}")
                    sys.exit(1)
                show_entry(entry)
    except HistoryError as e:
        print(f"✗ {e.message}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
