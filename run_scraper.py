#!/usr/bin/env python3
"""
CLI script to scrape a URL.

Fetches the page, extracts either the whole body text or the named selector
fields, prints the result envelope as JSON and records it in the history
database (see run_history.py to browse it).

Examples:
  python run_scraper.py https://example.com
  python run_scraper.py https://example.com -s title=h1 -s links="nav a"
  python run_scraper.py https://example.com --selectors-file fields.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

from url_scraper.config import ScraperConfig
from url_scraper.exceptions import HistoryError
from url_scraper.history import HistoryStore
from url_scraper.logger import setup_logger
from url_scraper.main import Scraper


def parse_selector(value: str) -> tuple[str, str]:
    """Parse a NAME=SELECTOR argument."""
    name, sep, selector = value.partition("=")
    name, selector = name.strip(), selector.strip()
    if not sep or not name or not selector:
        raise argparse.ArgumentTypeError(f"expected NAME=SELECTOR, got {value!r}")
    return name, selector


def load_selectors(args) -> dict:
    selectors = {}
    if args.selectors_file:
        data = json.loads(Path(args.selectors_file).read_text(encoding="utf-8"))
        if not isinstance(data, dict) or not all(
            isinstance(k, str) and k and isinstance(v, str) for k, v in data.items()
        ):
            raise ValueError("selectors file must be a JSON object of name → CSS selector")
        selectors.update(data)
    # -s flags win over the file for the same name
    selectors.update(dict(args.selector or []))
    return selectors


def main():
    config = ScraperConfig.from_env()

    parser = argparse.ArgumentParser(description="Scrape a web page and record the result")
    parser.add_argument("url", help="URL to scrape (http:// or https://)")
    parser.add_argument("--selector", "-s", action="append", type=parse_selector,
                        metavar="NAME=SELECTOR", help="Named CSS selector (repeatable)")
    parser.add_argument("--selectors-file", help="JSON file mapping names to CSS selectors")
    parser.add_argument("--db", default=config.db_url, help="History database URL")
    parser.add_argument("--no-history", action="store_true", help="Do not record this scrape")
    parser.add_argument("--output", "-o", help="Write the JSON result to this file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", help="Also write logs to this file")
    args = parser.parse_args()

    setup_logger(level=logging.DEBUG if args.verbose else config.log_level, log_file=args.log_file)

    try:
        selectors = load_selectors(args)
    except (OSError, ValueError) as e:
        print(f"✗ Could not load selectors: {e}", file=sys.stderr)
        sys.exit(2)

    history = None
    if not args.no_history:
        try:
            history = HistoryStore(args.db)
        except HistoryError as e:
            # The scrape still runs; it just isn't recorded
            print(f"  History disabled: {e.message}", file=sys.stderr)

    try:
        result = Scraper(config=config, history=history).scrape(args.url, selectors or None)
    finally:
        if history is not None:
            history.close()

    # ensure_ascii=False keeps Japanese error messages and page text readable
    output = json.dumps(result.to_response(), indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"{'✓' if result.success else '✗'} Saved to: {args.output}")
    else:
        print(output)

    sys.exit(0 if result.success else 1)


if __name__ == "__main__":
    main()
