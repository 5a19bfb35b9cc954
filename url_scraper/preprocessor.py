"""
Preprocessor: turns fetched HTML into a SoupDocument ready for extraction.

- Sanitizes the raw HTML string (NULL bytes, control characters, line endings)
- Parses it with the html5lib → lxml → html.parser fallback chain
- Removes comments and non-content elements (script, style, meta, link,
  noscript) so they never contribute extracted text
- Detects the declared charset of raw bytes, with WHATWG label mapping

Design principle: never fail on bad HTML. Any markup produces a document,
possibly an empty one.
"""

import re
from typing import Optional

from bs4 import BeautifulSoup, Comment

from .document import SoupDocument
from .logger import get_module_logger

logger = get_module_logger("preprocessor")

# Tree builders tried in order. html5lib follows the WHATWG parsing algorithm
# and copes with the worst markup; lxml is fast and tolerant; html.parser
# ships with Python and is always available.
PARSERS = ("html5lib", "lxml", "html.parser")


class Preprocessor:
    """Rule-based HTML cleanup and parsing."""

    # Elements that never carry extractable page text
    NON_CONTENT_ELEMENTS = ["script", "style", "meta", "link", "noscript"]

    # WHATWG encoding spec: browsers silently remap these charsets.
    # https://encoding.spec.whatwg.org/#names-and-labels
    # Every browser decodes "iso-8859-1" as windows-1252, which defines
    # printable characters in 0x80–0x9F where iso-8859-1 has control codes.
    WHATWG_CHARSET_MAP = {
        'iso-8859-1': 'windows-1252',
        'iso8859-1': 'windows-1252',
        'iso88591': 'windows-1252',
        'latin-1': 'windows-1252',
        'latin1': 'windows-1252',
        'us-ascii': 'windows-1252',
        'ascii': 'windows-1252',
        'iso-8859-9': 'windows-1254',
        'iso-8859-11': 'windows-874',
        'x-sjis': 'shift_jis',
    }

    CONTROL_CHARS = ''.join(chr(c) for c in range(32) if c not in (9, 10, 13))

    @classmethod
    def normalize_charset(cls, charset: Optional[str]) -> str:
        """Map a declared charset label to the one browsers actually use."""
        if not charset:
            return 'utf-8'
        charset = charset.strip().strip('"\'').lower()
        return cls.WHATWG_CHARSET_MAP.get(charset, charset)

    @classmethod
    def detect_charset_from_bytes(cls, raw_bytes: bytes) -> str:
        """
        Detect charset from raw HTML bytes by scanning the first 2048 bytes
        for <meta charset=...> or <meta http-equiv="Content-Type" content="...; charset=...">.

        Returns the browser-equivalent charset or 'utf-8' as default.
        """
        # Declarations must sit in the first 1024 bytes; 2048 leaves slack.
        head_str = raw_bytes[:2048].decode('ascii', errors='ignore')

        m = re.search(r'<meta[^>]+charset=["\']?\s*([^\s"\';>]+)', head_str, re.IGNORECASE)
        if not m:
            m = re.search(
                r'<meta[^>]+content=["\'][^"\']*charset=([^\s"\';>]+)',
                head_str, re.IGNORECASE
            )
        if not m:
            return 'utf-8'

        return cls.normalize_charset(m.group(1))

    @classmethod
    def decode(cls, raw_bytes: bytes, charset: Optional[str] = None) -> tuple[str, str]:
        """
        Decode page bytes.

        Args:
            raw_bytes: Response body
            charset: Charset from the Content-Type header, if any

        Returns:
            Tuple of (text, charset actually used)
        """
        charset = cls.normalize_charset(charset) if charset else cls.detect_charset_from_bytes(raw_bytes)
        try:
            return raw_bytes.decode(charset, errors='replace'), charset
        except LookupError:
            logger.warning(f"Unknown charset '{charset}', decoding as utf-8")
            return raw_bytes.decode('utf-8', errors='replace'), 'utf-8'

    def _sanitize_html(self, html: str) -> str:
        """Fix string-level problems that trip up tree builders."""
        sanitized = html

        # NULL bytes crash some parsers and are never valid in text content
        if '\x00' in sanitized:
            sanitized = sanitized.replace('\x00', '')
            logger.debug("Removed NULL bytes")

        sanitized = sanitized.replace('\r\n', '\n').replace('\r', '\n')

        if any(c in sanitized for c in self.CONTROL_CHARS):
            sanitized = sanitized.translate(str.maketrans('', '', self.CONTROL_CHARS))
            logger.debug("Removed control characters")

        return sanitized

    def _build_soup(self, html: str) -> tuple[BeautifulSoup, str]:
        last_error = None
        for parser in PARSERS:
            try:
                return BeautifulSoup(html, parser), parser
            except Exception as e:
                logger.warning(f"{parser} parsing failed: {e}")
                last_error = e
        raise last_error

    def _strip_non_content(self, soup: BeautifulSoup) -> int:
        """Remove comments and non-content elements. Returns count removed."""
        removed = 0
        for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()
            removed += 1
        for elem in soup.find_all(self.NON_CONTENT_ELEMENTS):
            # Nested matches (a <link> inside <noscript>) go with their parent
            if elem.decomposed:
                continue
            elem.decompose()
            removed += 1
        return removed

    def parse(self, html: str) -> SoupDocument:
        """
        Parse HTML into a document with non-content elements removed.

        Args:
            html: Decoded HTML string

        Returns:
            SoupDocument
        """
        soup, parser = self._build_soup(self._sanitize_html(html))
        removed = self._strip_non_content(soup)
        logger.debug(f"Parsed with {parser}, removed {removed} non-content nodes")
        return SoupDocument(soup, parser=parser)


def parse_html(html: str) -> SoupDocument:
    """Convenience function to parse HTML into a SoupDocument."""
    return Preprocessor().parse(html)
