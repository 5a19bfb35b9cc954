"""
Document interface the TextExtractor works against.

The extractor only needs three things from a parsed page: run a CSS
selector, read an element's tag name and its own text, and list its child
elements. BaseDocument/BaseElement describe exactly that, so the extractor
can be driven by any HTML library (or by a hand-built tree in tests).
SoupDocument/SoupElement are the BeautifulSoup-backed implementation
produced by the Preprocessor.
"""

from abc import ABC, abstractmethod
from typing import Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

# Tag name used when an element reports none
DEFAULT_TAG_NAME = "span"


class BaseElement(ABC):
    """A single element of a parsed document."""

    @property
    @abstractmethod
    def tag_name(self) -> str:
        """Lowercase tag name."""
        pass

    @abstractmethod
    def own_text(self) -> str:
        """
        Text that belongs to this element itself.

        Text of descendant elements is excluded, so
        <div>a<p>b</p>c</div> gives "ac". Leading and trailing whitespace
        is kept; callers strip.
        """
        pass

    @abstractmethod
    def children(self) -> list["BaseElement"]:
        """Direct child elements, in document order (text nodes excluded)."""
        pass

    @abstractmethod
    def descendants(self) -> list["BaseElement"]:
        """Every element below this one, any depth, in document order."""
        pass


class BaseDocument(ABC):
    """A parsed page."""

    @abstractmethod
    def select(self, selector: str) -> list[BaseElement]:
        """Elements matching a CSS selector, in document order."""
        pass

    @abstractmethod
    def root(self) -> BaseElement:
        """The <body> element, or the document root if there is no body."""
        pass


class SoupElement(BaseElement):
    """BaseElement over a bs4 Tag."""

    __slots__ = ("_tag",)

    def __init__(self, tag: Tag):
        self._tag = tag

    @property
    def tag_name(self) -> str:
        return (self._tag.name or DEFAULT_TAG_NAME).lower()

    def own_text(self) -> str:
        # Direct text nodes only. Comments, CDATA, doctypes and the like are
        # PreformattedString subclasses and never count as visible text.
        # Reading the nodes leaves the source tree untouched.
        return "".join(
            str(node) for node in self._tag.children
            if isinstance(node, NavigableString)
            and not isinstance(node, PreformattedString)
        )

    def children(self) -> list[BaseElement]:
        return [SoupElement(node) for node in self._tag.children if isinstance(node, Tag)]

    def descendants(self) -> list[BaseElement]:
        return [SoupElement(node) for node in self._tag.find_all(True)]

    def __eq__(self, other) -> bool:
        return isinstance(other, SoupElement) and other._tag is self._tag

    def __hash__(self) -> int:
        return id(self._tag)

    def __repr__(self) -> str:
        return f"SoupElement(<{self.tag_name}>)"


class SoupDocument(BaseDocument):
    """BaseDocument over a BeautifulSoup tree."""

    def __init__(self, soup: BeautifulSoup, parser: Optional[str] = None):
        self.soup = soup
        self.parser = parser    # Tree builder that produced the soup

    def select(self, selector: str) -> list[BaseElement]:
        # Malformed selectors raise soupsieve's SelectorSyntaxError; the
        # extractor handles that per field.
        return [SoupElement(tag) for tag in self.soup.select(selector)]

    def root(self) -> BaseElement:
        body = self.soup.find("body")
        if body is not None:
            return SoupElement(body)
        return SoupElement(self.soup)
