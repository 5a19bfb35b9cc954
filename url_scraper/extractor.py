"""
TextExtractor: converts a parsed document into annotated text.

Two modes:
  - No selectors: every element under <body> is flattened into one string.
  - Selectors:    each named CSS selector yields its own string.

Both modes use the same line format. An element contributes the line
"<tag>text" when its own text (excluding descendant elements) is non-empty
after stripping. Each element of the working set contributes its line and
then the lines of its direct children. The collected lines are deduplicated
(first occurrence wins, order preserved) and joined with newlines.

Pipeline position: Fetcher → Preprocessor → TextExtractor → assemble().
Input:  BaseDocument (+ optional SelectorMap)
Output: str (flat text) or dict[str, str] (one entry per selector name)
"""

from typing import Iterable, Optional, Union

from .document import BaseDocument, BaseElement
from .logger import get_module_logger

logger = get_module_logger("extractor")


class TextExtractor:
    """Extracts annotated, deduplicated text from a document."""

    def extract(
        self,
        document: BaseDocument,
        selectors: Optional[dict[str, str]] = None
    ) -> Union[str, dict[str, str]]:
        """
        Extract text from a document.

        Args:
            document: Parsed document (non-content elements already removed)
            selectors: Optional mapping of field name → CSS selector.
                       An empty mapping behaves like no selectors.

        Returns:
            Flat text when no selectors are given, otherwise a dict with
            exactly the keys of `selectors`
        """
        if selectors:
            return self.extract_fields(document, selectors)
        return self.flatten(document)

    def flatten(self, document: BaseDocument) -> str:
        """Flatten every element under <body> (or the root) into one string."""
        elements = document.root().descendants()
        text = self.render(elements)
        logger.info(f"Flattened {len(elements)} elements into {len(text)} chars")
        return text

    def extract_fields(self, document: BaseDocument, selectors: dict[str, str]) -> dict[str, str]:
        """
        Extract one string per named selector.

        A selector that matches nothing gives "". A selector that fails to
        evaluate (malformed, or the parser raises) also gives "" and the
        remaining fields are still extracted.
        """
        logger.info(f"Extracting {len(selectors)} selector fields")
        fields = {}

        for name, selector in selectors.items():
            try:
                matched = document.select(selector)
                fields[name] = self.render(matched) if matched else ""
            except Exception as e:
                logger.warning(f"Selector '{name}' ({selector}) failed: {e}")
                fields[name] = ""
                continue

            preview = fields[name][:50] + ("..." if len(fields[name]) > 50 else "")
            logger.debug(f"Selector '{name}': {len(matched)} matches, {preview!r}")

        return fields

    def render(self, elements: Iterable[BaseElement]) -> str:
        """
        Render a set of elements to deduplicated, newline-joined lines.

        Each element is followed by its direct children. Children are often
        also members of the set themselves (body * contains them); the
        duplicate lines that produces are removed by the dedup step.
        """
        lines = []
        for element in elements:
            line = self.annotate(element)
            if line:
                lines.append(line)
            for child in element.children():
                child_line = self.annotate(child)
                if child_line:
                    lines.append(child_line)

        # dict keeps insertion order, so this keeps first occurrences
        return "\n".join(dict.fromkeys(lines))

    @staticmethod
    def annotate(element: BaseElement) -> Optional[str]:
        """Annotated line for one element, or None if it has no own text."""
        text = element.own_text().strip()
        if not text:
            return None
        return f"<{element.tag_name}>{text}"


def extract(
    document: BaseDocument,
    selectors: Optional[dict[str, str]] = None
) -> Union[str, dict[str, str]]:
    """Convenience function to extract text from a document."""
    return TextExtractor().extract(document, selectors)
