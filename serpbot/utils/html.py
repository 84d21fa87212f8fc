"""HTML parsing helpers shared by result and page extraction."""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag


class MarkupParseError(Exception):
    """Raised when markup cannot be parsed at all."""


def parse_markup(markup: str | bytes) -> BeautifulSoup:
    if not isinstance(markup, (str, bytes)):
        raise MarkupParseError(f"markup must be str or bytes, got {type(markup).__name__}")
    try:
        return BeautifulSoup(markup, "html.parser")
    except Exception as e:
        raise MarkupParseError(f"failed to parse markup: {e}") from e


def text_of(node: Tag | None) -> str:
    """Element text with whitespace collapsed."""
    if node is None:
        return ""
    return " ".join(node.get_text().split())
