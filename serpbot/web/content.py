"""Main content extraction for fetched target pages."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from serpbot.utils.html import parse_markup, text_of

NOISE_SELECTOR = (
    "script, style, iframe, noscript, nav, header, footer, .header, .footer, "
    ".nav, .sidebar, .ad, .advertisement, #header, #footer, #nav, #sidebar"
)

MAIN_CONTENT_SELECTORS = (
    "main",
    "article",
    ".article",
    ".post",
    ".content",
    "#content",
    ".main",
    "#main",
    ".body",
    "#body",
    ".entry",
    ".entry-content",
    ".post-content",
    ".article-content",
    ".text",
    ".detail",
)

MIN_CONTENT_CHARS = 100
MIN_PARAGRAPH_CHARS = 20
DEFAULT_MAX_CHARS = 8000
TRUNCATION_MARKER = "... (content truncated)"


@dataclass(slots=True)
class PageContent:
    """Readable text of a target page."""

    title: str
    text: str
    strategy: str
    truncated: bool = False

    def render(self) -> str:
        if self.title:
            return f"Title: {self.title}\n\n{self.text}"
        return self.text


def extract_page_content(html: str, *, max_chars: int = DEFAULT_MAX_CHARS) -> PageContent:
    """
    Pull the readable main text out of a page.

    Tries the first matching main-area container, then paragraphs of useful
    length, then the whole body.
    """
    soup = parse_markup(html)
    title = text_of(soup.title)

    for node in soup.select(NOISE_SELECTOR):
        node.decompose()

    text, strategy = "", "none"
    for selector in MAIN_CONTENT_SELECTORS:
        node = soup.select_one(selector)
        if node is not None:
            text, strategy = _block_text(node), f"selector:{selector}"
            logger.debug("Content selector {} matched ({} chars)", selector, len(text))
            break

    if len(text) < MIN_CONTENT_CHARS:
        paragraphs = [text_of(p) for p in soup.find_all("p")]
        paragraphs = [p for p in paragraphs if len(p) > MIN_PARAGRAPH_CHARS]
        if paragraphs:
            text, strategy = "\n\n".join(paragraphs), "paragraphs"

    if len(text) < MIN_CONTENT_CHARS:
        body = soup.body or soup
        text, strategy = _block_text(body), "body"

    truncated = len(text) > max_chars
    if truncated:
        text = text[:max_chars] + TRUNCATION_MARKER

    logger.info("Extracted page content via {} ({} chars)", strategy, len(text))
    return PageContent(title=title, text=text, strategy=strategy, truncated=truncated)


def _block_text(node) -> str:
    raw = node.get_text("\n")
    lines = (" ".join(line.split()) for line in raw.splitlines())
    return "\n".join(line for line in lines if line)
