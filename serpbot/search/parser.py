"""Extract search results from result page markup."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag
from loguru import logger

from serpbot.search.layouts import BING_LAYOUT, SerpLayout, TitleProbe
from serpbot.search.links import host_of, is_same_site_navigation, normalize_link
from serpbot.search.models import StoredResult
from serpbot.utils.html import MarkupParseError, parse_markup, text_of

GenerateId = Callable[[str], str]
SaveResult = Callable[[StoredResult], None]

__all__ = ["Candidate", "MarkupParseError", "extract_block", "extract_search_results"]


@dataclass(slots=True)
class Candidate:
    """Raw fields pulled out of one result block."""

    title: str = ""
    link: str = ""
    snippet: str = ""


def extract_search_results(
    markup: str | bytes,
    num_results: int,
    generate_id: GenerateId,
    save_result: SaveResult,
    *,
    layout: SerpLayout = BING_LAYOUT,
    clock: Callable[[], float] = time.time,
) -> list[StoredResult]:
    """
    Extract up to num_results deduplicated results in document order.

    Block strategies run in priority order until enough results are found.
    When none of them yields anything, a coarse pass over result anchors is
    used instead. Finding nothing is not an error; an empty list is returned.

    Raises:
        MarkupParseError: markup is not text or the parser rejects it.
    """
    if num_results <= 0:
        return []

    soup = parse_markup(markup)
    run = _ExtractionRun(soup, num_results, generate_id, save_result, layout, clock)
    return run.execute()


def extract_block(block: Tag, layout: SerpLayout, position: int) -> Candidate:
    """Default title, link and snippet resolution for one result block."""
    candidate = Candidate()
    for probe in layout.title_probes:
        if candidate.title and candidate.link:
            break
        title, link = _run_probe(block, probe, layout.link_attrs)
        candidate.title = candidate.title or title
        candidate.link = candidate.link or link

    candidate.snippet = _resolve_snippet(block, candidate.title, layout)
    return candidate


def _run_probe(block: Tag, probe: TitleProbe, link_attrs: tuple[str, ...]) -> tuple[str, str]:
    root = block.select_one(probe.scope) if probe.scope else block
    if root is None:
        return "", ""

    anchor = root.select_one(probe.anchor) if probe.anchor else None
    if probe.title:
        title = text_of(root.select_one(probe.title))
    else:
        title = ""
        if anchor is not None and probe.nested_title:
            # A nested title element excludes icon and breadcrumb text in the anchor.
            title = text_of(anchor.select_one(probe.nested_title))
        title = title or text_of(anchor)

    link = _link_of(anchor, link_attrs) if anchor is not None else ""
    return title, link


def _link_of(anchor: Tag, link_attrs: tuple[str, ...]) -> str:
    for attr in link_attrs:
        value = anchor.get(attr)
        if isinstance(value, list):
            value = " ".join(value)
        if value and value.strip():
            return value.strip()
    return ""


def _resolve_snippet(block: Tag, title: str, layout: SerpLayout) -> str:
    if layout.caption_selector:
        caption = block.select_one(layout.caption_selector)
        if caption is not None:
            paragraph = caption.select_one(layout.caption_text_selector)
            snippet = text_of(paragraph) if paragraph is not None else text_of(caption)
            if snippet:
                return snippet

    if layout.summary_selector:
        snippet = text_of(block.select_one(layout.summary_selector))
        if snippet:
            return snippet

    snippet = text_of(block)
    if title and title in snippet:
        snippet = snippet.replace(title, "", 1).strip()
    if len(snippet) > layout.snippet_max_chars:
        snippet = snippet[: layout.snippet_max_chars] + "..."
    return snippet


class _ExtractionRun:
    """State of one extraction: accepted results and links seen so far."""

    def __init__(
        self,
        soup: BeautifulSoup,
        num_results: int,
        generate_id: GenerateId,
        save_result: SaveResult,
        layout: SerpLayout,
        clock: Callable[[], float],
    ):
        self.soup = soup
        self.num_results = num_results
        self.generate_id = generate_id
        self.save_result = save_result
        self.layout = layout
        self.clock = clock
        self.results: list[StoredResult] = []
        self._links: set[str] = set()
        self._visited: set[int] = set()

    @property
    def full(self) -> bool:
        return len(self.results) >= self.num_results

    def execute(self) -> list[StoredResult]:
        for strategy in self.layout.strategies:
            if self.full:
                break
            before = len(self.results)
            extractor = strategy.extractor or extract_block
            for index, block in enumerate(self.soup.select(strategy.selector)):
                if self.full:
                    break
                if id(block) in self._visited:
                    continue
                self._visited.add(id(block))
                if self._should_skip(block):
                    logger.debug("Skipping non-result block {} ({})", index, strategy.name)
                    continue
                self._accept_block(block, extractor(block, self.layout, index + 1), index + 1)
            logger.debug(
                "Strategy {} accepted {} results",
                strategy.name,
                len(self.results) - before,
            )

        if not self.results:
            logger.info("No results from block strategies, extracting from result links")
            self._extract_from_anchors()

        logger.info("Extracted {} search results", len(self.results))
        return self.results

    def _should_skip(self, block: Tag) -> bool:
        if self.layout.ad_selector and block.css.closest(self.layout.ad_selector) is not None:
            return True
        classes = block.get("class") or []
        return any(name in classes for name in self.layout.skip_classes)

    def _accept_block(self, block: Tag, candidate: Candidate, position: int) -> None:
        title = candidate.title
        link = normalize_link(candidate.link, self.layout.origin)
        snippet = candidate.snippet
        if link and is_same_site_navigation(link, self.layout.site_domain):
            logger.debug("Dropping engine navigation link: {}", link[:80])
            link = ""

        if not (title or link or snippet):
            logger.debug("Skipping block {}: no title, link or snippet", position)
            return

        host = host_of(link)
        if not title:
            if host:
                title = f"Result from {host}"
            else:
                heading = text_of(block.select_one(self.layout.heading_selector))
                if heading:
                    title = heading[:200]
                else:
                    title = text_of(block)[:50] or f"Result {position}"
        if not snippet:
            snippet = f"Result from {host or link}" if link else title

        self._add(title, link, snippet)

    def _extract_from_anchors(self) -> None:
        layout = self.layout
        for index, anchor in enumerate(self.soup.select(layout.fallback_anchor_selector)):
            if self.full:
                break

            raw_link = _link_of(anchor, layout.link_attrs)
            if (
                not raw_link
                or raw_link.startswith("#")
                or raw_link.lower().startswith("javascript:")
                or "/search?" in raw_link
            ):
                continue

            link = normalize_link(raw_link, layout.origin)
            if not link or is_same_site_navigation(link, layout.site_domain):
                continue

            container = anchor.css.closest(layout.fallback_container_selector)
            title = text_of(anchor)
            if len(title) < layout.fallback_min_title_chars:
                heading = ""
                if container is not None:
                    heading = text_of(container.select_one(layout.fallback_heading_selector))
                title = heading or f"Result {index + 1}"

            snippet = ""
            if container is not None and layout.fallback_snippet_selector:
                snippet = text_of(container.select_one(layout.fallback_snippet_selector))
            if not snippet:
                snippet = f"Result from {host_of(link) or link}"

            self._add(
                title[: layout.fallback_title_max_chars],
                link,
                snippet[: layout.fallback_snippet_max_chars],
            )

    def _add(self, title: str, link: str, snippet: str) -> None:
        if link and link in self._links:
            logger.debug("Skipping duplicate result with link: {}", link[:80])
            return

        record = StoredResult(
            id=self.generate_id("result"),
            title=title,
            link=link,
            snippet=snippet,
            timestamp=self.clock(),
        )
        self.save_result(record)
        self.results.append(record)
        if link:
            self._links.add(link)
        logger.debug("Accepted result: title={!r}, link={!r}", title[:50], link[:50])
