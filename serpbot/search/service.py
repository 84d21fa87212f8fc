"""Search and result resolution on top of a page fetcher and a result store."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from serpbot.search.layouts import BING_LAYOUT, SerpLayout
from serpbot.search.models import SearchResult, StoredResult
from serpbot.search.parser import extract_search_results
from serpbot.search.store import ResultStore
from serpbot.web.client import PageFetcher, WebFetchError
from serpbot.web.content import PageContent, extract_page_content

if TYPE_CHECKING:
    from serpbot.config.schema import Config


class SearchError(Exception):
    """Raised when a search or a page fetch fails."""


class ResultNotFoundError(SearchError):
    """Raised when a result ID is unknown or has expired."""

    def __init__(self, result_id: str):
        super().__init__(f"no search result found for ID {result_id}")
        self.result_id = result_id


def build_fetcher(config: "Config") -> PageFetcher:
    """Create the transport selected by search.transport."""
    if config.search.transport == "http":
        from serpbot.web.client import HttpPageFetcher

        return HttpPageFetcher(config.search, config.http)

    from serpbot.web.browser import BrowserPageFetcher

    return BrowserPageFetcher(config.search, config.browser)


class SearchService:
    """Run searches and resolve stored results back to their pages."""

    def __init__(
        self,
        store: ResultStore,
        fetcher: PageFetcher,
        *,
        layout: SerpLayout | None = None,
        max_content_chars: int = 8000,
    ):
        self.store = store
        self.fetcher = fetcher
        self.layout = layout or BING_LAYOUT
        self.max_content_chars = max_content_chars

    @classmethod
    def from_config(
        cls,
        config: "Config",
        *,
        store: ResultStore | None = None,
        fetcher: PageFetcher | None = None,
    ) -> "SearchService":
        store = store or ResultStore(
            ttl_s=config.store.ttl_s,
            max_results=config.store.max_results,
        )
        return cls(
            store,
            fetcher or build_fetcher(config),
            layout=BING_LAYOUT.with_origin(config.search.origin, config.search.site_domain),
            max_content_chars=config.content.max_chars,
        )

    async def search(self, query: str, num_results: int) -> list[SearchResult]:
        """
        Search and store up to num_results results.

        When the page yields nothing, a single placeholder pointing at the
        search page itself is returned instead.
        """
        if num_results <= 0:
            return []

        self.store.cleanup()
        try:
            page = await self.fetcher.fetch_search_page(query)
        except WebFetchError as e:
            raise SearchError(f"search failed: {e}") from e

        results: list[SearchResult] = list(
            extract_search_results(
                page.html,
                num_results,
                self.store.generate_id,
                self.store.put,
                layout=self.layout,
                clock=self.store.now,
            )
        )
        if not results:
            logger.info("No results found, adding search page link as result")
            results.append(self._placeholder(query, page.url))
        return results

    def resolve(self, result_id: str) -> StoredResult:
        self.store.cleanup()
        record = self.store.get(result_id)
        if record is None:
            raise ResultNotFoundError(result_id)
        return record

    async def fetch_content(self, result_id: str) -> PageContent:
        """Fetch the page behind a stored result and extract its main text."""
        record = self.resolve(result_id)
        if not record.link:
            raise SearchError(f"result {result_id} has no link to fetch")

        logger.info("Fetching page content: {}", record.link)
        try:
            page = await self.fetcher.fetch_page(record.link)
        except WebFetchError as e:
            raise SearchError(f"failed to fetch page content: {e}") from e
        return extract_page_content(page.html, max_chars=self.max_content_chars)

    def _placeholder(self, query: str, search_url: str) -> StoredResult:
        record = StoredResult(
            id=self.store.generate_id("result_fallback"),
            title=f"Search Results: {query}",
            link=search_url,
            snippet=(
                f'Unable to parse search results for "{query}", '
                "but you can visit the search page directly."
            ),
            timestamp=self.store.now(),
        )
        self.store.put(record)
        return record
