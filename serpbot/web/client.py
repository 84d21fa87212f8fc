"""Plain HTTP transport for result pages and target pages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol
from urllib.parse import quote_plus

import httpx
from loguru import logger

if TYPE_CHECKING:
    from serpbot.config.schema import HttpConfig, SearchConfig

BLOCK_PAGE_KEYWORDS = (
    "captcha",
    "verification",
    "verify you are human",
    "access denied",
    "blocked",
    "rate limit",
    "too many requests",
    "请验证",
    "验证码",
    "人机验证",
)

RESULT_PAGE_MARKERS = ("b_results", "b_algo")


class WebFetchError(Exception):
    """Raised when a page cannot be fetched."""


class BlockedPageError(WebFetchError):
    """Raised when the engine answered with a verification or rate-limit page."""


class UnexpectedPageError(WebFetchError):
    """Raised when a search response has no result containers."""


@dataclass(slots=True)
class FetchedPage:
    """Raw page markup and the URL it was finally served from."""

    html: str
    url: str


class PageFetcher(Protocol):
    async def fetch_search_page(self, query: str) -> FetchedPage: ...

    async def fetch_page(self, url: str) -> FetchedPage: ...


def build_search_url(template: str, query: str) -> str:
    return template.replace("{query}", quote_plus(query))


def find_block_keywords(html: str) -> list[str]:
    """Verification/rate-limit keywords present in a page."""
    lowered = html.lower()
    return [keyword for keyword in BLOCK_PAGE_KEYWORDS if keyword in lowered]


def looks_like_result_page(html: str) -> bool:
    lowered = html.lower()
    return any(marker in lowered for marker in RESULT_PAGE_MARKERS)


class HttpPageFetcher:
    """Fetch pages with httpx."""

    def __init__(
        self,
        search_config: "SearchConfig | None" = None,
        http_config: "HttpConfig | None" = None,
    ):
        from serpbot.config.schema import HttpConfig, SearchConfig

        self.search_config = search_config or SearchConfig()
        self.config = http_config or HttpConfig()

    def _headers(self, *, referer: str | None = None) -> dict[str, str]:
        headers = {
            "User-Agent": self.config.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": self.config.accept_language,
        }
        if referer:
            headers["Referer"] = referer
        return headers

    async def fetch_search_page(self, query: str) -> FetchedPage:
        """Fetch the result page for query and check that it holds results."""
        url = build_search_url(self.search_config.search_url, query)
        logger.info("Searching URL: {}", url)
        page = await self._get(url, headers=self._headers())

        keywords = find_block_keywords(page.html)
        if keywords:
            logger.warning("Possible bot detection keywords: {}", ", ".join(keywords))
            raise BlockedPageError(
                "search engine returned a verification page; retry later"
            )
        if not looks_like_result_page(page.html):
            logger.warning("Response preview: {}", page.html[:500])
            raise UnexpectedPageError(
                "search response does not contain the expected result structure"
            )
        return page

    async def fetch_page(self, url: str) -> FetchedPage:
        """Fetch any page, sending the engine origin as referer."""
        return await self._get(url, headers=self._headers(referer=f"{self.search_config.origin}/"))

    async def _get(self, url: str, *, headers: dict[str, str]) -> FetchedPage:
        try:
            async with httpx.AsyncClient(follow_redirects=True) as client:
                response = await client.get(url, headers=headers, timeout=self.config.timeout_s)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise WebFetchError(f"fetch failed for {url}: {e}") from e

        logger.debug("Fetched {} ({} chars)", url, len(response.text))
        return FetchedPage(html=response.text, url=str(response.url))
