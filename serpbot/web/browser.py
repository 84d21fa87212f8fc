"""Playwright transport for result pages and target pages."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger

from serpbot.web.client import (
    FetchedPage,
    UnexpectedPageError,
    WebFetchError,
    build_search_url,
    find_block_keywords,
    looks_like_result_page,
)
from serpbot.web.installer import ensure_browsers_installed, is_missing_browser_error
from serpbot.web.safety import url_block_reason

if TYPE_CHECKING:
    from serpbot.config.schema import BrowserConfig, SearchConfig


class BrowserPageFetcher:
    """Fetch pages in a fresh headless browser context per request."""

    def __init__(
        self,
        search_config: "SearchConfig | None" = None,
        browser_config: "BrowserConfig | None" = None,
    ):
        from serpbot.config.schema import BrowserConfig, SearchConfig

        self.search_config = search_config or SearchConfig()
        self.config = browser_config or BrowserConfig()

    async def fetch_search_page(self, query: str) -> FetchedPage:
        """Load the result page for query and wait for the result container."""
        url = build_search_url(self.search_config.search_url, query)
        logger.info("Starting browser search: {}", url)
        page = await self._fetch(url, wait_selector=self.config.wait_selector)

        keywords = find_block_keywords(page.html)
        if keywords:
            # Rendered result pages often mention these words in scripts; only warn.
            logger.warning("Possible bot detection keywords: {}", ", ".join(keywords))
        if not looks_like_result_page(page.html):
            raise UnexpectedPageError(
                "search page does not contain the expected result structure"
            )
        return page

    async def fetch_page(self, url: str) -> FetchedPage:
        reason = self._block_reason(url, navigation=True)
        if reason:
            raise WebFetchError(reason)
        return await self._fetch(url, referer=f"{self.search_config.origin}/")

    async def _fetch(
        self,
        url: str,
        *,
        wait_selector: str | None = None,
        referer: str | None = None,
    ) -> FetchedPage:
        try:
            return await self._run_once(url, wait_selector=wait_selector, referer=referer)
        except WebFetchError:
            raise
        except Exception as first_error:
            if not self.config.auto_install_browsers or not is_missing_browser_error(first_error):
                raise WebFetchError(f"browser fetch failed for {url}: {first_error}") from first_error

        try:
            await ensure_browsers_installed([self.config.default_browser])
            return await self._run_once(url, wait_selector=wait_selector, referer=referer)
        except WebFetchError:
            raise
        except Exception as e:
            raise WebFetchError(f"browser fetch failed for {url}: {e}") from e

    async def _run_once(
        self,
        url: str,
        *,
        wait_selector: str | None,
        referer: str | None,
    ) -> FetchedPage:
        from playwright.async_api import async_playwright

        async with async_playwright() as playwright:
            browser_type = getattr(playwright, self.config.default_browser)
            browser = await browser_type.launch(headless=self.config.headless)
            try:
                context = await browser.new_context(
                    user_agent=self.config.user_agent,
                    locale=self.config.locale,
                    viewport={"width": 1920, "height": 1080},
                    accept_downloads=False,
                )
                try:
                    await context.route("**/*", self._apply_network_guard)
                    page = await context.new_page()
                    response = await page.goto(
                        url,
                        wait_until="load",
                        timeout=self.config.timeout_ms,
                        referer=referer,
                    )
                    logger.debug(
                        "Navigated to {} (status {})",
                        url,
                        response.status if response else None,
                    )
                    if wait_selector:
                        await page.wait_for_selector(wait_selector, timeout=self.config.timeout_ms)
                    html = await page.content()
                    final_url = page.url
                finally:
                    await context.close()
            finally:
                await browser.close()

        logger.debug("Retrieved {} chars from {}", len(html), final_url)
        return FetchedPage(html=html, url=final_url)

    async def _apply_network_guard(self, route: Any, request: Any) -> None:
        reason = self._block_reason(request.url, navigation=False)
        if reason:
            await route.abort("blockedbyclient")
            return
        await route.continue_()

    def _block_reason(self, url: str, *, navigation: bool) -> str | None:
        return url_block_reason(
            url,
            allow_private_network=self.config.allow_private_network,
            block_file_scheme=self.config.block_file_scheme,
            navigation=navigation,
        )
