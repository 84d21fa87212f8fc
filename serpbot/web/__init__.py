"""Transports that fetch result pages and target pages."""

from serpbot.web.browser import BrowserPageFetcher
from serpbot.web.client import (
    BlockedPageError,
    FetchedPage,
    HttpPageFetcher,
    PageFetcher,
    UnexpectedPageError,
    WebFetchError,
)

__all__ = [
    "BlockedPageError",
    "BrowserPageFetcher",
    "FetchedPage",
    "HttpPageFetcher",
    "PageFetcher",
    "UnexpectedPageError",
    "WebFetchError",
]
