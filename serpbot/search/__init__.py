"""Search result extraction and storage."""

from serpbot.search.layouts import BING_LAYOUT, BlockStrategy, SerpLayout, TitleProbe
from serpbot.search.models import SearchResult, StoredResult
from serpbot.search.parser import MarkupParseError, extract_search_results
from serpbot.search.store import ResultStore
from serpbot.search.janitor import ResultJanitor
from serpbot.search.service import ResultNotFoundError, SearchError, SearchService

__all__ = [
    "BING_LAYOUT",
    "BlockStrategy",
    "MarkupParseError",
    "ResultJanitor",
    "ResultNotFoundError",
    "ResultStore",
    "SearchError",
    "SearchResult",
    "SearchService",
    "SerpLayout",
    "StoredResult",
    "TitleProbe",
    "extract_search_results",
]
