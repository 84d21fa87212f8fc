"""Search tools: run a search, then fetch a result page by ID."""

import json
from typing import Any

from loguru import logger

from serpbot.search.service import ResultNotFoundError, SearchError, SearchService
from serpbot.tools.base import Tool
from serpbot.utils.html import MarkupParseError


class SearchTool(Tool):
    """Search the web and return results with short-lived IDs."""

    def __init__(self, service: SearchService, *, default_results: int = 5, max_results: int = 20):
        self._service = service
        self._default_results = default_results
        self._max_results = max_results

    @property
    def name(self) -> str:
        return "bing_search"

    @property
    def description(self) -> str:
        return (
            "Search the web. Returns results with an id, title, link and snippet; "
            "pass an id to fetch_webpage to read that page."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {"type": "string", "minLength": 1, "description": "Search query"},
                "num_results": {
                    "type": "integer",
                    "description": f"Number of results (1-{self._max_results})",
                },
            },
            "required": ["query"],
        }

    async def execute(self, query: str, num_results: int | None = None, **kwargs: Any) -> str:
        count = self._default_results if num_results is None else num_results
        count = min(max(count, 1), self._max_results)
        try:
            results = await self._service.search(query, count)
        except (SearchError, MarkupParseError) as e:
            logger.error("Search failed for {!r}: {}", query, e)
            return f"Error: {e}"
        return json.dumps([r.to_dict() for r in results], ensure_ascii=False, indent=2)


class FetchWebpageTool(Tool):
    """Fetch and extract the page behind a search result."""

    def __init__(self, service: SearchService):
        self._service = service

    @property
    def name(self) -> str:
        return "fetch_webpage"

    @property
    def description(self) -> str:
        return "Fetch the main text of a page by the result id returned from bing_search."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "result_id": {
                    "type": "string",
                    "minLength": 1,
                    "description": "Result id from bing_search",
                },
            },
            "required": ["result_id"],
        }

    async def execute(self, result_id: str, **kwargs: Any) -> str:
        try:
            content = await self._service.fetch_content(result_id)
        except ResultNotFoundError:
            return f"Error: could not find a search result with id {result_id}; it may have expired"
        except (SearchError, MarkupParseError) as e:
            logger.error("Fetching result {} failed: {}", result_id, e)
            return f"Error: {e}"
        return content.render()
