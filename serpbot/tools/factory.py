"""Tool registry factory."""

from serpbot.config.schema import Config
from serpbot.search.service import SearchService
from serpbot.search.store import ResultStore
from serpbot.tools.registry import ToolRegistry
from serpbot.tools.search import FetchWebpageTool, SearchTool
from serpbot.web.client import PageFetcher


def build_tool_registry(
    config: Config,
    *,
    store: ResultStore | None = None,
    fetcher: PageFetcher | None = None,
) -> ToolRegistry:
    """Build a registry with the search and fetch tools sharing one result store."""
    service = SearchService.from_config(config, store=store, fetcher=fetcher)

    registry = ToolRegistry()
    registry.register(
        SearchTool(
            service,
            default_results=config.search.default_results,
            max_results=config.search.max_results,
        )
    )
    registry.register(FetchWebpageTool(service))
    return registry
