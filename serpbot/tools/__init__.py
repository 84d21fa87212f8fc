"""Tools exposing search and result fetching."""

from serpbot.tools.base import Tool
from serpbot.tools.factory import build_tool_registry
from serpbot.tools.registry import ToolRegistry
from serpbot.tools.search import FetchWebpageTool, SearchTool

__all__ = ["FetchWebpageTool", "SearchTool", "Tool", "ToolRegistry", "build_tool_registry"]
