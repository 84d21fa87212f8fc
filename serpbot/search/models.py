"""Shared search result models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True, frozen=True)
class SearchResult:
    """Extracted search result as exposed to callers."""

    id: str
    title: str
    link: str
    snippet: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "link": self.link,
            "snippet": self.snippet,
        }


@dataclass(slots=True, frozen=True)
class StoredResult(SearchResult):
    """Search result plus its creation time in epoch seconds."""

    timestamp: float = 0.0
