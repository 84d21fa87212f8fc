"""In-memory store that keeps search results addressable by ID."""

from __future__ import annotations

import itertools
import secrets
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

from serpbot.search.models import StoredResult

DEFAULT_TTL_S = 60 * 60
DEFAULT_MAX_RESULTS = 1000


@dataclass(slots=True)
class _Entry:
    record: StoredResult
    inserted_at: float


class ResultStore:
    """
    Capacity- and time-bounded mapping from result ID to result.

    Expiry is based on insertion time only: reads never refresh it. Capacity
    eviction removes the oldest insertions first, after the TTL pass.
    """

    def __init__(
        self,
        *,
        ttl_s: float = DEFAULT_TTL_S,
        max_results: int = DEFAULT_MAX_RESULTS,
        clock: Callable[[], float] = time.time,
    ):
        if ttl_s <= 0:
            raise ValueError("ttl_s must be > 0")
        if max_results < 1:
            raise ValueError("max_results must be >= 1")
        self.ttl_s = ttl_s
        self.max_results = max_results
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._counter = itertools.count(1)
        self._lock = threading.RLock()

    def now(self) -> float:
        """Current time on the clock used for expiry."""
        return self._clock()

    def generate_id(self, prefix: str = "result") -> str:
        """Return a new ID made of prefix, time, a counter and a random suffix."""
        with self._lock:
            seq = next(self._counter)
        now_ms = int(self._clock() * 1000)
        return f"{prefix}_{now_ms}_{seq}_{secrets.token_hex(4)}"

    def put(self, record: StoredResult) -> None:
        with self._lock:
            # Re-inserting moves an overwritten record to the newest position.
            self._entries.pop(record.id, None)
            self._entries[record.id] = _Entry(record=record, inserted_at=self._clock())

    def get(self, result_id: str) -> StoredResult | None:
        with self._lock:
            entry = self._entries.get(result_id)
            return entry.record if entry else None

    def cleanup(self) -> int:
        """Drop expired records, then the oldest ones above capacity."""
        with self._lock:
            now = self._clock()
            expired = [
                result_id
                for result_id, entry in self._entries.items()
                if now - entry.inserted_at > self.ttl_s
            ]
            for result_id in expired:
                del self._entries[result_id]

            overflow = len(self._entries) - self.max_results
            evicted: list[str] = []
            if overflow > 0:
                # sorted() is stable, so equal timestamps keep insertion order.
                oldest = sorted(self._entries.items(), key=lambda item: item[1].inserted_at)
                evicted = [result_id for result_id, _ in oldest[:overflow]]
                for result_id in evicted:
                    del self._entries[result_id]

            removed = len(expired) + len(evicted)
            if removed:
                logger.debug(
                    "Result store cleanup: {} expired, {} evicted, {} left",
                    len(expired),
                    len(evicted),
                    len(self._entries),
                )
            return removed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, result_id: object) -> bool:
        with self._lock:
            return result_id in self._entries
