"""Periodic cleanup of the result store."""

from __future__ import annotations

import asyncio

from loguru import logger

from serpbot.search.store import ResultStore


class ResultJanitor:
    """Run ResultStore.cleanup on a fixed interval in the background."""

    def __init__(self, store: ResultStore, interval_s: float = 30 * 60, enabled: bool = True):
        self.store = store
        self.interval_s = interval_s
        self.enabled = enabled
        self._running = False
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        if not self.enabled:
            logger.info("Result cleanup disabled")
            return
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Result cleanup started (every {}s)", self.interval_s)

    def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            self._task = None

    def sweep_now(self) -> int:
        removed = self.store.cleanup()
        logger.info("Cleaned up results: {} removed, {} stored", removed, len(self.store))
        return removed

    async def _run_loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self.interval_s)
                if self._running:
                    self.sweep_now()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Result cleanup error: {}", e)
