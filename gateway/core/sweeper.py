"""Periodic purge of expired OTP records and elapsed rate-limit windows.

Both stores also drop stale entries lazily on access; the sweeper only bounds
memory for keys that are never seen again.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Purgeable(Protocol):
    def purge_expired(self) -> int: ...


class StoreSweeper:
    """Runs purge_expired() on each named store every interval seconds."""

    def __init__(self, stores: dict[str, Purgeable], *, interval: float) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self._stores = stores
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sweep_once(self) -> dict[str, int]:
        """Purge every store now and return the number removed per store."""
        removed = {name: store.purge_expired() for name, store in self._stores.items()}
        if any(removed.values()):
            logger.info("sweeper.purged", extra={"removed": removed})
        return removed

    async def start(self) -> None:
        self._task = asyncio.create_task(self._loop(), name="store-sweeper")
        logger.info("sweeper.started", extra={"interval_s": self._interval})

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
            logger.info("sweeper.stopped")

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.sweep_once()
            except Exception:
                logger.exception("sweeper.tick_failed")
