"""Single-slot expiring cache for the rendered top stories list."""

import asyncio
import logging
import threading
import time
from datetime import timedelta
from typing import Awaitable, Callable

from sources.base import DisplayItem

logger = logging.getLogger(__name__)

CACHE_EXPIRATION = timedelta(seconds=10)


class ExpiringCache:
    """Holds the last computed story list until its expiry passes.

    The entry is replaced as a whole on every ``set``. ``get_or_refresh``
    lets concurrent callers share one in-flight recomputation instead of
    each hitting upstream.
    """

    def __init__(
        self,
        expiration: timedelta = CACHE_EXPIRATION,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.expiration = expiration
        self._clock = clock
        self._items: list[DisplayItem] = []
        self._expires_at: float | None = None
        self._lock = threading.Lock()
        self._inflight: asyncio.Future | None = None

    def is_expired(self) -> bool:
        with self._lock:
            if self._expires_at is None:
                return True
            return self._clock() > self._expires_at

    def is_empty(self) -> bool:
        with self._lock:
            return len(self._items) == 0

    def set(self, items: list[DisplayItem]) -> None:
        with self._lock:
            self._items = list(items)
            self._expires_at = self._clock() + self.expiration.total_seconds()

    def get(self) -> list[DisplayItem]:
        with self._lock:
            return list(self._items)

    def _needs_refresh(self) -> bool:
        return self.is_expired() or self.is_empty()

    async def _refresh(self, loader: Callable[[], Awaitable[list[DisplayItem]]]) -> list[DisplayItem]:
        try:
            logger.info("Cache stale, recomputing top stories")
            items = await loader()
            self.set(items)
            logger.info("Cached %d stories for %.0fs", len(items), self.expiration.total_seconds())
            return self.get()
        finally:
            self._inflight = None

    async def get_or_refresh(
        self, loader: Callable[[], Awaitable[list[DisplayItem]]]
    ) -> list[DisplayItem]:
        """Return cached items, running ``loader`` first if the entry is stale.

        Callers arriving while a refresh is running await that same refresh
        and share its outcome, result or exception. Loader errors leave the
        previous entry in place; the next caller after the failure retries.
        """
        if not self._needs_refresh():
            return self.get()

        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._refresh(loader))
        items = await asyncio.shield(self._inflight)
        return list(items)
