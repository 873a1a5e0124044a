"""Single-slot payload cache with lazy expiry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from earthfeed.models.feed import CacheEntry

if TYPE_CHECKING:
    from earthfeed.core.clock import Clock

logger = logging.getLogger("earthfeed.acquisition.cache")


class CacheStore:
    """Holds the most recent payload for the global Earth-view channel.

    A stale entry is reported as absent but kept in the slot until the
    next ``put`` replaces it.
    """

    def __init__(self, ttl_s: float, clock: Clock) -> None:
        self._ttl_s = ttl_s
        self._clock = clock
        self._entry: CacheEntry | None = None

    @property
    def ttl_s(self) -> float:
        return self._ttl_s

    def get(self) -> CacheEntry | None:
        """Return the entry if it is still fresh, else ``None``."""
        entry = self._entry
        if entry is None:
            return None
        if not entry.is_fresh(self._clock.now(), self._ttl_s):
            logger.debug("Cache entry expired | age=%.1fs", self._clock.now() - entry.fetched_at)
            return None
        return entry

    def put(self, payload: Any) -> CacheEntry:
        """Replace the slot with *payload* stamped at the current time."""
        self._entry = CacheEntry(payload=payload, fetched_at=self._clock.now())
        return self._entry
