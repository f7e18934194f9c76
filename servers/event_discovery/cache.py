"""In-process TTL cache of aggregated events, keyed per query."""

from datetime import datetime, timedelta
from typing import Callable, Optional

import structlog

from .models import CacheEntry, Event

logger = structlog.get_logger()

DEFAULT_TTL = timedelta(minutes=30)


def make_key(city: str, start_date: Optional[str], end_date: Optional[str]) -> str:
    """Cache key for a query: lowercase "{city}_{start}_{end}"."""
    return f"{city}_{start_date}_{end_date}".lower()


class EventCache:
    """Maps query keys to event lists for ``ttl`` after each write.

    Expired entries are treated as misses on read and physically removed by
    a full sweep on every write.
    """

    def __init__(
        self,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.ttl = ttl
        self.clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[list[Event]]:
        """Return cached events, or None when missing or expired."""
        entry = self._entries.get(key)
        if entry is None or entry.is_expired(self.clock(), self.ttl):
            return None
        return [event.model_copy(deep=True) for event in entry.events]

    def set(self, key: str, events: list[Event]) -> None:
        """Replace the entry for key, then evict everything expired.

        Entries hold their own copies of the events; callers never share
        instances with the cache.
        """
        self._entries[key] = CacheEntry(
            key=key,
            events=[event.model_copy(deep=True) for event in events],
            written_at=self.clock(),
        )
        self._sweep()

    def _sweep(self) -> None:
        now = self.clock()
        expired = [
            key for key, entry in self._entries.items()
            if entry.is_expired(now, self.ttl)
        ]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("cache_swept", evicted=len(expired), remaining=len(self._entries))

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
