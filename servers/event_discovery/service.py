"""
Event discovery service: the public entry point.

Construct once at process start with injected sources and cache:

    service = EventDiscoveryService.from_env()
    result = await service.discover("Austin", "2025-06-01", "2025-06-03")

``fetch_all_events`` returns live provider results (possibly empty);
``discover`` adds the fallback tiers so callers never get zero events.
Neither raises.
"""

import random
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

import httpx
import structlog

from .aggregator import aggregate
from .cache import EventCache, make_key
from .config.settings import DiscoverySettings
from .generators import (
    GENERATED_SOURCE,
    LOCAL_EVENTS_SOURCE,
    generate_city_events,
    generate_local_events,
)
from .models import AggregationResult, Event
from .resilience import FallbackChain, FallbackExhaustedError, HealthMonitor, with_default
from .sources import EventSource, build_sources

logger = structlog.get_logger()

DEFAULT_RANGE_DAYS = 7


def normalize_dates(
    start_date: Optional[str], end_date: Optional[str]
) -> tuple[str, str]:
    """Default to today .. today + 7 days; unparseable dates use the defaults."""
    today = datetime.now().date()

    try:
        start = date.fromisoformat(start_date) if start_date else today
    except ValueError:
        logger.warning("invalid_start_date", start_date=start_date)
        start = today

    try:
        end = date.fromisoformat(end_date) if end_date else start + timedelta(days=DEFAULT_RANGE_DAYS)
    except ValueError:
        logger.warning("invalid_end_date", end_date=end_date)
        end = start + timedelta(days=DEFAULT_RANGE_DAYS)

    return start.isoformat(), end.isoformat()


class EventDiscoveryService:
    """Aggregates, caches and backfills event listings for a city."""

    def __init__(
        self,
        sources: Sequence[EventSource],
        cache: Optional[EventCache] = None,
        health: Optional[HealthMonitor] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            sources: All known sources; only enabled ones are ever called
            cache: Query cache (a fresh 30 minute cache when omitted)
            health: Per-source health tracking
            rng: Randomness for generated fallback events
        """
        self.sources = list(sources)
        self.enabled_sources = [s for s in self.sources if s.enabled]
        self.cache = cache if cache is not None else EventCache()
        self.health = health or HealthMonitor()
        self.rng = rng or random.Random()

    @classmethod
    def from_settings(
        cls,
        settings: DiscoverySettings,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "EventDiscoveryService":
        cache = EventCache(ttl=timedelta(minutes=settings.cache_ttl_minutes))
        return cls(build_sources(settings, client), cache=cache)

    @classmethod
    def from_env(cls) -> "EventDiscoveryService":
        return cls.from_settings(DiscoverySettings.from_env())

    @property
    def active_sources(self) -> list[str]:
        """Names of configured providers."""
        return [source.name for source in self.enabled_sources]

    async def fetch_all_events(
        self,
        city: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> AggregationResult:
        """
        Events from live providers, served from cache when fresh.

        ``sources`` lists configured providers, not only those that returned
        data on this call; see ``source_results`` for per-call outcomes.
        Unexpected faults produce an empty result instead of an exception.
        """
        start_date, end_date = normalize_dates(start_date, end_date)
        empty = AggregationResult(events=[], sources=self.active_sources, cached=False)
        return await with_default(self._fetch_live, empty, city, start_date, end_date)

    async def _fetch_live(
        self, city: str, start_date: str, end_date: str
    ) -> AggregationResult:
        key = make_key(city, start_date, end_date)

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("cache_hit", key=key, count=len(cached))
            return AggregationResult(
                events=cached, sources=self.active_sources, cached=True
            )

        events, results = await aggregate(self.enabled_sources, city, start_date, end_date)
        for result in results:
            self.health.record(result)

        self.cache.set(key, events)

        return AggregationResult(
            events=events,
            sources=self.active_sources,
            cached=False,
            source_results=results,
        )

    async def fetch_free_events(
        self,
        city: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> list[Event]:
        """Tier 1 fallback events; needs no credentials."""
        start_date, end_date = normalize_dates(start_date, end_date)
        return generate_local_events(city, start_date, end_date, rng=self.rng)

    async def discover(
        self,
        city: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> AggregationResult:
        """
        Events for a city, never empty and never raising.

        Tries live providers, then Tier 1 local events, then Tier 2
        generated events.
        """
        start_date, end_date = normalize_dates(start_date, end_date)

        async def live_events() -> AggregationResult:
            return await self.fetch_all_events(city, start_date, end_date)

        async def local_events() -> AggregationResult:
            events = await self.fetch_free_events(city, start_date, end_date)
            return AggregationResult(
                events=events, sources=[LOCAL_EVENTS_SOURCE], generated=True
            )

        async def generated_events() -> AggregationResult:
            events = generate_city_events(city, start_date, end_date, rng=self.rng)
            return AggregationResult(
                events=events, sources=[GENERATED_SOURCE], generated=True
            )

        chain = FallbackChain(
            live_events,
            local_events,
            generated_events,
            accept=lambda result: result.total_count > 0,
        )

        try:
            return await chain.execute()
        except FallbackExhaustedError:
            return AggregationResult(events=[], sources=[], cached=False)

    def health_status(self) -> dict:
        return self.health.get_status()
