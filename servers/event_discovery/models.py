"""
Pydantic models for event data structures.

These models define the core data types used throughout the service:
- Event: Canonical event record, independent of the provider it came from
- SourceResult: Outcome of a single provider call (success or failure)
- CacheEntry: Cached aggregation result for one query
- DedupeResult: Result of deduplication with audit trail
- AggregationResult: What the orchestrator hands back to its caller
"""

from datetime import datetime, timedelta
from typing import Literal, Optional

from pydantic import BaseModel, Field, computed_field


# Price string providers use when no real price is known
PRICE_UNKNOWN = "Check website for pricing"

# Fields copied from a duplicate into the canonical event
ENRICHABLE_FIELDS = ("image", "price", "url", "coordinates")


class Coordinates(BaseModel):
    """Geographic position of a venue."""

    lat: float
    lng: float


class Event(BaseModel):
    """Represents a single event in the canonical shape."""

    id: str  # Provider-namespaced: tm_, sg_, phq_, google_, local_
    name: str
    category: str = "Event"
    genre: Optional[str] = None

    # Location
    venue: Optional[str] = None
    address: Optional[str] = None
    coordinates: Optional[Coordinates] = None

    # Timing
    date: Optional[str] = None  # YYYY-MM-DD
    time: Optional[str] = None  # HH:MM, 24h local
    timezone: Optional[str] = None

    # Details
    price: Optional[str] = None  # "$25-$45", "Free", PRICE_UNKNOWN
    description: Optional[str] = None
    image: Optional[str] = None
    url: Optional[str] = None

    # Source tracking
    source: str

    # Ranking signals, carried but never used for ordering
    popularity: Optional[float] = None
    rank: Optional[int] = None
    is_popular: bool = False
    labels: list[str] = Field(default_factory=list)

    @property
    def dedup_key(self) -> str:
        """Exact-match key used to detect the same event across providers.

        Name and venue are lowercased but not trimmed, so "Blue Note" and
        "Blue Note " produce different keys.
        """
        name = self.name.lower()
        venue = self.venue.lower() if self.venue is not None else None
        return f"{name}_{self.date}_{venue}"

    @property
    def sort_key(self) -> str:
        """Date-time string used for chronological ordering."""
        return f"{self.date} {self.time or '00:00'}"

    @property
    def has_known_price(self) -> bool:
        return bool(self.price) and self.price != PRICE_UNKNOWN

    def enrich_from(self, other: "Event") -> list[str]:
        """Fill gaps in this event from a duplicate, returning copied fields."""
        enriched = []

        if not self.image and other.image:
            self.image = other.image
            enriched.append("image")
        if not self.has_known_price and other.has_known_price:
            self.price = other.price
            enriched.append("price")
        if not self.url and other.url:
            self.url = other.url
            enriched.append("url")
        if self.coordinates is None and other.coordinates is not None:
            self.coordinates = other.coordinates
            enriched.append("coordinates")

        return enriched


class SourceResult(BaseModel):
    """Outcome of one provider call.

    Every adapter call produces exactly one of these; failures are values,
    not exceptions.
    """

    source: str
    status: Literal["success", "error", "timeout", "skipped"]
    events: list[Event] = Field(default_factory=list)
    duration_ms: Optional[int] = None
    error_message: Optional[str] = None

    @computed_field
    @property
    def count(self) -> int:
        return len(self.events)

    @property
    def ok(self) -> bool:
        return self.status == "success"


class CacheEntry(BaseModel):
    """Events cached for one (city, start, end) query."""

    key: str
    events: list[Event]
    written_at: datetime

    def is_expired(self, now: datetime, ttl: timedelta) -> bool:
        return now - self.written_at >= ttl


class DuplicateMatch(BaseModel):
    """Records a duplicate match for audit trail."""

    kept_event_id: str
    merged_event_id: str
    dedup_key: str
    enriched_fields: list[str] = Field(default_factory=list)
    reason: str


class DedupeResult(BaseModel):
    """Result of deduplication with audit trail."""

    events: list[Event]
    original_count: int
    duplicates_removed: int
    audit_trail: list[DuplicateMatch] = Field(default_factory=list)

    @computed_field
    @property
    def dedup_rate(self) -> float:
        """Percentage of events that were duplicates."""
        if self.original_count == 0:
            return 0.0
        return self.duplicates_removed / self.original_count * 100


class AggregationResult(BaseModel):
    """Events for a query plus where they came from."""

    events: list[Event]
    # Configured providers, not necessarily the ones that returned data
    sources: list[str]
    cached: bool = False
    generated: bool = False
    source_results: list[SourceResult] = Field(default_factory=list)

    @computed_field
    @property
    def total_count(self) -> int:
        return len(self.events)
