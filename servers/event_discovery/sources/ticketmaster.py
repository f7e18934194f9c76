"""
Ticketmaster Discovery API integration.

Free tier: 5000 calls/day, 5 requests/second.
Responses nest events under _embedded.events[] with venues, classifications
and price ranges as sub-objects.
"""

from typing import Any, Optional

from ..models import Coordinates, Event
from .base import EventSource, dig, format_price_range


TICKETMASTER_BASE = "https://app.ticketmaster.com/discovery/v2/events.json"


class TicketmasterSource(EventSource):
    """Ticketmaster Discovery v2 event search."""

    name = "Ticketmaster"
    base_url = TICKETMASTER_BASE

    def __init__(self, api_key: Optional[str] = None, **kwargs: Any):
        self.api_key = api_key
        super().__init__(**kwargs)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def build_request(self, city, start_date, end_date):
        params = {
            "apikey": self.api_key,
            "city": city,
            "startDateTime": f"{start_date}T00:00:00Z",
            "endDateTime": f"{end_date}T23:59:59Z",
            "size": self.page_size,
            "sort": "date,asc",
            "includeSpellcheck": "yes",
        }
        return self.base_url, params, {"Accept": "application/json"}

    def extract_items(self, data):
        return self._items_at(data, "_embedded", "events")

    def parse_item(self, item, city, start_date, end_date):
        name = item.get("name")
        if not name:
            return None

        venue = dig(item, "_embedded", "venues", 0, default={})
        classification = dig(item, "classifications", 0, default={})
        local_time = dig(item, "dates", "start", "localTime")

        return Event(
            id=f"tm_{item['id']}",
            name=name,
            category=dig(classification, "segment", "name", default="Event"),
            genre=dig(classification, "genre", "name"),
            venue=dig(venue, "name", default="Venue TBA"),
            address=dig(venue, "address", "line1"),
            coordinates=_venue_coordinates(venue),
            date=dig(item, "dates", "start", "localDate"),
            time=local_time[:5] if local_time else None,
            timezone=dig(item, "dates", "timezone"),
            price=extract_ticketmaster_price(item),
            description=item.get("info") or item.get("pleaseNote") or f"Experience {name}",
            image=_pick_image(item.get("images")),
            url=item.get("url"),
            source=self.name,
            is_popular=dig(item, "dates", "status", "code") == "onsale",
        )


def extract_ticketmaster_price(item: dict[str, Any]) -> str:
    """Format the first price range as "$min-$max" or "From $min"."""
    price_range = dig(item, "priceRanges", 0, default={})
    return format_price_range(price_range.get("min"), price_range.get("max"))


def _pick_image(images: Any) -> Optional[str]:
    """Prefer the 16:9 image, else the first one."""
    if not isinstance(images, list) or not images:
        return None
    for image in images:
        if isinstance(image, dict) and image.get("ratio") == "16_9" and image.get("url"):
            return image["url"]
    return dig(images, 0, "url")


def _venue_coordinates(venue: dict[str, Any]) -> Optional[Coordinates]:
    location = venue.get("location")
    if not isinstance(location, dict):
        return None
    try:
        return Coordinates(
            lat=float(location["latitude"]),
            lng=float(location["longitude"]),
        )
    except (KeyError, TypeError, ValueError):
        return None
