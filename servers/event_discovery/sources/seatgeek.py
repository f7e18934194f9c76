"""SeatGeek marketplace events integration (events[] with venue and stats objects)."""

from typing import Any, Optional

from ..models import Coordinates, Event
from .base import EventSource, dig, format_price_range, split_datetime, title_case


SEATGEEK_BASE = "https://api.seatgeek.com/2/events"

# SeatGeek scores run 0..1
POPULAR_SCORE = 0.7


class SeatGeekSource(EventSource):
    """SeatGeek event search, authenticated with a client id (+ optional secret)."""

    name = "SeatGeek"
    base_url = SEATGEEK_BASE

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        **kwargs: Any,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        super().__init__(**kwargs)

    def is_configured(self) -> bool:
        return bool(self.client_id)

    def build_request(self, city, start_date, end_date):
        params = {
            "venue.city": city,
            "datetime_utc.gte": f"{start_date}T00:00:00",
            "datetime_utc.lte": f"{end_date}T23:59:59",
            "per_page": self.page_size,
            "client_id": self.client_id,
        }
        if self.client_secret:
            params["client_secret"] = self.client_secret
        return self.base_url, params, {}

    def extract_items(self, data):
        return self._items_at(data, "events")

    def parse_item(self, item, city, start_date, end_date):
        name = item.get("title") or item.get("short_title")
        if not name:
            return None

        venue = item.get("venue") if isinstance(item.get("venue"), dict) else {}
        venue_name = venue.get("name") or "Venue TBA"
        date, time = split_datetime(item.get("datetime_local"))
        score = item.get("score")

        return Event(
            id=f"sg_{item['id']}",
            name=name,
            category=title_case(item.get("type"), "_") or "Event",
            venue=venue_name,
            address=venue.get("address"),
            coordinates=_venue_coordinates(venue),
            date=date,
            time=time,
            timezone=venue.get("timezone"),
            price=extract_seatgeek_price(item),
            description=f"{name} at {venue_name}",
            image=dig(item, "performers", 0, "image"),
            url=item.get("url"),
            source=self.name,
            popularity=score,
            is_popular=isinstance(score, (int, float)) and score > POPULAR_SCORE,
        )


def extract_seatgeek_price(item: dict[str, Any]) -> str:
    """Use listing stats: full range, lowest only, or the average."""
    stats = item.get("stats")
    if not isinstance(stats, dict):
        return format_price_range(None)
    return format_price_range(
        stats.get("lowest_price"),
        stats.get("highest_price"),
        average=stats.get("average_price"),
    )


def _venue_coordinates(venue: dict[str, Any]) -> Optional[Coordinates]:
    location = venue.get("location")
    if not isinstance(location, dict):
        return None
    try:
        return Coordinates(lat=float(location["lat"]), lng=float(location["lon"]))
    except (KeyError, TypeError, ValueError):
        return None
