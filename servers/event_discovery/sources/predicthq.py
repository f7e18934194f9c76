"""
PredictHQ events integration.

Results come back under results[] with a GeoJSON-style location array
([longitude, latitude]) and a 0-100 rank. PredictHQ carries no prices.
"""

from typing import Any, Optional

from ..models import PRICE_UNKNOWN, Coordinates, Event
from .base import EventSource, dig, split_datetime, title_case


PREDICTHQ_BASE = "https://api.predicthq.com/v1/events/"

CATEGORIES = [
    "concerts",
    "sports",
    "festivals",
    "performing-arts",
    "conferences",
    "expos",
    "community",
]

POPULAR_RANK = 70


class PredictHQSource(EventSource):
    """PredictHQ event search with bearer-token auth."""

    name = "PredictHQ"
    base_url = PREDICTHQ_BASE

    def __init__(self, access_token: Optional[str] = None, **kwargs: Any):
        self.access_token = access_token
        super().__init__(**kwargs)

    def is_configured(self) -> bool:
        return bool(self.access_token)

    def build_request(self, city, start_date, end_date):
        params = {
            "q": city,
            "active.gte": start_date,
            "active.lte": end_date,
            "category": ",".join(CATEGORIES),
            "limit": self.page_size,
            "sort": "rank",
        }
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
        }
        return self.base_url, params, headers

    def extract_items(self, data):
        return self._items_at(data, "results")

    def parse_item(self, item, city, start_date, end_date):
        title = item.get("title")
        if not title:
            return None

        category = title_case(item.get("category"), "-") or "Event"
        date, time = split_datetime(item.get("start"))
        rank = item.get("rank")
        labels = item.get("labels")

        return Event(
            id=f"phq_{item['id']}",
            name=title,
            category=category,
            venue=(
                dig(item, "entities", 0, "name")
                or dig(item, "geo", "address", "formatted_address")
                or "Location TBA"
            ),
            coordinates=_location_coordinates(item.get("location")),
            date=date,
            time=time,
            timezone=item.get("timezone"),
            price=PRICE_UNKNOWN,
            description=item.get("description") or f"{title} - {category}",
            source=self.name,
            rank=rank,
            is_popular=isinstance(rank, (int, float)) and rank > POPULAR_RANK,
            labels=labels if isinstance(labels, list) else [],
        )


def _location_coordinates(location: Any) -> Optional[Coordinates]:
    """PredictHQ orders the pair longitude first."""
    if not isinstance(location, list) or len(location) < 2:
        return None
    try:
        return Coordinates(lat=float(location[1]), lng=float(location[0]))
    except (TypeError, ValueError):
        return None
