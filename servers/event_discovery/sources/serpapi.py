"""
SerpApi Google Events integration.

Free tier: 100 searches/month
Paid: $50/month for 5000 searches

Google Events reports dates as free text ("Sat, Jun 7, 8 – 11 PM") without a
year, so dates are resolved against the requested range.
"""

import re
from datetime import date, datetime
from typing import Any, Optional

from dateutil import parser

from ..models import PRICE_UNKNOWN, Event
from .base import EventSource, dig


SERPAPI_BASE = "https://serpapi.com/search.json"

MONTHS = ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"]

# "Sat, Jun 7" / "June 7"
MONTH_DAY_PATTERN = re.compile(r"\b([A-Za-z]{3,9})\.?\s+(\d{1,2})\b")
# "8 PM", "7:30 pm"
CLOCK_PATTERN = re.compile(r"\b(\d{1,2})(?::(\d{2}))?\s*([AaPp])\.?[Mm]\.?")
# "8 – 10 PM", "10 AM – 2 PM", "11 – 1 PM": a bare start hour takes the end's
# meridiem unless it is later on the clock than the end, then the opposite one
RANGE_PATTERN = re.compile(
    r"\b(\d{1,2})(?::(\d{2}))?\s*(?:([AaPp])\.?[Mm]\.?)?\s*[–—-]\s*"
    r"(\d{1,2})(?::\d{2})?\s*([AaPp])\.?[Mm]"
)


class SerpApiSource(EventSource):
    """Google Events results through SerpApi."""

    name = "Google Events"
    base_url = SERPAPI_BASE

    def __init__(self, api_key: Optional[str] = None, **kwargs: Any):
        self.api_key = api_key
        super().__init__(**kwargs)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def build_request(self, city, start_date, end_date):
        params = {
            "engine": "google_events",
            "q": f"events in {city} {start_date}",
            "hl": "en",
            "gl": "us",
            "api_key": self.api_key,
        }
        return self.base_url, params, {}

    def extract_items(self, data):
        return self._items_at(data, "events_results")

    def parse_item(self, item, city, start_date, end_date):
        title = item.get("title", "")
        if not title:
            return None

        date_info = item.get("date") if isinstance(item.get("date"), dict) else {}
        when = date_info.get("when") or ""
        event_date = parse_google_date(
            date_info.get("start_date"), when, start_date, end_date
        )

        address = item.get("address")
        address_lines = [line for line in address if isinstance(line, str)] if isinstance(address, list) else []

        return Event(
            id=f"google_{_slug(title)}_{event_date}",
            name=title,
            category="Event",
            venue=dig(item, "venue", "name") or (address_lines[0] if address_lines else "Venue TBA"),
            address=", ".join(address_lines) or None,
            date=event_date,
            time=parse_google_time(when),
            price=_ticket_price(item.get("ticket_info")),
            description=item.get("description") or item.get("snippet") or title,
            image=item.get("image") or item.get("thumbnail"),
            url=item.get("link"),
            source=self.name,
        )


def parse_google_date(
    start_date_text: Optional[str],
    when: Optional[str],
    range_start: str,
    range_end: str,
) -> str:
    """
    Resolve Google's year-less date text to YYYY-MM-DD.

    The year comes from the requested range start; a month/day that would
    fall before the range moves to the following year if that lands inside
    the range (a December to January search). Unparseable text falls back
    to the range start.
    """
    try:
        first = date.fromisoformat(range_start)
        last = date.fromisoformat(range_end)
    except (TypeError, ValueError):
        first = last = datetime.now().date()

    month_day = _parse_month_day(start_date_text) or _parse_month_day(when)
    if not month_day:
        return range_start

    month, day = month_day
    try:
        resolved = date(first.year, month, day)
        if resolved < first:
            rolled = date(first.year + 1, month, day)
            if rolled <= last:
                resolved = rolled
    except ValueError:
        return range_start

    return resolved.isoformat()


def _parse_month_day(text: Optional[str]) -> Optional[tuple[int, int]]:
    if not text:
        return None

    match = MONTH_DAY_PATTERN.search(text)
    if match:
        month_name = match.group(1)[:3].lower()
        if month_name in MONTHS:
            return MONTHS.index(month_name) + 1, int(match.group(2))

    # Parse against two different defaults; if they disagree, the text did
    # not actually contain a month and day.
    try:
        first = parser.parse(text, fuzzy=True, default=datetime(2000, 1, 1))
        second = parser.parse(text, fuzzy=True, default=datetime(2000, 2, 2))
    except (ValueError, TypeError, OverflowError):
        return None
    if (first.month, first.day) != (second.month, second.day):
        return None
    return first.month, first.day


def parse_google_time(when: Optional[str]) -> Optional[str]:
    """Extract the start time, "8 PM" -> "20:00", "8 – 10 PM" -> "20:00"."""
    if not when:
        return None

    match = RANGE_PATTERN.search(when)
    if match:
        hour, minute, meridiem, end_hour, end_meridiem = match.groups()
        if not meridiem:
            meridiem = end_meridiem
            if int(hour) % 12 > int(end_hour) % 12:
                meridiem = "a" if end_meridiem.lower() == "p" else "p"
    else:
        match = CLOCK_PATTERN.search(when)
        if not match:
            return None
        hour, minute, meridiem = match.groups()

    return _to_24h(int(hour), int(minute or 0), meridiem.lower())


def _to_24h(hour: int, minute: int, meridiem: str) -> Optional[str]:
    if not 1 <= hour <= 12 or minute > 59:
        return None
    if meridiem == "p" and hour != 12:
        hour += 12
    elif meridiem == "a" and hour == 12:
        hour = 0
    return f"{hour:02d}:{minute:02d}"


def _ticket_price(ticket_info: Any) -> str:
    if isinstance(ticket_info, list):
        for ticket in ticket_info:
            if isinstance(ticket, dict) and ticket.get("price"):
                return str(ticket["price"])
    return PRICE_UNKNOWN


def _slug(title: str) -> str:
    return re.sub(r"\s+", "_", title.strip())
