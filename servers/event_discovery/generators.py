"""
Synthetic events used when no real provider has anything to show.

Tier 1 (generate_local_events): a small catalog of realistic archetypes,
up to three per day and never more than 30.
Tier 2 (generate_city_events): 3-8 events per day from a broader set of
category templates, so a city page is never empty.
"""

import random
from datetime import date, datetime, timedelta
from typing import Optional

from .dedup import deduplicate
from .models import Event

LOCAL_EVENTS_SOURCE = "Local Events"
GENERATED_SOURCE = "Generated"

MAX_LOCAL_EVENTS = 30
LOCAL_EVENTS_PER_DAY = 3

# {city} is replaced with the destination name
LOCAL_TEMPLATES = [
    {"name": "{city} Food & Wine Festival", "category": "Festival", "price": "$25-65", "venue": "Downtown Convention Center"},
    {"name": "Live Jazz at Blue Note", "category": "Music", "price": "$15-35", "venue": "Blue Note Jazz Club"},
    {"name": "{city} Marathon", "category": "Sports", "price": "Free to watch", "venue": "City Center"},
    {"name": "Stand-up Comedy Night", "category": "Comedy", "price": "$20-40", "venue": "The Laugh Track"},
    {"name": "{city} Symphony Orchestra", "category": "Music", "price": "$45-150", "venue": "Symphony Hall"},
    {"name": "Farmers Market", "category": "Community", "price": "Free", "venue": "Central Park"},
    {"name": "Art Gallery Opening", "category": "Arts", "price": "Free", "venue": "Modern Art Museum"},
    {"name": "Craft Beer Festival", "category": "Festival", "price": "$30-50", "venue": "Brewery District"},
    {"name": "Tech Conference", "category": "Conference", "price": "$99-299", "venue": "Tech Hub"},
    {"name": "{city} Film Festival", "category": "Film", "price": "$12-25", "venue": "Independent Cinema"},
    {"name": "Local Band Showcase", "category": "Music", "price": "$10-20", "venue": "The Venue"},
    {"name": "Yoga in the Park", "category": "Wellness", "price": "$15", "venue": "Riverside Park"},
    {"name": "{city} Book Fair", "category": "Literary", "price": "Free-$10", "venue": "Public Library"},
    {"name": "Street Food Festival", "category": "Food", "price": "Free entry", "venue": "Historic District"},
    {"name": "Basketball Game - {city} vs Rivals", "category": "Sports", "price": "$35-250", "venue": "Sports Arena"},
]

# "City" in a venue name is replaced with the destination name
CITY_TEMPLATES = {
    "concerts": [
        ("Local Jazz Night", "Blue Note Jazz Club", "$25-45", "Music"),
        ("Symphony Orchestra", "City Concert Hall", "$35-120", "Music"),
        ("Indie Rock Festival", "Outdoor Amphitheater", "$45-80", "Music"),
        ("Electronic Music Night", "The Warehouse", "$20-35", "Music"),
    ],
    "sports": [
        ("Basketball Game", "Sports Arena", "$40-250", "Sports"),
        ("Hockey Match", "Ice Center", "$35-180", "Sports"),
        ("Soccer Championship", "City Stadium", "$25-120", "Sports"),
        ("Baseball Game", "Baseball Park", "$15-85", "Sports"),
    ],
    "theater": [
        ("Broadway Musical", "Grand Theater", "$65-185", "Theater"),
        ("Shakespeare Play", "Classic Theater", "$35-75", "Theater"),
        ("Comedy Show", "Laugh Factory", "$25-45", "Comedy"),
        ("Ballet Performance", "Opera House", "$45-150", "Theater"),
    ],
    "festivals": [
        ("Food & Wine Festival", "City Park", "$15-40", "Festival"),
        ("Art & Craft Fair", "Convention Center", "Free-$10", "Festival"),
        ("Christmas Market", "Downtown Square", "Free", "Festival"),
        ("Cultural Festival", "Heritage Park", "Free-$15", "Festival"),
    ],
    "special": [
        ("Museum After Dark", "City Museum", "$20-30", "Special"),
        ("Rooftop Cinema", "Skyline Hotel", "$15-25", "Entertainment"),
        ("Escape Room Challenge", "Mystery Manor", "$30-40", "Entertainment"),
        ("Wine Tasting Evening", "Vintage Cellars", "$35-55", "Food & Drink"),
    ],
    "outdoor": [
        ("Guided City Tour", "Historic District", "$20-35", "Tours"),
        ("Sunset Kayaking", "City Lake", "$45-60", "Outdoor"),
        ("Mountain Hike", "National Park", "$10-20", "Outdoor"),
        ("Bike Tour", "Scenic Route", "$25-40", "Outdoor"),
    ],
    "family": [
        ("Zoo Adventure Day", "City Zoo", "$15-25", "Family"),
        ("Science Museum", "Discovery Center", "$12-20", "Family"),
        ("Aquarium Visit", "Marine World", "$18-30", "Family"),
        ("Theme Park Day", "Adventure Land", "$45-85", "Family"),
    ],
    "nightlife": [
        ("Pub Crawl Tour", "Downtown District", "$25-40", "Nightlife"),
        ("Rooftop Bar Experience", "Sky Lounge", "$0-20", "Nightlife"),
        ("Dance Club Night", "Club Nova", "$15-30", "Nightlife"),
        ("Karaoke Night", "Sing Along Bar", "$5-15", "Nightlife"),
    ],
}


def date_range(start_date: Optional[str], end_date: Optional[str]) -> tuple[date, int]:
    """
    Return (first day, inclusive day count) for a query.

    Missing dates default to today and today + 7 days; reversed bounds are
    swapped so generated dates always fall inside the requested window.
    """
    today = datetime.now().date()
    first = date.fromisoformat(start_date) if start_date else today
    last = date.fromisoformat(end_date) if end_date else first + timedelta(days=7)
    if last < first:
        first, last = last, first
    return first, (last - first).days + 1


def _random_time(rng: random.Random) -> str:
    hour = rng.randint(10, 21)
    minutes = "00" if rng.random() > 0.5 else "30"
    return f"{hour:02d}:{minutes}"


def generate_local_events(
    city: str,
    start_date: Optional[str],
    end_date: Optional[str],
    rng: Optional[random.Random] = None,
) -> list[Event]:
    """
    Tier 1 fallback: archetype events scattered over the range.

    Generates min(days * 3, 30) candidates; identical archetypes drawn for
    the same day collapse in dedup, so 1..cap events come back, sorted.
    """
    rng = rng or random.Random()
    first, days = date_range(start_date, end_date)
    count = min(days * LOCAL_EVENTS_PER_DAY, MAX_LOCAL_EVENTS)

    events = []
    for i in range(count):
        template = rng.choice(LOCAL_TEMPLATES)
        name = template["name"].format(city=city)
        event_date = first + timedelta(days=rng.randrange(days))

        events.append(Event(
            id=f"local_{event_date:%Y%m%d}_{i}",
            name=name,
            category=template["category"],
            venue=template["venue"],
            date=event_date.isoformat(),
            time=_random_time(rng),
            price=template["price"],
            description=f"Experience {name} in {city}",
            source=LOCAL_EVENTS_SOURCE,
            is_popular=rng.random() > 0.7,
            url="#",
        ))

    unique = deduplicate(events).events
    return sorted(unique, key=lambda e: e.sort_key)


def generate_city_events(
    city: str,
    start_date: Optional[str],
    end_date: Optional[str],
    rng: Optional[random.Random] = None,
) -> list[Event]:
    """Tier 2 fallback: 3-8 events for every day of the range."""
    rng = rng or random.Random()
    first, days = date_range(start_date, end_date)
    categories = list(CITY_TEMPLATES)

    events = []
    for offset in range(days):
        current = first + timedelta(days=offset)

        for j in range(rng.randint(3, 8)):
            name, venue, price, category = rng.choice(CITY_TEMPLATES[rng.choice(categories)])
            local_venue = venue.replace("City", city)

            events.append(Event(
                id=f"event-{current:%Y%m%d}-{j}-{rng.getrandbits(32):08x}",
                name=name,
                category=category,
                venue=local_venue,
                date=current.isoformat(),
                time=_random_time(rng),
                price=price,
                description=f"Experience {name} at {local_venue}",
                source=GENERATED_SOURCE,
                is_popular=rng.random() > 0.7,
                url="#",
            ))

    return sorted(events, key=lambda e: e.sort_key)
