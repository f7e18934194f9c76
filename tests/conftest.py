"""Shared pytest fixtures for event discovery tests."""

from typing import Any, Callable

import pytest

from servers.event_discovery.models import Coordinates, Event
from tests.stubs import FakeClock


@pytest.fixture
def make_event() -> Callable[..., Event]:
    """Factory for events with sensible defaults."""
    counter = {"n": 0}

    def factory(**overrides: Any) -> Event:
        counter["n"] += 1
        fields = {
            "id": f"test_{counter['n']}",
            "name": "Jazz Night",
            "category": "Music",
            "venue": "Blue Note",
            "date": "2025-06-01",
            "time": "20:00",
            "price": "$25-$45",
            "source": "Ticketmaster",
        }
        fields.update(overrides)
        return Event(**fields)

    return factory


@pytest.fixture
def sample_event(make_event) -> Event:
    """Provide a fully populated event."""
    return make_event(
        id="tm_abc123",
        name="Austin City Limits",
        category="Music",
        venue="Zilker Park",
        address="2100 Barton Springs Rd",
        date="2025-06-02",
        time="18:30",
        price="$95-$250",
        image="https://img.example.com/acl.jpg",
        url="https://tickets.example.com/acl",
        coordinates=Coordinates(lat=30.2669, lng=-97.7729),
    )


@pytest.fixture
def clock() -> FakeClock:
    """Provide a fake clock starting at 2025-06-01 12:00."""
    return FakeClock()
