"""
Event provider adapters.

Each source implements:
- fetch(city, start_date, end_date) -> SourceResult, never raising
- Its own wire-format parsing and price heuristic
"""

from typing import Optional

import httpx

from ..config.settings import DiscoverySettings
from .base import EventSource, MalformedPayloadError, ProviderError
from .predicthq import PredictHQSource
from .seatgeek import SeatGeekSource
from .serpapi import SerpApiSource
from .ticketmaster import TicketmasterSource


def build_sources(
    settings: DiscoverySettings,
    client: Optional[httpx.AsyncClient] = None,
) -> list[EventSource]:
    """Create every known source from settings, enabled or not.

    Order here is the merge order: earlier sources win dedup ties.
    """
    creds = settings.credentials
    common = {
        "timeout": settings.provider_timeout,
        "page_size": settings.page_size,
        "client": client,
    }
    return [
        TicketmasterSource(api_key=creds.ticketmaster_api_key, **common),
        SeatGeekSource(
            client_id=creds.seatgeek_client_id,
            client_secret=creds.seatgeek_client_secret,
            **common,
        ),
        PredictHQSource(access_token=creds.predicthq_access_token, **common),
        SerpApiSource(api_key=creds.serpapi_key, **common),
    ]


__all__ = [
    "EventSource",
    "MalformedPayloadError",
    "PredictHQSource",
    "ProviderError",
    "SeatGeekSource",
    "SerpApiSource",
    "TicketmasterSource",
    "build_sources",
]
