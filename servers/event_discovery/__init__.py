"""
Event Discovery Service

Aggregates local event listings for a destination city:
- Fetching events concurrently from Ticketmaster, SeatGeek, PredictHQ and
  Google Events (SerpApi), each enabled by its own credentials
- Deduplicating events reported by more than one provider
- Caching results per query for 30 minutes
- Falling back to generated events when no provider has anything
"""

from .models import AggregationResult, Event
from .service import EventDiscoveryService

__version__ = "1.0.0"

__all__ = ["AggregationResult", "Event", "EventDiscoveryService"]
