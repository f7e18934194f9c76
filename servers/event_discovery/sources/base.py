"""
Base class for provider adapters.

An adapter turns one provider's wire format into canonical Events. The
public ``fetch`` never raises: network errors, bad statuses, malformed
payloads and deadline overruns all come back as a failed SourceResult.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

import httpx
import structlog

from ..config.settings import DEFAULT_PAGE_SIZE, DEFAULT_PROVIDER_TIMEOUT
from ..models import PRICE_UNKNOWN, Event, SourceResult
from ..resilience.circuit_breaker import CircuitBreaker

logger = structlog.get_logger()


class ProviderError(Exception):
    """A provider answered with something we cannot use."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source


class MalformedPayloadError(ProviderError):
    """Response body does not have the expected shape."""


def dig(data: Any, *path: Any, default: Any = None) -> Any:
    """Walk nested dicts/lists, returning default at the first gap."""
    current = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or not -len(current) <= step < len(current):
                return default
        elif not isinstance(current, dict) or step not in current:
            return default
        current = current[step]
    return default if current is None else current


def format_amount(value: Any) -> str:
    """Render a price amount without a pointless decimal part."""
    amount = float(value)
    if amount.is_integer():
        return str(int(amount))
    return f"{amount:.2f}"


def format_price_range(low: Any, high: Any = None, average: Any = None) -> str:
    """Shared price heuristic: "$low-$high", "From $low", "Avg $avg"."""
    try:
        if low and high:
            return f"${format_amount(low)}-${format_amount(high)}"
        if low:
            return f"From ${format_amount(low)}"
        if average:
            return f"Avg ${format_amount(average)}"
    except (TypeError, ValueError):
        pass
    return PRICE_UNKNOWN


def split_datetime(value: Any) -> tuple[Optional[str], Optional[str]]:
    """Split "2025-06-01T19:30:00" into ("2025-06-01", "19:30")."""
    if not isinstance(value, str) or not value:
        return None, None
    date_part, _, time_part = value.partition("T")
    return date_part or None, time_part[:5] or None


def title_case(value: Any, separator: str) -> Optional[str]:
    """Turn provider slugs like "performing-arts" into "Performing Arts"."""
    if not isinstance(value, str) or not value:
        return None
    return " ".join(word.capitalize() for word in value.replace(separator, " ").split())


class EventSource(ABC):
    """One third-party event provider."""

    # Display name reported in Event.source and the active source list
    name: str = ""
    base_url: str = ""

    def __init__(
        self,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT,
        page_size: int = DEFAULT_PAGE_SIZE,
        client: Optional[httpx.AsyncClient] = None,
        breaker: Optional[CircuitBreaker] = None,
    ):
        """
        Args:
            timeout: Deadline in seconds for one complete provider call
            page_size: Max events requested from the provider
            client: Shared HTTP client; a short-lived one is used when absent
            breaker: Circuit breaker for this provider
        """
        self.timeout = timeout
        self.page_size = page_size
        self.client = client
        self.breaker = breaker or CircuitBreaker(name=self.name)
        # Enablement is decided once, here, never per call
        self.enabled = self.is_configured()

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the required credentials are present."""

    @abstractmethod
    def build_request(
        self, city: str, start_date: str, end_date: str
    ) -> tuple[str, dict[str, Any], dict[str, str]]:
        """Return (url, query params, headers) for a search."""

    @abstractmethod
    def extract_items(self, data: dict[str, Any]) -> list[Any]:
        """Pull the raw event list out of a response body."""

    @abstractmethod
    def parse_item(
        self, item: dict[str, Any], city: str, start_date: str, end_date: str
    ) -> Optional[Event]:
        """Map one raw provider event into an Event, or None to skip it."""

    def _items_at(self, data: dict[str, Any], *path: str) -> list[Any]:
        items = dig(data, *path, default=[])
        if not isinstance(items, list):
            raise MalformedPayloadError(self.name, f"'{'.'.join(path)}' is not a list")
        return items

    def parse(
        self, data: Any, city: str, start_date: str, end_date: str
    ) -> list[Event]:
        """Parse a full response body, skipping items that do not map."""
        if not isinstance(data, dict):
            raise MalformedPayloadError(self.name, "response body is not an object")

        events = []
        for item in self.extract_items(data):
            if not isinstance(item, dict):
                continue
            try:
                event = self.parse_item(item, city, start_date, end_date)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.debug("source_item_skipped", source=self.name, error=str(e))
                continue
            if event:
                events.append(event)
        return events

    async def _request(self, city: str, start_date: str, end_date: str) -> list[Event]:
        url, params, headers = self.build_request(city, start_date, end_date)

        if self.client is not None:
            response = await self.client.get(url, params=params, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params=params, headers=headers)

        response.raise_for_status()
        return self.parse(response.json(), city, start_date, end_date)

    async def fetch(self, city: str, start_date: str, end_date: str) -> SourceResult:
        """
        Fetch events for a city and date range. Never raises.

        Args:
            city: Destination city
            start_date: Start date (YYYY-MM-DD)
            end_date: End date (YYYY-MM-DD)

        Returns:
            SourceResult tagged success, error, timeout or skipped
        """
        if not self.enabled:
            return SourceResult(
                source=self.name, status="skipped", error_message="not configured"
            )

        if not self.breaker.allow_request():
            return SourceResult(
                source=self.name, status="skipped", error_message="circuit open"
            )

        started = datetime.now()

        try:
            events = await asyncio.wait_for(
                self._request(city, start_date, end_date), timeout=self.timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return self._failure("timeout", f"no response within {self.timeout}s", started)
        except httpx.HTTPStatusError as e:
            return self._failure("error", f"HTTP {e.response.status_code}", started)
        except Exception as e:
            return self._failure("error", f"{type(e).__name__}: {e}", started)

        self.breaker.record_success()
        duration_ms = _elapsed_ms(started)
        logger.info(
            "source_fetched",
            source=self.name,
            city=city,
            count=len(events),
            duration_ms=duration_ms,
        )
        return SourceResult(
            source=self.name,
            status="success",
            events=events,
            duration_ms=duration_ms,
        )

    def _failure(self, status: str, message: str, started: datetime) -> SourceResult:
        self.breaker.record_failure(message)
        duration_ms = _elapsed_ms(started)
        logger.warning(
            "source_fetch_failed",
            source=self.name,
            status=status,
            duration_ms=duration_ms,
            error=message,
        )
        return SourceResult(
            source=self.name,
            status=status,
            duration_ms=duration_ms,
            error_message=message,
        )


def _elapsed_ms(started: datetime) -> int:
    return int((datetime.now() - started).total_seconds() * 1000)
