"""
Concurrent fan-out to providers, then merge, dedup and sort.

All enabled sources are started in one batch and every one is awaited
(settle-all). A failing or slow source contributes nothing and never holds
up the others beyond its own deadline.
"""

import asyncio
from typing import Sequence

import structlog

from .dedup import deduplicate, format_audit_summary
from .models import Event, SourceResult
from .sources.base import EventSource

logger = structlog.get_logger()


async def gather_sources(
    sources: Sequence[EventSource],
    city: str,
    start_date: str,
    end_date: str,
) -> list[SourceResult]:
    """Run every source concurrently and collect one result per source."""
    outcomes = await asyncio.gather(
        *(source.fetch(city, start_date, end_date) for source in sources),
        return_exceptions=True,
    )

    results = []
    for source, outcome in zip(sources, outcomes):
        if isinstance(outcome, BaseException):
            # fetch() does not raise; anything here is a bug in an adapter
            logger.error(
                "source_raised",
                source=source.name,
                error=str(outcome),
                error_type=type(outcome).__name__,
            )
            outcome = SourceResult(
                source=source.name, status="error", error_message=str(outcome)
            )
        results.append(outcome)
    return results


def sort_events(events: list[Event]) -> list[Event]:
    """
    Order events by their "date time" string.

    Events without a date stay at the index they already occupy; only the
    dated events are reordered among the remaining positions.
    """
    dated_slots = [i for i, event in enumerate(events) if event.date]
    ordered = sorted((events[i] for i in dated_slots), key=lambda e: e.sort_key)

    result = list(events)
    for slot, event in zip(dated_slots, ordered):
        result[slot] = event
    return result


async def aggregate(
    sources: Sequence[EventSource],
    city: str,
    start_date: str,
    end_date: str,
) -> tuple[list[Event], list[SourceResult]]:
    """
    Fetch from all sources and merge into one deduplicated, sorted list.

    Args:
        sources: Enabled sources, in merge order
        city: Destination city
        start_date: Start date (YYYY-MM-DD)
        end_date: End date (YYYY-MM-DD)

    Returns:
        Tuple of (events, per-source results)
    """
    results = await gather_sources(sources, city, start_date, end_date)

    combined: list[Event] = []
    for result in results:
        if result.ok:
            combined.extend(result.events)

    dedupe_result = deduplicate(combined)
    events = sort_events(dedupe_result.events)
    if dedupe_result.audit_trail:
        logger.debug("dedup_audit", city=city, summary=format_audit_summary(dedupe_result))

    logger.info(
        "events_aggregated",
        city=city,
        sources=len(results),
        failed_sources=[r.source for r in results if not r.ok],
        fetched=len(combined),
        duplicates_removed=dedupe_result.duplicates_removed,
        total=len(events),
    )
    return events, results
