"""
Exact-key deduplication for events reported by several providers.

Key: lowercase(name) + "_" + date + "_" + lowercase(venue)

Venue and name strings are not trimmed or fuzzy-matched: "Blue Note" and
"Blue Note " are different venues. The first event seen under a key is
kept; later ones are dropped after donating image, price, url and
coordinates the kept event lacks.
"""

from .models import DedupeResult, DuplicateMatch, Event


def deduplicate(events: list[Event]) -> DedupeResult:
    """
    Deduplicate a list of events, enriching the first of each group.

    Args:
        events: Events in merge order (earlier wins)

    Returns:
        DedupeResult with deduplicated events and audit trail
    """
    if not events:
        return DedupeResult(events=[], original_count=0, duplicates_removed=0)

    seen: dict[str, Event] = {}
    result_events: list[Event] = []
    audit_trail: list[DuplicateMatch] = []

    for event in events:
        key = event.dedup_key
        canonical = seen.get(key)

        if canonical is None:
            seen[key] = event
            result_events.append(event)
            continue

        enriched = canonical.enrich_from(event)
        audit_trail.append(DuplicateMatch(
            kept_event_id=canonical.id,
            merged_event_id=event.id,
            dedup_key=key,
            enriched_fields=enriched,
            reason=f"Merged '{event.name}' ({event.source}) into '{canonical.name}' ({canonical.source})"
        ))

    return DedupeResult(
        events=result_events,
        original_count=len(events),
        duplicates_removed=len(events) - len(result_events),
        audit_trail=audit_trail
    )


def format_audit_summary(result: DedupeResult) -> str:
    """Format audit trail as human-readable summary."""
    if not result.audit_trail:
        return "No duplicates found."

    lines = [
        "Deduplication Summary:",
        f"  Original events: {result.original_count}",
        f"  Duplicates removed: {result.duplicates_removed}",
        f"  Final events: {len(result.events)}",
        f"  Dedup rate: {result.dedup_rate:.1f}%",
        "",
        "Merged events:"
    ]

    for match in result.audit_trail:
        enriched = ", ".join(match.enriched_fields) or "nothing"
        lines.append(f"  - {match.reason} (enriched: {enriched})")

    return "\n".join(lines)
