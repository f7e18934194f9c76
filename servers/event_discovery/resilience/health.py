"""Health monitoring for event providers."""

from datetime import datetime
from typing import Any

import structlog

from ..models import SourceResult

logger = structlog.get_logger()


class HealthMonitor:
    """Track which providers actually contributed on their last call.

    The orchestrator reports configured providers as ``sources``; this
    monitor is where per-call contribution is recorded.
    """

    def __init__(self):
        self.status: dict[str, dict[str, Any]] = {}

    def record(self, result: SourceResult) -> None:
        """Record the outcome of one provider call."""
        if result.ok:
            self.record_success(result.source, result.count)
        else:
            self.record_failure(
                result.source,
                result.error_message or result.status,
                status=result.status,
            )

    def record_success(self, source: str, event_count: int) -> None:
        self.status[source] = {
            "healthy": True,
            "last_check": datetime.now().isoformat(),
            "last_status": "success",
            "event_count": event_count,
            "consecutive_failures": 0,
            "last_error": None,
        }
        logger.debug("source_healthy", source=source, event_count=event_count)

    def record_failure(self, source: str, error: str, status: str = "error") -> None:
        current = self.status.get(source, {"consecutive_failures": 0})
        consecutive = current.get("consecutive_failures", 0) + 1

        self.status[source] = {
            "healthy": False,
            "last_check": datetime.now().isoformat(),
            "last_status": status,
            "event_count": 0,
            "consecutive_failures": consecutive,
            "last_error": error,
        }
        logger.warning(
            "source_unhealthy",
            source=source,
            status=status,
            consecutive_failures=consecutive,
            error=error,
        )

    def is_healthy(self, source: str) -> bool:
        """Unknown sources count as healthy."""
        return self.status.get(source, {}).get("healthy", True)

    def get_source_status(self, source: str) -> dict[str, Any] | None:
        return self.status.get(source)

    def get_status(self) -> dict[str, Any]:
        """Get full health status report.

        Returns:
            Dict with timestamp, summary counts and all source statuses
        """
        healthy_count = sum(1 for s in self.status.values() if s.get("healthy", False))
        total_count = len(self.status)

        return {
            "timestamp": datetime.now().isoformat(),
            "summary": {
                "healthy": healthy_count,
                "unhealthy": total_count - healthy_count,
                "total": total_count,
            },
            "sources": self.status,
        }

    def get_contributing_sources(self) -> list[str]:
        """Sources whose last call succeeded with at least one event."""
        return [
            name for name, status in self.status.items()
            if status.get("healthy", False) and status.get("event_count", 0) > 0
        ]

    def get_unhealthy_sources(self) -> list[str]:
        return [
            name for name, status in self.status.items() if not status.get("healthy", True)
        ]

    def reset(self, source: str | None = None) -> None:
        """Reset health status for one source, or all when source is None."""
        if source:
            self.status.pop(source, None)
        else:
            self.status.clear()
