"""Circuit breaker guarding calls to one event provider."""

from datetime import datetime
from enum import Enum
from typing import Any, Callable

import structlog

logger = structlog.get_logger()


class CircuitState(Enum):
    """States for the circuit breaker."""

    CLOSED = "closed"  # Normal operation, provider is called
    OPEN = "open"  # Provider failing, calls skipped
    HALF_OPEN = "half_open"  # Trial call to see whether the provider recovered


class CircuitBreaker:
    """Stops calling a provider after repeated failures.

    The owning source asks ``allow_request()`` before each call and reports
    the outcome with ``record_success()`` / ``record_failure()``. After
    ``recovery_timeout`` seconds an open circuit lets one trial call through.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: int = 60,
        name: str = "default",
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize circuit breaker.

        Args:
            failure_threshold: Consecutive failures before opening circuit
            recovery_timeout: Seconds to wait before probing again
            name: Provider name for logging
            clock: Source of the current time
        """
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.name = name
        self.clock = clock
        self.failure_count = 0
        self.state = CircuitState.CLOSED
        self.last_failure_time: datetime | None = None

    def allow_request(self) -> bool:
        """Whether the provider should be called right now."""
        if self.state != CircuitState.OPEN:
            return True

        if self._should_attempt_reset():
            self.state = CircuitState.HALF_OPEN
            logger.info("circuit_half_open", circuit=self.name)
            return True

        return False

    def _should_attempt_reset(self) -> bool:
        if not self.last_failure_time:
            return True
        elapsed = (self.clock() - self.last_failure_time).total_seconds()
        return elapsed >= self.recovery_timeout

    def record_success(self) -> None:
        if self.state == CircuitState.HALF_OPEN:
            logger.info("circuit_closed", circuit=self.name)
        self.failure_count = 0
        self.state = CircuitState.CLOSED

    def record_failure(self, error: str) -> None:
        self.failure_count += 1
        self.last_failure_time = self.clock()

        if self.state == CircuitState.HALF_OPEN or self.failure_count >= self.failure_threshold:
            if self.state != CircuitState.OPEN:
                logger.warning(
                    "circuit_opened",
                    circuit=self.name,
                    failure_count=self.failure_count,
                    recovery_timeout=self.recovery_timeout,
                    error=error,
                )
            self.state = CircuitState.OPEN

    def reset(self) -> None:
        """Manually reset circuit breaker to closed state."""
        self.failure_count = 0
        self.state = CircuitState.CLOSED
        self.last_failure_time = None

    @property
    def is_open(self) -> bool:
        return self.state == CircuitState.OPEN

    def get_status(self) -> dict[str, Any]:
        """Get current circuit breaker status."""
        return {
            "name": self.name,
            "state": self.state.value,
            "failure_count": self.failure_count,
            "failure_threshold": self.failure_threshold,
            "last_failure": (
                self.last_failure_time.isoformat() if self.last_failure_time else None
            ),
        }
