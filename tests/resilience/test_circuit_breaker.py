"""Tests for circuit breaker pattern."""

import pytest

from servers.event_discovery.resilience.circuit_breaker import CircuitBreaker, CircuitState
from tests.stubs import FakeClock, StubSource


class TestCircuitBreaker:
    """Tests for CircuitBreaker class."""

    def test_starts_closed(self):
        """Circuit breaker should start in closed state."""
        cb = CircuitBreaker(failure_threshold=3)
        assert cb.state == CircuitState.CLOSED
        assert not cb.is_open
        assert cb.allow_request()

    def test_opens_after_threshold_failures(self):
        """Circuit should open after reaching failure threshold."""
        cb = CircuitBreaker(failure_threshold=3)

        for _ in range(3):
            cb.record_failure("boom")

        assert cb.state == CircuitState.OPEN
        assert cb.is_open
        assert not cb.allow_request()

    def test_success_resets_failure_count(self):
        """A success between failures should keep the circuit closed."""
        cb = CircuitBreaker(failure_threshold=2)

        cb.record_failure("boom")
        cb.record_success()
        cb.record_failure("boom")

        assert cb.state == CircuitState.CLOSED
        assert cb.failure_count == 1

    def test_half_open_after_recovery_timeout(self):
        """Open circuit should allow a trial call once the timeout passes."""
        clock = FakeClock()
        cb = CircuitBreaker(failure_threshold=1, recovery_timeout=60, clock=clock)

        cb.record_failure("boom")
        assert not cb.allow_request()

        clock.advance(seconds=61)

        assert cb.allow_request()
        assert cb.state == CircuitState.HALF_OPEN

    def test_closes_on_half_open_success(self):
        clock = FakeClock()
        cb = CircuitBreaker(failure_threshold=1, recovery_timeout=10, clock=clock)

        cb.record_failure("boom")
        clock.advance(seconds=11)
        cb.allow_request()
        cb.record_success()

        assert cb.state == CircuitState.CLOSED

    def test_reopens_on_half_open_failure(self):
        """A failed trial call should reopen the circuit immediately."""
        clock = FakeClock()
        cb = CircuitBreaker(failure_threshold=3, recovery_timeout=10, clock=clock)

        for _ in range(3):
            cb.record_failure("boom")
        clock.advance(seconds=11)
        cb.allow_request()
        cb.record_failure("still down")

        assert cb.state == CircuitState.OPEN
        assert not cb.allow_request()

    def test_manual_reset(self):
        cb = CircuitBreaker(failure_threshold=1)
        cb.record_failure("boom")

        cb.reset()

        assert cb.state == CircuitState.CLOSED
        assert cb.failure_count == 0
        assert cb.last_failure_time is None

    def test_get_status(self):
        """Should return status dictionary."""
        cb = CircuitBreaker(failure_threshold=5, name="Ticketmaster")
        cb.record_failure("boom")

        status = cb.get_status()

        assert status["name"] == "Ticketmaster"
        assert status["state"] == "closed"
        assert status["failure_count"] == 1
        assert status["failure_threshold"] == 5
        assert status["last_failure"] is not None


class TestSourceCircuit:
    """Circuit breaker wired into a source's fetch."""

    @pytest.mark.asyncio
    async def test_open_circuit_skips_provider(self):
        breaker = CircuitBreaker(failure_threshold=2, name="Flaky")
        source = StubSource("Flaky", error=RuntimeError("boom"), breaker=breaker)

        await source.fetch("Austin", "2025-06-01", "2025-06-03")
        await source.fetch("Austin", "2025-06-01", "2025-06-03")
        result = await source.fetch("Austin", "2025-06-01", "2025-06-03")

        assert source.calls == 2
        assert result.status == "skipped"
        assert result.error_message == "circuit open"
        assert result.events == []

    @pytest.mark.asyncio
    async def test_success_keeps_circuit_closed(self, make_event):
        source = StubSource("Steady", events=[make_event()])

        result = await source.fetch("Austin", "2025-06-01", "2025-06-03")

        assert result.status == "success"
        assert source.breaker.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_recovery_call_then_close(self, make_event):
        """After the recovery timeout one call goes through; success closes the circuit."""
        clock = FakeClock()
        breaker = CircuitBreaker(
            failure_threshold=2, recovery_timeout=60, name="Flaky", clock=clock
        )
        source = StubSource(
            "Flaky", events=[make_event()], error=RuntimeError("boom"), breaker=breaker
        )

        for _ in range(3):
            await source.fetch("Austin", "2025-06-01", "2025-06-03")
        assert source.calls == 2
        assert breaker.is_open

        clock.advance(seconds=61)
        source.error = None
        result = await source.fetch("Austin", "2025-06-01", "2025-06-03")

        assert source.calls == 3
        assert result.status == "success"
        assert result.count == 1
        assert breaker.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_failed_recovery_call_reopens(self):
        clock = FakeClock()
        breaker = CircuitBreaker(
            failure_threshold=2, recovery_timeout=60, name="Flaky", clock=clock
        )
        source = StubSource("Flaky", error=RuntimeError("boom"), breaker=breaker)

        for _ in range(2):
            await source.fetch("Austin", "2025-06-01", "2025-06-03")
        clock.advance(seconds=61)

        recovery_result = await source.fetch("Austin", "2025-06-01", "2025-06-03")
        skipped = await source.fetch("Austin", "2025-06-01", "2025-06-03")

        assert recovery_result.status == "error"
        assert source.calls == 3
        assert skipped.status == "skipped"
        assert breaker.is_open

    @pytest.mark.asyncio
    async def test_timeouts_count_as_failures(self):
        breaker = CircuitBreaker(failure_threshold=1, name="Slow")
        source = StubSource("Slow", delay=1.0, timeout=0.05, breaker=breaker)

        result = await source.fetch("Austin", "2025-06-01", "2025-06-03")

        assert result.status == "timeout"
        assert breaker.is_open
