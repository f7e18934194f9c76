"""Resilience patterns keeping provider failures away from callers."""

from .circuit_breaker import CircuitBreaker, CircuitState
from .fallback import FallbackChain, FallbackExhaustedError, with_default
from .health import HealthMonitor

__all__ = [
    "CircuitBreaker",
    "CircuitState",
    "FallbackChain",
    "FallbackExhaustedError",
    "HealthMonitor",
    "with_default",
]
