"""Fallback chain pattern for graceful degradation."""

from typing import Any, Callable, Coroutine, Optional, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")


class FallbackExhaustedError(Exception):
    """Raised when no tier of a fallback chain produced an acceptable result."""

    def __init__(self, tiers: list[str], last_error: Optional[Exception] = None):
        super().__init__(f"All fallback tiers exhausted: {', '.join(tiers)}")
        self.tiers = tiers
        self.last_error = last_error


class FallbackChain:
    """Execute async tiers in order until one yields an acceptable result.

    A tier that raises, or whose result fails the ``accept`` predicate,
    hands over to the next tier.
    """

    def __init__(
        self,
        *functions: Callable[..., Coroutine[Any, Any, T]],
        accept: Optional[Callable[[T], bool]] = None,
    ):
        """Initialize fallback chain with ordered tiers.

        Args:
            *functions: Async functions to try in order
            accept: Predicate a result must satisfy; defaults to accepting
                    anything that did not raise
        """
        self.functions = functions
        self.accept = accept or (lambda result: True)

    async def execute(self, *args: Any, **kwargs: Any) -> T:
        """Execute tiers in order until one is accepted.

        Returns:
            Result from the first accepted tier

        Raises:
            FallbackExhaustedError: If every tier failed or was rejected
        """
        last_error: Exception | None = None

        for i, func in enumerate(self.functions):
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                last_error = e
                logger.warning(
                    "fallback_attempt_failed",
                    function=func.__name__,
                    attempt=i + 1,
                    total_functions=len(self.functions),
                    error=str(e),
                )
                continue

            if not self.accept(result):
                logger.info(
                    "fallback_result_rejected",
                    function=func.__name__,
                    attempt=i + 1,
                    total_functions=len(self.functions),
                )
                continue

            if i > 0:
                logger.info(
                    "fallback_used",
                    function=func.__name__,
                    attempt=i + 1,
                    total_functions=len(self.functions),
                )
            return result

        tiers = [f.__name__ for f in self.functions]
        logger.error(
            "fallback_chain_exhausted",
            functions=tiers,
            final_error=str(last_error) if last_error else None,
        )
        raise FallbackExhaustedError(tiers, last_error)


async def with_default(
    func: Callable[..., Coroutine[Any, Any, T]],
    default: T,
    *args: Any,
    **kwargs: Any,
) -> T:
    """Execute function and return default value on failure.

    Args:
        func: Async function to execute
        default: Value to return if function fails
        *args: Positional arguments for function
        **kwargs: Keyword arguments for function

    Returns:
        Function result or default value
    """
    try:
        return await func(*args, **kwargs)
    except Exception as e:
        logger.warning(
            "using_default_value",
            function=func.__name__,
            error=str(e),
            error_type=type(e).__name__,
        )
        return default
