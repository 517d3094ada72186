"""Retry decorator for optimistic-concurrency write conflicts.

A lifecycle operation that loses a version race is re-run from the start: it
reloads the documents it touches and re-validates against their new state.
Only ``ConcurrentModificationError`` is retried; every other error propagates
on the first attempt.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import structlog
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from marketplace.domain.errors import ConcurrentModificationError

logger = structlog.get_logger()

F = TypeVar("F", bound=Callable[..., Any])


def _before_sleep_log(retry_state: RetryCallState) -> None:
    """Log a warning before each retry attempt.

    Args:
        retry_state: Tenacity retry state with attempt info.
    """
    operation = getattr(retry_state.fn, "_operation", "unknown") if retry_state.fn else "unknown"
    exception = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "write_conflict_retry",
        operation=operation,
        attempt=retry_state.attempt_number,
        wait=retry_state.next_action.sleep if retry_state.next_action else 0,
        error=str(exception),
    )


def retry_on_conflict(operation: str, attempts: int = 3) -> Callable[[F], F]:
    """Create a retry decorator for a versioned write.

    Returns a tenacity retry decorator configured with:
    - *attempts* attempts maximum
    - Short exponential backoff with jitter (10ms initial, 200ms max)
    - Warning log before each retry
    - The last ``ConcurrentModificationError`` re-raised after exhaustion

    Args:
        operation: Name of the lifecycle operation (used in logs).
        attempts: Total number of attempts, including the first.

    Returns:
        A decorator that wraps the function with retry logic.
    """

    def decorator(func: F) -> F:
        func._operation = operation  # type: ignore[attr-defined]

        wrapped = retry(
            retry=retry_if_exception_type(ConcurrentModificationError),
            stop=stop_after_attempt(max(attempts, 1)),
            wait=wait_exponential_jitter(initial=0.01, max=0.2, jitter=0.05),
            before_sleep=_before_sleep_log,
            reraise=True,
        )(func)

        return wrapped  # type: ignore[return-value]

    return decorator


def run_with_conflict_retry(
    operation: str, func: Callable[[], Any], attempts: int = 3
) -> Any:
    """Call *func* under :func:`retry_on_conflict` with a runtime attempt count."""
    return retry_on_conflict(operation, attempts)(func)()
