"""Resilience infrastructure for versioned document writes."""

from marketplace.resilience.retry import retry_on_conflict, run_with_conflict_retry

__all__ = [
    "retry_on_conflict",
    "run_with_conflict_retry",
]
