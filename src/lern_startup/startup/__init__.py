"""
Startup helpers for the Lern API.

This package provides:
- Fixed-delay, bounded retry of dependency readiness actions
- Blocking and asyncio variants sharing the same exhaustion contract
"""

from .retry import (
    RetryPlan,
    run_with_retry,
    run_with_retry_async,
)

__all__ = [
    "RetryPlan",
    "run_with_retry",
    "run_with_retry_async",
]
