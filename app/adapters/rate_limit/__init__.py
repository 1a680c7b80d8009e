"""Rate limiting adapters.

The gateway starts with an in-memory, per-process limiter; the abstract
interface lets a shared store replace it without touching the API layer.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitDecision
from app.adapters.rate_limit.in_memory import InMemoryIntervalRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "InMemoryIntervalRateLimiter",
    "RateLimitDecision",
]
