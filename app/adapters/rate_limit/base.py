"""Rate limiter interfaces.

The API depends on this abstraction (not the concrete implementation) so the
storage backend can be swapped later with minimal changes.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of an admission check.

    Attributes:
        allowed: Whether the request may proceed.
        wait_time_seconds: Time until the client would be admitted again
            (0 when allowed).
    """

    allowed: bool
    wait_time_seconds: float = 0.0

    @property
    def retry_after_seconds(self) -> int:
        """Wait time rounded up to whole seconds, as sent to clients."""
        return max(0, math.ceil(self.wait_time_seconds))


class AbstractRateLimiter(ABC):
    """Interface for per-client interval rate limiters."""

    @abstractmethod
    def check_and_record(self, key: str) -> RateLimitDecision:
        """Admit or reject a request for ``key``, recording admissions.

        Args:
            key: Client identifier. Any string is accepted, including empty.

        Returns:
            RateLimitDecision describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def cleanup(self) -> int:
        """Evict stale client records.

        Returns:
            Number of records removed.
        """
        raise NotImplementedError
