"""In-memory minimum-interval rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective rate.
- Thread-safe: check-and-record and cleanup run under one lock, so two
  concurrent requests from the same client can never both be admitted.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitDecision

logger = logging.getLogger(__name__)


class InMemoryIntervalRateLimiter(AbstractRateLimiter):
    """One slot per client per interval.

    Each client identifier maps to the timestamp of its last admitted request.
    A request is admitted when at least ``interval_seconds`` elapsed since
    then. Rejected requests leave the stored timestamp untouched, so hammering
    the endpoint does not push a client's eligibility further out.

    Records older than ``retention_factor * interval_seconds`` are dropped by
    :meth:`cleanup`, which bounds memory to the clients seen recently.
    """

    def __init__(
        self,
        *,
        interval_seconds: float,
        retention_factor: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the limiter.

        Args:
            interval_seconds: Minimum time between two admitted requests.
            retention_factor: Multiple of the interval after which a record
                becomes eligible for eviction.
            clock: Time source returning seconds.

        Raises:
            ValueError: If interval_seconds or retention_factor are invalid.
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        if retention_factor < 1:
            raise ValueError("retention_factor must be >= 1")

        self._interval = float(interval_seconds)
        self._retention = self._interval * retention_factor
        self._clock = clock
        self._lock = threading.Lock()
        self._last_request_by_key: dict[str, float] = {}

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def retention_seconds(self) -> float:
        return self._retention

    def __len__(self) -> int:
        with self._lock:
            return len(self._last_request_by_key)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._last_request_by_key

    def last_request_at(self, key: str) -> float | None:
        """Timestamp of the last admitted request for ``key``, if tracked."""
        with self._lock:
            return self._last_request_by_key.get(key)

    def check_and_record(self, key: str) -> RateLimitDecision:
        """Admit or reject a request for ``key``.

        First contact and requests arriving at least one interval after the
        last admission are allowed and overwrite the stored timestamp.
        Anything earlier is rejected with the remaining wait time.
        """
        with self._lock:
            now = self._clock()
            last = self._last_request_by_key.get(key)

            if last is not None:
                elapsed = now - last
                if elapsed < self._interval:
                    return RateLimitDecision(allowed=False, wait_time_seconds=self._interval - elapsed)

            self._last_request_by_key[key] = now
            return RateLimitDecision(allowed=True)

    def cleanup(self) -> int:
        """Drop records whose age exceeds the retention threshold."""
        with self._lock:
            now = self._clock()
            stale = [
                key
                for key, last in self._last_request_by_key.items()
                if now - last > self._retention
            ]
            for key in stale:
                del self._last_request_by_key[key]
            remaining = len(self._last_request_by_key)

        logger.info(
            "rate_limit.cleanup",
            extra={
                "removed": len(stale),
                "remaining": remaining,
                "retention_s": self._retention,
            },
        )
        return len(stale)
