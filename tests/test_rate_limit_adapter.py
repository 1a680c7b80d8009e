"""Unit tests for the in-memory interval rate limiter adapter."""

import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest

from app.adapters.rate_limit.base import RateLimitDecision
from app.adapters.rate_limit.in_memory import InMemoryIntervalRateLimiter


def test_first_request_is_allowed() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryIntervalRateLimiter(interval_seconds=30, clock=clock)

    decision = limiter.check_and_record("1.2.3.4")

    assert decision == RateLimitDecision(allowed=True, wait_time_seconds=0.0)
    assert limiter.last_request_at("1.2.3.4") == 1000.0


def test_interval_scenario() -> None:
    clock = Mock(return_value=0.0)
    limiter = InMemoryIntervalRateLimiter(interval_seconds=1.0, clock=clock)

    first = limiter.check_and_record("A")
    assert first.allowed is True
    assert first.wait_time_seconds == 0

    clock.return_value = 0.4
    blocked = limiter.check_and_record("A")
    assert blocked.allowed is False
    assert blocked.wait_time_seconds == pytest.approx(0.6)
    assert blocked.retry_after_seconds == 1

    clock.return_value = 1.0
    again = limiter.check_and_record("A")
    assert again.allowed is True
    assert again.wait_time_seconds == 0


def test_rejection_does_not_reset_window() -> None:
    clock = Mock(return_value=100.0)
    limiter = InMemoryIntervalRateLimiter(interval_seconds=10, clock=clock)
    limiter.check_and_record("k")

    for now in (101.0, 105.0, 109.9):
        clock.return_value = now
        assert limiter.check_and_record("k").allowed is False
        assert limiter.last_request_at("k") == 100.0

    clock.return_value = 110.0
    assert limiter.check_and_record("k").allowed is True
    assert limiter.last_request_at("k") == 110.0


def test_wait_time_counts_down_from_last_admission() -> None:
    clock = Mock(return_value=0.0)
    limiter = InMemoryIntervalRateLimiter(interval_seconds=30, clock=clock)
    limiter.check_and_record("k")

    clock.return_value = 12.5
    assert limiter.check_and_record("k").wait_time_seconds == pytest.approx(17.5)

    clock.return_value = 29.0
    assert limiter.check_and_record("k").wait_time_seconds == pytest.approx(1.0)


def test_isolated_by_key() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryIntervalRateLimiter(interval_seconds=60, clock=clock)

    assert limiter.check_and_record("k1").allowed is True
    assert limiter.check_and_record("k1").allowed is False

    assert limiter.check_and_record("k2").allowed is True


@pytest.mark.parametrize("key", ["", "unknown", " "])
def test_degenerate_keys_are_tracked_like_any_other(key: str) -> None:
    clock = Mock(return_value=0.0)
    limiter = InMemoryIntervalRateLimiter(interval_seconds=5, clock=clock)

    assert limiter.check_and_record(key).allowed is True
    assert limiter.check_and_record(key).allowed is False
    assert key in limiter


def test_cleanup_removes_only_records_older_than_twice_the_interval() -> None:
    clock = Mock(return_value=0.0)
    limiter = InMemoryIntervalRateLimiter(interval_seconds=10, clock=clock)

    limiter.check_and_record("old")
    clock.return_value = 5.0
    limiter.check_and_record("boundary")
    clock.return_value = 15.0
    limiter.check_and_record("recent")

    # ages: old=25 (> 20), boundary=20 (not > 20), recent=10
    clock.return_value = 25.0
    removed = limiter.cleanup()

    assert removed == 1
    assert "old" not in limiter
    assert "boundary" in limiter
    assert "recent" in limiter
    assert len(limiter) == 2


def test_cleanup_on_empty_limiter() -> None:
    limiter = InMemoryIntervalRateLimiter(interval_seconds=1)

    assert limiter.cleanup() == 0
    assert len(limiter) == 0


def test_cleaned_up_client_is_treated_as_first_contact() -> None:
    clock = Mock(return_value=0.0)
    limiter = InMemoryIntervalRateLimiter(interval_seconds=1, clock=clock)
    limiter.check_and_record("k")

    clock.return_value = 3.0
    limiter.cleanup()

    assert "k" not in limiter
    assert limiter.check_and_record("k").allowed is True


def test_concurrent_requests_from_one_client_admit_exactly_one() -> None:
    limiter = InMemoryIntervalRateLimiter(interval_seconds=60)
    workers = 16
    barrier = threading.Barrier(workers)

    def attempt() -> bool:
        barrier.wait()
        return limiter.check_and_record("same-client").allowed

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(lambda _: attempt(), range(workers)))

    assert results.count(True) == 1


def test_concurrent_cleanup_and_admission_keep_state_consistent() -> None:
    limiter = InMemoryIntervalRateLimiter(interval_seconds=0.001)

    def admit(i: int) -> None:
        for n in range(200):
            limiter.check_and_record(f"client-{i}-{n % 20}")

    def sweep() -> None:
        for _ in range(200):
            limiter.cleanup()

    threads = [threading.Thread(target=admit, args=(i,)) for i in range(4)]
    threads.append(threading.Thread(target=sweep))
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(limiter) <= 80


@pytest.mark.parametrize(
    "kwargs",
    [
        {"interval_seconds": 0},
        {"interval_seconds": -1},
        {"interval_seconds": 1, "retention_factor": 0.5},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemoryIntervalRateLimiter(**kwargs)


def test_retention_is_twice_the_interval_by_default() -> None:
    limiter = InMemoryIntervalRateLimiter(interval_seconds=30)

    assert limiter.interval_seconds == 30
    assert limiter.retention_seconds == 60


def test_cleanup_logs_removed_and_remaining(caplog) -> None:
    clock = Mock(return_value=0.0)
    limiter = InMemoryIntervalRateLimiter(interval_seconds=10, clock=clock)
    limiter.check_and_record("old")
    clock.return_value = 15.0
    limiter.check_and_record("a")
    limiter.check_and_record("b")

    clock.return_value = 25.0
    with caplog.at_level("INFO", logger="app.adapters.rate_limit.in_memory"):
        limiter.cleanup()

    records = [r for r in caplog.records if r.getMessage() == "rate_limit.cleanup"]
    assert len(records) == 1
    assert records[0].removed == 1
    assert records[0].remaining == 2
    assert records[0].retention_s == 20
