"""Tests for the periodic background task used for rate limiter cleanup."""

import asyncio

import pytest

from app.core.scheduler import PeriodicTask


@pytest.mark.asyncio
async def test_runs_function_repeatedly_until_stopped():
    calls: list[int] = []
    task = PeriodicTask("collect", 0.01, lambda: calls.append(1))

    await task.start()
    assert task.running is True
    await asyncio.sleep(0.1)
    await task.stop()

    assert task.running is False
    assert len(calls) >= 2
    assert task.runs == len(calls)

    count = len(calls)
    await asyncio.sleep(0.05)
    assert len(calls) == count


@pytest.mark.asyncio
async def test_first_run_waits_one_interval():
    calls: list[int] = []
    task = PeriodicTask("slow", 10, lambda: calls.append(1))

    await task.start()
    await asyncio.sleep(0.02)
    await task.stop()

    assert calls == []
    assert task.runs == 0


@pytest.mark.asyncio
async def test_failing_run_is_logged_and_loop_continues(caplog):
    attempts: list[int] = []

    def flaky() -> None:
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("sweep failed")

    task = PeriodicTask("flaky", 0.01, flaky)

    with caplog.at_level("ERROR", logger="app.core.scheduler"):
        await task.start()
        await asyncio.sleep(0.1)
        await task.stop()

    assert len(attempts) >= 2
    assert any(r.getMessage() == "periodic_task.failed" for r in caplog.records)


@pytest.mark.asyncio
async def test_start_twice_keeps_single_loop():
    task = PeriodicTask("once", 0.01, lambda: None)

    await task.start()
    first = task._task
    await task.start()

    assert task._task is first
    await task.stop()


@pytest.mark.asyncio
async def test_stop_without_start_is_noop():
    task = PeriodicTask("idle", 1, lambda: None)

    await task.stop()

    assert task.running is False


@pytest.mark.parametrize("interval", [0, -1])
def test_rejects_non_positive_interval(interval):
    with pytest.raises(ValueError):
        PeriodicTask("bad", interval, lambda: None)
