"""Cancellable repeating background task.

Used by the application lifespan to sweep stale rate limiter records on a
fixed period, independently of request handling.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Run a synchronous callable every ``interval_seconds`` on the event loop.

    The first run happens one interval after :meth:`start`. A failing run is
    logged and the loop keeps going.
    """

    def __init__(
        self,
        name: str,
        interval_seconds: float,
        func: Callable[[], object],
        *,
        stop_timeout_seconds: float = 5.0,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")

        self.name = name
        self._interval = interval_seconds
        self._func = func
        self._stop_timeout = stop_timeout_seconds
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self.runs = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background loop (no-op when already running)."""
        if self._task is not None:
            logger.debug("periodic_task.already_running", extra={"task": self.name})
            return

        self._stop_event.clear()
        self._task = asyncio.create_task(self._run(), name=self.name)
        logger.info(
            "periodic_task.started",
            extra={"task": self.name, "interval_s": self._interval},
        )

    async def stop(self) -> None:
        """Signal the loop to stop, cancelling it if it does not exit in time."""
        if self._task is None:
            return

        self._stop_event.set()
        try:
            await asyncio.wait_for(self._task, timeout=self._stop_timeout)
        except asyncio.TimeoutError:
            logger.warning("periodic_task.stop_timeout", extra={"task": self.name})
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        finally:
            self._task = None
            logger.info("periodic_task.stopped", extra={"task": self.name, "runs": self.runs})

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
                break
            except asyncio.TimeoutError:
                pass

            try:
                self._func()
            except Exception:
                logger.exception("periodic_task.failed", extra={"task": self.name})
            self.runs += 1
