"""Debounce and throttle a single logical action slot.

Both classes mutate their state only from synchronous code running on the
event loop, so a cancel() that runs before the timer callback always wins.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from contextlib import suppress
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


def _log_task_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("debounced action failed", exc_info=exc)


class Debouncer:
    """Only the last call within `delay` seconds runs, with that call's arguments."""

    def __init__(self, delay: float) -> None:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None
        self._running: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def debounce(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        loop = asyncio.get_running_loop()
        self.cancel()
        self._handle = loop.call_later(self.delay, self._fire, fn, args, kwargs)

    def cancel(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.cancel()

    def execute_now(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        self.cancel()
        self._run(fn, args, kwargs)

    def _fire(self, fn: Callable[..., Any], args: tuple, kwargs: dict) -> None:
        self._handle = None
        self._run(fn, args, kwargs)

    def _run(self, fn: Callable[..., Any], args: tuple, kwargs: dict) -> None:
        try:
            result = fn(*args, **kwargs)
        except Exception:
            logger.exception("debounced action failed")
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            task.add_done_callback(_log_task_failure)
            self._running = task

    async def wait(self) -> None:
        """Wait for the most recently started action to finish."""
        task = self._running
        if task is not None:
            with suppress(Exception, asyncio.CancelledError):
                await asyncio.shield(task)

    async def aclose(self) -> None:
        self.cancel()
        task, self._running = self._running, None
        if task is not None and not task.done():
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task


class Throttler:
    """Runs a call only if `interval` has elapsed since the last run; drops it otherwise."""

    def __init__(
        self, interval: float, *, clock: Callable[[], float] = time.monotonic
    ) -> None:
        if interval < 0:
            raise ValueError("interval must be >= 0")
        self.interval = interval
        self._clock = clock
        self._last: Optional[float] = None

    def try_acquire(self) -> bool:
        now = self._clock()
        if self._last is not None and now - self._last < self.interval:
            return False
        self._last = now
        return True

    async def throttle(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> bool:
        if not self.try_acquire():
            logger.debug("throttled call dropped", extra={"interval": self.interval})
            return False
        result = fn(*args, **kwargs)
        if inspect.isawaitable(result):
            await result
        return True

    def reset(self) -> None:
        self._last = None
