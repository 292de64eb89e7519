"""
Timer facility backed by the running asyncio event loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Protocol


class TimerFacility(Protocol):
    def set_interval(self, callback: Callable[[], None], interval_ms: int) -> Any: ...

    def clear_interval(self, handle: Any) -> None: ...


class IntervalHandle:
    """Repeating ``call_later`` chain; cancelling stops the next tick."""

    def __init__(self, loop: asyncio.AbstractEventLoop, callback: Callable[[], None], interval: float) -> None:
        self._loop = loop
        self._callback = callback
        self._interval = interval
        self._timer: asyncio.TimerHandle | None = None
        self._cancelled = False
        self._schedule()

    def _schedule(self) -> None:
        self._timer = self._loop.call_later(self._interval, self._tick)

    def _tick(self) -> None:
        if self._cancelled:
            return
        self._schedule()
        self._callback()

    def cancel(self) -> None:
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class LoopTimers:
    """
    :class:`TimerFacility` on the event loop running at ``set_interval`` time.

    Raises:
        RuntimeError: From ``set_interval`` when no event loop is running
    """

    def set_interval(self, callback: Callable[[], None], interval_ms: int) -> IntervalHandle:
        loop = asyncio.get_running_loop()
        return IntervalHandle(loop, callback, interval_ms / 1000)

    def clear_interval(self, handle: IntervalHandle) -> None:
        handle.cancel()
