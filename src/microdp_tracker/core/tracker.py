"""
Event tracker: the composition root of the SDK.

Buffers events in memory and ships them in batches without blocking or
raising into host code. Flushes are triggered by queue size, the periodic
timer, host lifecycle signals, or explicit ``flush`` calls.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Any

import httpx

from ..api.delivery import DeliveryEngine
from ..api.http_client import HTTPClient
from ..helpers.datetime_utils import _utcnow
from ..helpers.ids import create_id
from ..helpers.logging_config import debug_log, get_logger
from ..helpers.retry import SleepFunc
from ..host.capabilities import Platform
from ..models.event import FlushOptions, FlushResult, TrackerEvent, TrackOptions
from .config import TrackerConfig
from .event_builder import EventBuilder
from .event_queue import EventQueue
from .scheduler import Scheduler

logger = get_logger()


class TrackerState(Enum):
    UNINITIALIZED = "uninitialized"
    DISABLED = "disabled"
    ACTIVE = "active"


class Tracker:
    """
    Client-side event tracker.

    Create one per host application and share it. ``track``, ``identify``
    and ``page`` never raise and never block; ``flush`` reports its outcome
    as a :class:`FlushResult` instead of raising.

    Example:
        >>> tracker = Tracker(platform=Platform.default())
        >>> tracker.init(endpoint="https://collector.example.com/events", user_id="u-1")
        >>> tracker.track("signup_clicked", {"source": "hero"})
        >>> await tracker.flush()
    """

    def __init__(
        self,
        *,
        platform: Platform | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        http_client: HTTPClient | None = None,
        sleep: SleepFunc = asyncio.sleep,
        id_factory: Callable[[], str] = create_id,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._owns_platform = platform is None
        self._platform = platform if platform is not None else Platform.default()
        self._http = http_client or HTTPClient(transport=transport)
        self._delivery = DeliveryEngine(self._http, self._platform.beacon, sleep=sleep)
        self._builder = EventBuilder(id_factory=id_factory, clock=clock)
        self._scheduler = Scheduler(self._platform, self.flush_nowait)
        self._queue = EventQueue()
        self._config = TrackerConfig(enabled=False)
        self._state = TrackerState.UNINITIALIZED
        self._in_flight = False
        self._tasks: set[asyncio.Task[FlushResult]] = set()

    @property
    def config(self) -> TrackerConfig:
        return self._config

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def platform(self) -> Platform:
        return self._platform

    def __len__(self) -> int:
        return len(self._queue)

    def pending_events(self) -> list[TrackerEvent]:
        """Copy of the queued events, oldest first."""
        return self._queue.snapshot()

    def init(self, config: TrackerConfig | None = None, **overrides: Any) -> None:
        """
        (Re)configure the tracker.

        Keyword ``overrides`` are applied over ``config`` (or the defaults).
        Any timer and listeners from a previous ``init`` are removed first.
        Queued events are kept.

        A config that fails validation raises before anything changes, so the
        previous configuration keeps running.

        Raises:
            ValueError: If the resulting config has out-of-range values
            TypeError: If an override names an unknown field
        """
        resolved = config or TrackerConfig()
        if overrides:
            resolved = replace(resolved, **overrides)

        self._scheduler.teardown()
        self._config = resolved

        if not resolved.enabled:
            self._state = TrackerState.DISABLED
            debug_log(resolved.debug, "tracker disabled")
            return

        if not resolved.endpoint:
            self._config = replace(resolved, enabled=False)
            self._state = TrackerState.DISABLED
            debug_log(resolved.debug, "tracker disabled because endpoint is empty")
            return

        self._state = TrackerState.ACTIVE
        self._scheduler.install(resolved)
        debug_log(resolved.debug, "tracker initialized", endpoint=resolved.endpoint)

    def track(
        self,
        event_name: str,
        properties: Mapping[str, Any] | None = None,
        options: TrackOptions | None = None,
        **option_overrides: Any,
    ) -> None:
        """
        Queue an event.

        ``option_overrides`` are :class:`TrackOptions` fields given as keywords
        (``user_id=...``, ``event_time=...``). Reaching ``max_queue_size``
        starts a background flush.
        """
        if self._state is not TrackerState.ACTIVE:
            return
        try:
            if option_overrides:
                options = replace(options or TrackOptions(), **option_overrides)
            event = self._builder.build(self._config, event_name, properties, options)
        except (TypeError, ValueError) as e:
            debug_log(self._config.debug, "event rejected", error=f"{type(e).__name__}: {e}")
            return

        if self._queue.append(event) >= self._config.max_queue_size:
            self.flush_nowait()

    def identify(self, user_id: str, traits: Mapping[str, Any] | None = None) -> None:
        self.track("identify", traits, TrackOptions(user_id=user_id))

    def page(self, name: str = "page_view", properties: Mapping[str, Any] | None = None) -> None:
        self.track(name, properties)

    async def flush(self, options: FlushOptions | None = None, *, use_beacon: bool = False) -> FlushResult:
        """
        Deliver everything currently queued as one batch.

        Skipped when disabled, when another flush is in flight, or when the
        queue is empty. A beacon "success" only means the payload was
        accepted for best-effort sending; the events leave the queue then.
        A failed durable delivery puts the batch back at the queue head.
        """
        use_beacon = use_beacon or bool(options and options.use_beacon)
        started = self._start_flush(use_beacon)
        if isinstance(started, FlushResult):
            return started
        return await self._deliver(started)

    def flush_nowait(self, use_beacon: bool = False) -> None:
        """
        Start a flush without waiting for it.

        The beacon attempt happens before this returns. Durable delivery runs
        as a detached task on the running event loop; with no loop running
        the batch goes back to the queue for a later flush.
        """
        started = self._start_flush(use_beacon)
        if isinstance(started, FlushResult):
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._queue.prepend(started)
            self._in_flight = False
            debug_log(self._config.debug, "no running event loop, batch kept for later", count=len(started))
            return

        task = loop.create_task(self._deliver(started))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _start_flush(self, use_beacon: bool) -> FlushResult | list[TrackerEvent]:
        # Runs without suspending: the in-flight check, drain and flag set
        # cannot interleave with another flush.
        if self._state is not TrackerState.ACTIVE or self._in_flight or not self._queue:
            return FlushResult.SKIPPED

        batch = self._queue.drain()
        self._in_flight = True

        if use_beacon and self._delivery.send_by_beacon(self._config, batch):
            self._in_flight = False
            return FlushResult.SENT_BY_BEACON
        return batch

    async def _deliver(self, batch: list[TrackerEvent]) -> FlushResult:
        config = self._config
        try:
            await self._delivery.send_with_retry(config, batch)
            return FlushResult.SENT
        except asyncio.CancelledError:
            self._queue.prepend(batch)
            raise
        except Exception as e:
            debug_log(config.debug, "flush failed", count=len(batch), error=f"{type(e).__name__}: {e}")
            self._queue.prepend(batch)
            return FlushResult.REQUEUED
        finally:
            self._in_flight = False

    def _on_task_done(self, task: asyncio.Task[FlushResult]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.debug(f"Background flush error (ignored): {type(error).__name__}: {error}")

    async def wait_pending(self) -> None:
        """Wait for every background flush started so far, including ones they start."""
        while self._tasks:
            pending = list(self._tasks)
            await asyncio.gather(*pending, return_exceptions=True)
            self._tasks.difference_update(pending)

    async def aclose(self) -> None:
        """
        Stop scheduling flushes, wait for running ones and release the HTTP clients.

        A platform built by the tracker itself is closed too, which stops its
        beacon worker; an injected platform stays with its owner.

        Queued events stay in memory; a later ``init`` resumes delivery.
        """
        self._scheduler.teardown()
        await self.wait_pending()
        await self._http.aclose()
        if self._owns_platform:
            self._platform.close()
        if self._state is TrackerState.ACTIVE:
            self._state = TrackerState.DISABLED
