from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field

import httpx
import pytest

from microdp_tracker import LifecycleSignals, Platform, Tracker

ENDPOINT = "https://collector.test/events"


class FakeTimers:
    """Timer facility driven by ``advance(ms)`` instead of the clock."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._next_handle = 0
        self.intervals: dict[int, list] = {}

    def set_interval(self, callback: Callable[[], None], interval_ms: int) -> int:
        self._next_handle += 1
        self.intervals[self._next_handle] = [callback, interval_ms, self.now_ms + interval_ms]
        return self._next_handle

    def clear_interval(self, handle: int) -> None:
        self.intervals.pop(handle, None)

    def advance(self, ms: int) -> None:
        target = self.now_ms + ms
        while True:
            due = [(entry[2], handle) for handle, entry in self.intervals.items() if entry[2] <= target]
            if not due:
                break
            when, handle = min(due)
            callback, interval_ms, _ = self.intervals[handle]
            self.now_ms = when
            self.intervals[handle][2] = when + interval_ms
            callback()
        self.now_ms = target


@dataclass
class FakeBeacon:
    accept: bool = True
    error: Exception | None = None
    sent: list[dict] = field(default_factory=list)
    headers: list[dict] = field(default_factory=list)

    def send_beacon(self, url, body, headers=None) -> bool:
        if self.error is not None:
            raise self.error
        if self.accept:
            self.sent.append(json.loads(body))
            self.headers.append(dict(headers or {}))
        return self.accept


class Collector:
    """``httpx.MockTransport`` handler recording each batch it receives."""

    def __init__(self) -> None:
        self.statuses: list[int | Exception] = []
        self.requests: list[httpx.Request] = []
        self.on_request: Callable[[httpx.Request], None] | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.on_request is not None:
            self.on_request(request)
        outcome = self.statuses.pop(0) if self.statuses else 200
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(outcome, json={"accepted": outcome < 300})

    @property
    def batches(self) -> list[list[dict]]:
        return [json.loads(request.content)["events"] for request in self.requests]

    def event_names(self, index: int) -> list[str]:
        return [event["event_name"] for event in self.batches[index]]


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def collector() -> Collector:
    return Collector()


@pytest.fixture
def timers() -> FakeTimers:
    return FakeTimers()


@pytest.fixture
def beacon() -> FakeBeacon:
    return FakeBeacon()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_tracker(collector, timers, sleep):
    def _make(beacon=None) -> Tracker:
        platform = Platform(beacon=beacon, timers=timers, lifecycle=LifecycleSignals())
        return Tracker(platform=platform, transport=httpx.MockTransport(collector), sleep=sleep)

    return _make
