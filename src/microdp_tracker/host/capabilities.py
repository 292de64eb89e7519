"""
Capabilities the host platform provides to the tracker.

Resolved once when the host builds its :class:`Platform`, then injected into
the tracker. Nothing inside the tracker inspects the environment at runtime.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import httpx

from ..helpers.background_sender import BackgroundSender
from .lifecycle import LifecycleSignals
from .timers import LoopTimers, TimerFacility


@runtime_checkable
class BeaconTransport(Protocol):
    """Fire-and-forget POST primitive."""

    def send_beacon(self, url: str, body: bytes, headers: Mapping[str, str] | None = None) -> bool:
        """Return True iff the payload was accepted for sending. Must not block."""
        ...


@dataclass
class Platform:
    """
    Host capabilities.

    Attributes:
        beacon: Beacon transport, or None where the host has no such primitive
        timers: Timer facility for the periodic flush
        lifecycle: Lifecycle signal registry
    """

    beacon: BeaconTransport | None = None
    timers: TimerFacility = field(default_factory=LoopTimers)
    lifecycle: LifecycleSignals = field(default_factory=LifecycleSignals)

    @property
    def beacon_available(self) -> bool:
        return self.beacon is not None

    @classmethod
    def default(cls, *, transport: httpx.BaseTransport | None = None, timeout: float = 10.0) -> Platform:
        """
        Process defaults: a background-thread beacon, loop timers and a
        lifecycle registry that reports interpreter exit as ``PAGEHIDE``.
        """
        # The sender registers its atexit drain first so it runs after the
        # PAGEHIDE emit below (atexit is LIFO).
        beacon = BackgroundSender(transport=transport, timeout=timeout)
        lifecycle = LifecycleSignals()
        lifecycle.install_atexit()
        return cls(beacon=beacon, timers=LoopTimers(), lifecycle=lifecycle)

    @classmethod
    def headless(cls) -> Platform:
        """No beacon primitive; every flush uses the durable transport."""
        return cls(beacon=None)

    def close(self) -> None:
        if isinstance(self.beacon, BackgroundSender):
            self.beacon.shutdown()
