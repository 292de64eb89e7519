"""
Triggers flushes from the periodic timer and host lifecycle signals.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from ..helpers.logging_config import debug_log
from ..host.capabilities import Platform
from ..host.lifecycle import HIDDEN, LifecycleSignal
from .config import TrackerConfig

FlushTrigger = Callable[[bool], None]

_UNLOAD_SIGNALS = (LifecycleSignal.PAGEHIDE, LifecycleSignal.BEFOREUNLOAD)


class Scheduler:
    """
    Owns the periodic timer and lifecycle listeners of one tracker.

    ``trigger(use_beacon)`` must start a flush without blocking; the
    scheduler never awaits or retries a flush itself.
    """

    def __init__(self, platform: Platform, trigger: FlushTrigger) -> None:
        self._platform = platform
        self._trigger = trigger
        self._timer: Any | None = None
        self._listening = False
        self._debug = False

    @property
    def timer_installed(self) -> bool:
        return self._timer is not None

    @property
    def listening(self) -> bool:
        return self._listening

    def install(self, config: TrackerConfig) -> None:
        """Install the timer and lifecycle listeners, replacing any earlier ones."""
        self.teardown()
        self._debug = config.debug

        if config.flush_interval_ms > 0:
            try:
                self._timer = self._platform.timers.set_interval(self._on_interval, config.flush_interval_ms)
            except RuntimeError as e:
                debug_log(config.debug, "periodic flush not scheduled", reason=str(e))
        else:
            debug_log(config.debug, "periodic flush disabled by flush_interval_ms=0")

        lifecycle = self._platform.lifecycle
        lifecycle.add_listener(LifecycleSignal.VISIBILITY_CHANGE, self._on_visibility_change)
        for signal in _UNLOAD_SIGNALS:
            lifecycle.add_listener(signal, self._on_unload)
        self._listening = True

    def teardown(self) -> None:
        if self._timer is not None:
            self._platform.timers.clear_interval(self._timer)
            self._timer = None

        if self._listening:
            lifecycle = self._platform.lifecycle
            lifecycle.remove_listener(LifecycleSignal.VISIBILITY_CHANGE, self._on_visibility_change)
            for signal in _UNLOAD_SIGNALS:
                lifecycle.remove_listener(signal, self._on_unload)
            self._listening = False

    def _on_interval(self) -> None:
        self._trigger(False)

    def _on_visibility_change(self) -> None:
        if self._platform.lifecycle.visibility_state == HIDDEN:
            self._trigger(True)

    def _on_unload(self) -> None:
        debug_log(self._debug, "unload signal received")
        self._trigger(True)
