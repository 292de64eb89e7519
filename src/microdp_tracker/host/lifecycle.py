"""
Host lifecycle signals.

Stands in for the page-lifecycle events a browser offers. Host applications
report visibility changes and imminent shutdown here; the tracker's scheduler
listens for them.
"""

from __future__ import annotations

import atexit
import threading
from collections.abc import Callable
from enum import Enum

from ..helpers.logging_config import get_logger

logger = get_logger()

Listener = Callable[[], None]

HIDDEN = "hidden"
VISIBLE = "visible"


class LifecycleSignal(Enum):
    VISIBILITY_CHANGE = "visibilitychange"
    PAGEHIDE = "pagehide"
    BEFOREUNLOAD = "beforeunload"


class LifecycleSignals:
    """
    Listener registry for lifecycle signals.

    Registering the same listener twice for a signal is a no-op. Listener
    errors are logged and never reach the code that emitted the signal.
    """

    def __init__(self) -> None:
        self._listeners: dict[LifecycleSignal, list[Listener]] = {signal: [] for signal in LifecycleSignal}
        self._visibility_state = VISIBLE
        self._lock = threading.Lock()
        self._atexit_installed = False

    @property
    def visibility_state(self) -> str:
        return self._visibility_state

    def add_listener(self, signal: LifecycleSignal, listener: Listener) -> None:
        with self._lock:
            listeners = self._listeners[signal]
            if listener not in listeners:
                listeners.append(listener)

    def remove_listener(self, signal: LifecycleSignal, listener: Listener) -> None:
        with self._lock:
            listeners = self._listeners[signal]
            if listener in listeners:
                listeners.remove(listener)

    def listener_count(self, signal: LifecycleSignal) -> int:
        return len(self._listeners[signal])

    def emit(self, signal: LifecycleSignal) -> None:
        with self._lock:
            listeners = list(self._listeners[signal])
        for listener in listeners:
            try:
                listener()
            except Exception as e:
                logger.debug(f"Lifecycle listener for {signal.value} failed (ignored): {type(e).__name__}: {e}")

    def set_visibility(self, state: str) -> None:
        """Record a visibility transition (``"hidden"`` or ``"visible"``) and notify listeners."""
        if state == self._visibility_state:
            return
        self._visibility_state = state
        self.emit(LifecycleSignal.VISIBILITY_CHANGE)

    def install_atexit(self) -> None:
        """Emit ``PAGEHIDE`` when the interpreter exits."""
        if self._atexit_installed:
            return
        atexit.register(self.emit, LifecycleSignal.PAGEHIDE)
        self._atexit_installed = True
