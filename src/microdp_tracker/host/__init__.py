from .capabilities import BeaconTransport, Platform
from .lifecycle import HIDDEN, VISIBLE, LifecycleSignal, LifecycleSignals
from .timers import IntervalHandle, LoopTimers, TimerFacility

__all__ = [
    "BeaconTransport",
    "Platform",
    "HIDDEN",
    "VISIBLE",
    "LifecycleSignal",
    "LifecycleSignals",
    "IntervalHandle",
    "LoopTimers",
    "TimerFacility",
]
