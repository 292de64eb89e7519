"""
Public entrypoint for the micro-dp event tracker SDK.
"""

from __future__ import annotations

from .core import DeliveryError, Tracker, TrackerConfig, TrackerError, TrackerState, __version__
from .helpers.background_sender import BackgroundSender
from .helpers.ids import create_id
from .helpers.logging_config import configure_logging, get_logger
from .helpers.retry import RetryConfig, calculate_backoff_delay, retry_with_backoff
from .host import BeaconTransport, LifecycleSignal, LifecycleSignals, LoopTimers, Platform
from .models import FlushOptions, FlushResult, TrackerEvent, TrackOptions

__all__ = [
    "create_tracker",
    "Tracker",
    "TrackerConfig",
    "TrackerState",
    "TrackerEvent",
    "TrackOptions",
    "FlushOptions",
    "FlushResult",
    "Platform",
    "BeaconTransport",
    "BackgroundSender",
    "LifecycleSignal",
    "LifecycleSignals",
    "LoopTimers",
    "TrackerError",
    "DeliveryError",
    "RetryConfig",
    "calculate_backoff_delay",
    "retry_with_backoff",
    "create_id",
    "configure_logging",
    "get_logger",
    "__version__",
]


def create_tracker(
    config: TrackerConfig | None = None,
    *,
    platform: Platform | None = None,
    **overrides: object,
) -> Tracker:
    """
    Build and initialize a tracker in one call.

    Without ``config`` the settings come from ``MICRODP_TRACKER_*``
    environment variables. The caller owns the returned instance.
    """
    tracker = Tracker(platform=platform)
    tracker.init(config or TrackerConfig.from_env(), **overrides)
    return tracker

