"""
Configuration for the event tracker.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..helpers.retry import RetryConfig
from .version import __version__

DEFAULT_FLUSH_INTERVAL_MS = 5000
DEFAULT_MAX_QUEUE_SIZE = 20
DEFAULT_RETRY_MAX_ATTEMPTS = 3
DEFAULT_RETRY_BASE_DELAY_MS = 300

ENV_PREFIX = "MICRODP_TRACKER_"


@dataclass(frozen=True, slots=True)
class TrackerConfig:
    """
    Configuration for a :class:`~microdp_tracker.core.tracker.Tracker`.

    Attributes:
        endpoint: Collector URL; empty keeps the tracker disabled
        enabled: Master on/off switch
        debug: Emit diagnostic log records
        flush_interval_ms: Period of the background flush timer
        max_queue_size: Queue length that triggers an immediate flush
        retry_max_attempts: Durable delivery attempts per batch
        retry_base_delay_ms: Base of the exponential backoff
        headers: Extra headers merged into delivery requests
        tenant_id: Default tenant applied to every event
        user_id: Default user applied to every event
        anonymous_id: Default anonymous id applied to every event
        session_id: Default session; a fresh id is generated per event otherwise
        timeout: Per-attempt network timeout in seconds
        user_agent: User agent string for delivery requests
    """

    endpoint: str = ""
    enabled: bool = True
    debug: bool = False
    flush_interval_ms: int = DEFAULT_FLUSH_INTERVAL_MS
    max_queue_size: int = DEFAULT_MAX_QUEUE_SIZE
    retry_max_attempts: int = DEFAULT_RETRY_MAX_ATTEMPTS
    retry_base_delay_ms: int = DEFAULT_RETRY_BASE_DELAY_MS
    headers: Mapping[str, str] = field(default_factory=dict)
    tenant_id: str | None = None
    user_id: str | None = None
    anonymous_id: str | None = None
    session_id: str | None = None
    timeout: float = 10.0
    user_agent: str = f"micro-dp-tracker/{__version__}"

    def __post_init__(self) -> None:
        if self.flush_interval_ms < 0:
            raise ValueError("flush_interval_ms must be >= 0")
        if self.max_queue_size < 1:
            raise ValueError("max_queue_size must be >= 1")
        if self.retry_max_attempts < 1:
            raise ValueError("retry_max_attempts must be >= 1")
        if self.retry_base_delay_ms < 0:
            raise ValueError("retry_base_delay_ms must be >= 0")
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")
        object.__setattr__(self, "headers", dict(self.headers))

    @property
    def retry_config(self) -> RetryConfig:
        return RetryConfig(
            max_attempts=self.retry_max_attempts,
            base_delay_ms=self.retry_base_delay_ms,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> TrackerConfig:
        """
        Build a config from ``MICRODP_TRACKER_*`` environment variables.

        ``ENABLED`` is on unless it equals ``"false"``; ``DEBUG`` is on only
        when it equals ``"true"``. Keyword ``overrides`` win over the environment.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        endpoint = env.get(f"{ENV_PREFIX}ENDPOINT")
        if endpoint is not None:
            values["endpoint"] = endpoint.strip()
        enabled = env.get(f"{ENV_PREFIX}ENABLED")
        if enabled is not None:
            values["enabled"] = enabled.strip().lower() != "false"
        debug = env.get(f"{ENV_PREFIX}DEBUG")
        if debug is not None:
            values["debug"] = debug.strip().lower() == "true"

        for name in (
            "flush_interval_ms",
            "max_queue_size",
            "retry_max_attempts",
            "retry_base_delay_ms",
        ):
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is None or not raw.strip():
                continue
            try:
                values[name] = int(raw)
            except ValueError as e:
                raise ValueError(f"{ENV_PREFIX}{name.upper()} must be an integer, got {raw!r}") from e

        values.update(overrides)
        return cls(**values)
