"""
Builds canonical event records from host input plus ambient identity.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from ..helpers.datetime_utils import _isoformat, _utcnow
from ..helpers.ids import create_id
from ..models.event import TrackerEvent, TrackOptions
from .config import TrackerConfig


class EventBuilder:
    """
    Produces one :class:`TrackerEvent` per call.

    Identity fields resolve as per-call override, then config default. Only
    ``session_id`` falls back further, to a freshly generated id.
    """

    def __init__(
        self,
        *,
        id_factory: Callable[[], str] = create_id,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._id_factory = id_factory
        self._clock = clock

    def build(
        self,
        config: TrackerConfig,
        event_name: str,
        properties: Mapping[str, Any] | None = None,
        options: TrackOptions | None = None,
    ) -> TrackerEvent:
        """
        Raises:
            ValueError: If ``event_name`` is empty
            TypeError: If ``event_name`` is not a string or ``properties`` is not a mapping
        """
        if not isinstance(event_name, str):
            raise TypeError(f"event_name must be a string, got {type(event_name).__name__}")
        if not event_name.strip():
            raise ValueError("event_name must not be empty")
        if properties is None:
            properties = {}
        elif not isinstance(properties, Mapping):
            raise TypeError(f"properties must be a mapping, got {type(properties).__name__}")

        options = options or TrackOptions()
        now = _isoformat(self._clock())

        event_time = options.event_time
        if isinstance(event_time, datetime):
            event_time = _isoformat(event_time)

        return TrackerEvent(
            event_id=self._id_factory(),
            tenant_id=_first(options.tenant_id, config.tenant_id),
            user_id=_first(options.user_id, config.user_id),
            anonymous_id=_first(options.anonymous_id, config.anonymous_id),
            session_id=_first(options.session_id, config.session_id) or self._id_factory(),
            event_name=event_name,
            properties=dict(properties),
            event_time=event_time or now,
            sent_at=now,
        )


def _first(*values: str | None) -> str | None:
    for value in values:
        if value is not None:
            return value
    return None
