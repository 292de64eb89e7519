"""
Event record and per-call option models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


@dataclass(frozen=True, slots=True)
class TrackerEvent:
    """
    One tracked event, immutable once built.

    Field names match the collector's wire format.
    """

    event_id: str
    session_id: str
    event_name: str
    event_time: str
    sent_at: str
    properties: dict[str, Any] = field(default_factory=dict)
    tenant_id: str | None = None
    user_id: str | None = None
    anonymous_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the wire; absent identity fields are omitted."""
        payload: dict[str, Any] = {"event_id": self.event_id}
        if self.tenant_id is not None:
            payload["tenant_id"] = self.tenant_id
        if self.user_id is not None:
            payload["user_id"] = self.user_id
        if self.anonymous_id is not None:
            payload["anonymous_id"] = self.anonymous_id
        payload["session_id"] = self.session_id
        payload["event_name"] = self.event_name
        payload["properties"] = dict(self.properties)
        payload["event_time"] = self.event_time
        payload["sent_at"] = self.sent_at
        return payload


@dataclass(frozen=True, slots=True)
class TrackOptions:
    """Per-call overrides for a single ``track`` call."""

    tenant_id: str | None = None
    user_id: str | None = None
    anonymous_id: str | None = None
    session_id: str | None = None
    event_time: str | datetime | None = None


@dataclass(frozen=True, slots=True)
class FlushOptions:
    use_beacon: bool = False


class FlushResult(Enum):
    """Outcome of a single ``flush`` call."""

    SKIPPED = "skipped"
    SENT_BY_BEACON = "sent_by_beacon"
    SENT = "sent"
    REQUEUED = "requeued"


def batch_payload(events: list[TrackerEvent]) -> dict[str, Any]:
    """Build the ``{"events": [...]}`` request body."""
    return {"events": [event.to_dict() for event in events]}
