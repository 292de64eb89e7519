"""
In-memory FIFO of pending events, owned by the tracker.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

from ..models.event import TrackerEvent


class EventQueue:
    """
    Ordered buffer of events awaiting delivery.

    Normal drains are FIFO. A batch that failed delivery goes back to the
    front via :meth:`prepend` so it is retried before anything newer.
    """

    def __init__(self) -> None:
        self._events: deque[TrackerEvent] = deque()

    def __len__(self) -> int:
        return len(self._events)

    def __bool__(self) -> bool:
        return bool(self._events)

    def append(self, event: TrackerEvent) -> int:
        """Add ``event`` at the tail and return the new length."""
        self._events.append(event)
        return len(self._events)

    def drain(self) -> list[TrackerEvent]:
        """Remove and return every queued event, oldest first."""
        batch = list(self._events)
        self._events.clear()
        return batch

    def prepend(self, batch: Iterable[TrackerEvent]) -> None:
        """Put ``batch`` back at the head, keeping its internal order."""
        self._events.extendleft(reversed(list(batch)))

    def snapshot(self) -> list[TrackerEvent]:
        return list(self._events)
