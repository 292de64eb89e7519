"""
Exception types raised inside the tracker.

None of these escape ``track``/``identify``/``page``; ``flush`` reports them
through its result instead.
"""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for tracker errors."""


class DeliveryError(TrackerError):
    """A durable delivery attempt failed (network error or non-2xx status)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
