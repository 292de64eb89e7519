"""
Logging helpers for the tracker SDK.

The SDK never configures the root logger. A ``NullHandler`` keeps it silent
until the host application opts in via :func:`configure_logging`.
"""

from __future__ import annotations

import logging

LOGGER_NAME = "microdp_tracker"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_logger = logging.getLogger(LOGGER_NAME)
_logger.addHandler(logging.NullHandler())


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the SDK logger, or a child of it when ``name`` is given."""
    if name:
        return _logger.getChild(name)
    return _logger


def configure_logging(level: int | str = logging.INFO, *, fmt: str = LOG_FORMAT) -> logging.Logger:
    """
    Attach a console handler to the SDK logger.

    Calling this more than once replaces the previously attached handler
    instead of stacking duplicates.
    """
    for handler in list(_logger.handlers):
        if getattr(handler, "_microdp_tracker_handler", False):
            _logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt))
    handler._microdp_tracker_handler = True  # type: ignore[attr-defined]
    _logger.addHandler(handler)
    _logger.setLevel(level)
    return _logger


def debug_log(enabled: bool, message: str, **extra: object) -> None:
    """
    Emit a tracker diagnostic when the tracker runs with ``debug=True``.

    Structured fields go through ``extra`` so handlers can pick them up.
    """
    if not enabled:
        return
    if extra:
        details = " ".join(f"{key}={value}" for key, value in extra.items())
        _logger.info(f"[sdk-tracker] {message} {details}", extra=extra)
    else:
        _logger.info(f"[sdk-tracker] {message}")
