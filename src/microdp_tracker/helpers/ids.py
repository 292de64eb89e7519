"""
Identifier generation for events and sessions.
"""

from __future__ import annotations

import random
import time
import uuid
from collections.abc import Callable

from .logging_config import get_logger

logger = get_logger()

_fallback_random = random.Random()


def _fallback_id() -> str:
    # 64 random bits plus a millisecond timestamp keeps collisions out of
    # reach for backend deduplication even without a secure source.
    return f"evt_{int(time.time() * 1000)}_{_fallback_random.getrandbits(64):016x}"


def create_id(random_uuid: Callable[[], uuid.UUID] = uuid.uuid4) -> str:
    """
    Return a new globally unique identifier.

    Prefers a random (version 4) UUID backed by ``os.urandom``. When the
    platform has no secure random source, falls back to
    ``evt_<epoch-ms>_<16 hex digits>``.
    """
    try:
        return str(random_uuid())
    except NotImplementedError:
        logger.debug("No secure random source available, using fallback id scheme")
        return _fallback_id()
