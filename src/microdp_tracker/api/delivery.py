"""
Delivery engine: best-effort beacon dispatch and durable retrying POSTs.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Sequence

from ..core.config import TrackerConfig
from ..core.errors import DeliveryError
from ..helpers.logging_config import debug_log
from ..helpers.retry import SleepFunc, retry_with_backoff
from ..host.capabilities import BeaconTransport
from ..models.event import TrackerEvent, batch_payload
from .http_client import HTTPClient

JSON_CONTENT_TYPE = "application/json"


def encode_batch(events: Sequence[TrackerEvent]) -> bytes:
    return json.dumps(batch_payload(list(events)), separators=(",", ":"), default=str).encode("utf-8")


def request_headers(config: TrackerConfig) -> dict[str, str]:
    """Default headers with the configured extra headers merged over them."""
    return {
        "Content-Type": JSON_CONTENT_TYPE,
        "User-Agent": config.user_agent,
        **config.headers,
    }


class DeliveryEngine:
    """
    Ships one batch per call.

    Holds no reference to the tracker's queue; callers pass the batch in
    and decide what to do with it on failure.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        beacon: BeaconTransport | None = None,
        *,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self._http = http_client
        self._beacon = beacon
        self._sleep = sleep

    @property
    def beacon_available(self) -> bool:
        return self._beacon is not None

    def send_by_beacon(self, config: TrackerConfig, events: Sequence[TrackerEvent]) -> bool:
        """
        Try a single fire-and-forget dispatch of the whole batch.

        True means the payload was accepted for best-effort sending, not that
        the collector received it. False (no beacon, refused, or raised)
        tells the caller to fall back to :meth:`send_with_retry`.
        """
        if self._beacon is None:
            return False
        try:
            ok = bool(self._beacon.send_beacon(config.endpoint, encode_batch(events), request_headers(config)))
        except Exception as e:
            debug_log(config.debug, "sendBeacon failed", error=f"{type(e).__name__}: {e}")
            return False
        if ok:
            debug_log(config.debug, "events sent by beacon", count=len(events))
        return ok

    async def send_with_retry(self, config: TrackerConfig, events: Sequence[TrackerEvent]) -> None:
        """
        POST the batch, retrying with exponential backoff.

        Attempt ``k`` failing (``k < retry_max_attempts``) waits
        ``retry_base_delay_ms * 2 ** (k - 1)`` ms before the next one.

        Raises:
            DeliveryError: When the final attempt fails
        """
        body = encode_batch(events)
        headers = request_headers(config)

        async def _attempt() -> None:
            await self._http.post_events(config.endpoint, body, headers, timeout=config.timeout)

        def _on_retry(exc: BaseException, attempt: int, delay: float) -> None:
            debug_log(
                config.debug,
                "retrying flush",
                attempt=attempt,
                wait_ms=round(delay * 1000),
                error=str(exc),
            )

        await retry_with_backoff(
            _attempt,
            config.retry_config,
            retry_on=(DeliveryError,),
            on_retry=_on_retry,
            sleep=self._sleep,
        )
        debug_log(config.debug, "events sent", count=len(events))
