"""
Background fire-and-forget sender used as the beacon primitive.

Payloads are handed to a daemon worker thread and POSTed exactly once.
Handing off never blocks the caller, and acceptance only means the payload
was queued for sending: there is no retry and no delivery confirmation.
"""

from __future__ import annotations

import atexit
import queue
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx

from .logging_config import get_logger

logger = get_logger()


@dataclass
class BeaconRequest:
    """A payload waiting for the worker thread."""

    url: str
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)


class BackgroundSender:
    """
    Thread-safe best-effort sender.

    All errors on the worker thread are caught and logged, never propagated.
    At interpreter exit, requests accepted before shutdown are still sent
    within ``flush_timeout`` seconds.
    """

    def __init__(
        self,
        httpx_client: httpx.Client | None = None,
        *,
        max_queue_size: int = 1000,
        flush_timeout: float = 5.0,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx_client or httpx.Client(timeout=timeout, transport=transport)
        self._queue: queue.Queue[BeaconRequest | None] = queue.Queue(maxsize=max_queue_size)
        self._shutdown = threading.Event()
        self._flush_timeout = flush_timeout
        self._worker_thread: threading.Thread | None = None
        self._started = False
        self._lock = threading.Lock()

        self._start_worker()

        atexit.register(self._cleanup)

    def _start_worker(self) -> None:
        with self._lock:
            if self._started:
                return
            self._worker_thread = threading.Thread(
                target=self._worker_loop,
                name="microdp-tracker-beacon",
                daemon=True,
            )
            self._worker_thread.start()
            self._started = True

    def _worker_loop(self) -> None:
        while True:
            request = self._queue.get()
            try:
                if request is None:
                    break
                self._process_request(request)
            except Exception as e:
                # Never let the worker thread die from an exception
                logger.debug(f"Beacon worker error (ignored): {type(e).__name__}: {e}")
            finally:
                self._queue.task_done()

    def _process_request(self, request: BeaconRequest) -> None:
        try:
            response = self._client.post(request.url, content=request.body, headers=request.headers)
            response.raise_for_status()
            logger.debug(f"Beacon delivered to {request.url} (status {response.status_code})")
        except httpx.HTTPError as e:
            logger.debug(f"Beacon to {request.url} failed (dropped): {type(e).__name__}: {e}")

    def send_beacon(self, url: str, body: bytes, headers: Mapping[str, str] | None = None) -> bool:
        """
        Hand ``body`` off for a single POST to ``url``.

        Returns True if the payload was accepted for sending, False if the
        sender is shut down or its queue is full. Never raises.
        """
        request = BeaconRequest(url=url, body=body, headers=dict(headers or {}))
        with self._lock:
            if self._shutdown.is_set():
                return False
            try:
                self._queue.put_nowait(request)
                return True
            except queue.Full:
                logger.debug(f"Beacon queue full, refusing payload for {url}")
                return False

    def join(self) -> None:
        """Block until every accepted payload has been attempted."""
        self._queue.join()

    def _cleanup(self) -> None:
        # Once shutdown is set under the lock no payload can be accepted,
        # so the sentinel lands after everything already queued.
        with self._lock:
            if self._shutdown.is_set():
                return
            self._shutdown.set()
        try:
            self._queue.put(None, timeout=self._flush_timeout)
        except queue.Full:
            logger.debug("Beacon queue still full at shutdown, pending payloads may be lost")
        if self._worker_thread and self._worker_thread.is_alive():
            self._worker_thread.join(timeout=self._flush_timeout)
        try:
            self._client.close()
        except Exception as e:
            logger.debug(f"Closing beacon client failed (ignored): {type(e).__name__}: {e}")

    def shutdown(self) -> None:
        """Send what was accepted, then stop the worker thread."""
        self._cleanup()
        atexit.unregister(self._cleanup)

    def __repr__(self) -> str:
        return f"BackgroundSender(pending={self._queue.qsize()}, shutdown={self._shutdown.is_set()})"
