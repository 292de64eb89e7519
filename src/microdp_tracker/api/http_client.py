"""
Durable HTTP transport for event batches.

Each call performs a single POST; retries belong to the delivery engine.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping

import httpx

from ..core.errors import DeliveryError
from ..helpers.logging_config import get_logger

logger = get_logger()


class HTTPClient:
    """
    Thin wrapper over :class:`httpx.AsyncClient`.

    The underlying client is bound to the event loop it was created on. A
    request from a different loop (for example a second ``asyncio.run``)
    gets a fresh client.
    """

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_loop: asyncio.AbstractEventLoop | None = None

    def _get_client(self) -> httpx.AsyncClient:
        loop = asyncio.get_running_loop()
        if self._client is not None and self._client_loop is not loop:
            # Connections of the old client belong to a loop that may be closed
            logger.debug("Event loop changed, replacing HTTP client")
            self._client = None
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
            self._client_loop = loop
        return self._client

    async def post_events(
        self,
        url: str,
        body: bytes,
        headers: Mapping[str, str],
        *,
        timeout: float | None = None,
    ) -> httpx.Response:
        """
        POST ``body`` to ``url``.

        Raises:
            DeliveryError: On a network failure, timeout or non-2xx status
        """
        kwargs: dict[str, object] = {"content": body, "headers": dict(headers)}
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            response = await self._get_client().post(url, **kwargs)  # type: ignore[arg-type]
        except Exception as e:
            raise DeliveryError(f"Request to {url} failed: {type(e).__name__}: {e}") from e

        if not response.is_success:
            raise DeliveryError(f"HTTP {response.status_code}", status_code=response.status_code)
        return response

    async def aclose(self) -> None:
        client, self._client = self._client, None
        self._client_loop = None
        if client is None:
            return
        try:
            await client.aclose()
        except Exception as e:
            logger.debug(f"Closing HTTP client failed (ignored): {type(e).__name__}: {e}")
