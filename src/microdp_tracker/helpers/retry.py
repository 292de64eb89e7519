"""
Retry policy with exponential backoff for durable delivery.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class RetryConfig:
    """
    Retry settings.

    Attributes:
        max_attempts: Total attempts per batch, including the first one
        base_delay_ms: Wait after the first failed attempt; doubles per attempt
    """

    max_attempts: int = 3
    base_delay_ms: int = 300

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay_ms < 0:
            raise ValueError("base_delay_ms must be >= 0")


def calculate_backoff_delay(attempt: int, config: RetryConfig) -> float:
    """
    Return the wait in seconds after failed attempt number ``attempt`` (1-based).

    ``base_delay_ms * 2 ** (attempt - 1)`` milliseconds.
    """
    return config.base_delay_ms * 2 ** (attempt - 1) / 1000


async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    config: RetryConfig,
    *,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    on_retry: Callable[[BaseException, int, float], None] | None = None,
    sleep: SleepFunc = asyncio.sleep,
) -> T:
    """
    Await ``func`` until it succeeds or ``config.max_attempts`` is reached.

    The exception from the final attempt propagates. ``on_retry`` receives the
    error, the number of the attempt about to run and the wait in seconds.
    """
    attempt = 1
    while True:
        try:
            return await func()
        except retry_on as exc:
            if attempt >= config.max_attempts:
                raise
            delay = calculate_backoff_delay(attempt, config)
            if on_retry is not None:
                on_retry(exc, attempt + 1, delay)
            await sleep(delay)
            attempt += 1
