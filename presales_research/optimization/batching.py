"""Batched execution of independent async calls, and primary/fallback chaining."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def batch_requests(
    requests: list[Callable[[], Awaitable[T]]],
    batch_size: int = 3,
    delay: float = 1.0,
) -> list[T]:
    """Run request factories in batches of ``batch_size``.

    Each batch runs concurrently; failures are logged and dropped. Waits
    ``delay`` seconds between batches, never after the last one.
    """
    results: list[T] = []

    for start in range(0, len(requests), batch_size):
        batch = requests[start:start + batch_size]
        outcomes = await asyncio.gather(
            *(request() for request in batch), return_exceptions=True,
        )
        for offset, outcome in enumerate(outcomes):
            if isinstance(outcome, BaseException):
                logger.error("Batch request %d failed: %s", start + offset, outcome)
                continue
            results.append(outcome)

        if start + batch_size < len(requests):
            await asyncio.sleep(delay)

    return results


async def with_fallback(
    primary: Callable[[], Awaitable[T]],
    fallback: Callable[[], Awaitable[T]],
    condition: Callable[[Exception], bool] = lambda exc: True,
) -> T:
    """Return primary(); on failure, fallback() if condition(error) holds."""
    try:
        return await primary()
    except Exception as e:
        if not condition(e):
            raise
        logger.warning("Primary service failed, using fallback: %s", e)
        return await fallback()
