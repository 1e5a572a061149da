"""
Async utilities for vaultsync.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def gather_bounded(
    func: Callable[[T], Awaitable[R]],
    items: Iterable[T],
    *,
    max_concurrency: int,
) -> list[R | BaseException]:
    """
    Run ``func`` over ``items`` with at most ``max_concurrency`` calls in flight.

    Waits for every call and returns results in input order. Exceptions are
    returned in place of results rather than raised, so one failure never
    cancels the others.

    Example:
        results = await gather_bounded(client.delete_file, keys, max_concurrency=8)
    """
    if max_concurrency < 1:
        raise ValueError("max_concurrency must be >= 1")

    semaphore = asyncio.Semaphore(max_concurrency)

    async def _run(item: T) -> R:
        async with semaphore:
            return await func(item)

    return await asyncio.gather(*(_run(item) for item in items), return_exceptions=True)


def chunked(items: list[T], size: int) -> list[list[T]]:
    """Split ``items`` into consecutive chunks of at most ``size`` elements."""
    if size < 1:
        raise ValueError("size must be >= 1")
    return [items[i : i + size] for i in range(0, len(items), size)]
