"""Bounded concurrency helpers for batch processing.

The ingestion pipeline embeds chunk batches against a remote API.  Firing
every batch at once would spike load on the embedding provider and the
vector store, so work is dispatched in fixed-size *waves*:

1. take the next ``wave_size`` items,
2. run the worker on each of them concurrently,
3. join, hand the wave's results to the caller, then start the next wave.

Results are collected per task and returned in input order, so callers never
share mutable counters between tasks.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from typing import TypeVar

_T = TypeVar("_T")
_R = TypeVar("_R")


async def gather_in_waves(
    items: Sequence[_T],
    worker: Callable[[_T], Awaitable[_R]],
    wave_size: int,
) -> AsyncIterator[list[_R]]:
    """Run *worker* over *items*, at most *wave_size* at a time.

    Parameters
    ----------
    items:
        Work items, processed in order.
    worker:
        Async callable applied to every item.
    wave_size:
        Number of items processed concurrently per wave (minimum 1).

    Yields
    ------
    list[_R]
        The results of one wave, in the same order as its items.  The next
        wave does not start until the consumer asks for it, so the caller
        can serialize follow-up work (e.g. writes) between waves.

    Exceptions raised by the worker propagate out of the iteration.
    """
    step = max(1, wave_size)
    for start in range(0, len(items), step):
        wave = items[start : start + step]
        results = await asyncio.gather(*(worker(item) for item in wave))
        yield list(results)
