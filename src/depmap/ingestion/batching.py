"""Bounded-concurrency gather that tolerates partial failure."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Hashable, Iterable, TypeVar

import structlog

log = structlog.get_logger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

DEFAULT_BATCH_SIZE = 5


async def gather_in_batches(
    keys: Iterable[K],
    fetch: Callable[[K], Awaitable[V | None]],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> dict[K, V]:
    """Run fetch(key) for every key, batch_size at a time.

    Within a batch requests run concurrently and the batch completes when all
    have settled. A key whose fetch raises or returns an empty result is left
    out of the returned map; it never aborts the batch.
    """
    unique = list(dict.fromkeys(keys))
    size = max(1, batch_size)
    results: dict[K, V] = {}
    for start in range(0, len(unique), size):
        batch = unique[start : start + size]
        settled = await asyncio.gather(*(fetch(k) for k in batch), return_exceptions=True)
        for key, outcome in zip(batch, settled):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                log.warning("batch_fetch_failed", key=str(key), error=str(outcome))
                continue
            if outcome is None or (hasattr(outcome, "__len__") and len(outcome) == 0):
                log.debug("batch_fetch_empty", key=str(key))
                continue
            results[key] = outcome
    return results
