"""
Bounded-concurrency runner.

A fixed number of asyncio workers pull indices from one shared cursor until
the list is drained. Each worker writes only the slot it claimed, so the
result list always lines up with the input list whatever order the
requests finish in.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, List, Optional, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

ProgressFn = Callable[[int, int], None]


@dataclass
class RunnerFailure(Generic[T]):
    """Stored in place of a result when the worker raised for that item."""
    error: Exception
    item: T


async def run_with_concurrency(
    items: List[T],
    concurrency: int,
    worker: Callable[[T], Awaitable[R]],
    on_progress: Optional[ProgressFn] = None,
) -> List[Union[R, RunnerFailure[T]]]:
    """
    Run `worker` over `items` with at most `concurrency` calls in flight.

    Returns one entry per item, position-matched to `items`: the worker's
    return value, or a RunnerFailure when it raised. A failing item never
    stops the other workers. `on_progress(completed, total)` fires after
    every item.
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1, got {concurrency}")

    total = len(items)
    if total == 0:
        return []

    results: List[Union[R, RunnerFailure[T], None]] = [None] * total
    cursor = 0
    completed = 0

    async def drain() -> None:
        nonlocal cursor, completed
        while cursor < total:
            # claim and advance with no await in between
            index = cursor
            cursor += 1
            item = items[index]

            try:
                results[index] = await worker(item)
            except Exception as e:
                logger.debug("Item %d failed: %r", index, e)
                results[index] = RunnerFailure(error=e, item=item)

            completed += 1
            if on_progress is not None:
                on_progress(completed, total)

    worker_count = min(concurrency, total)
    await asyncio.gather(*(drain() for _ in range(worker_count)))
    return results  # type: ignore[return-value]
