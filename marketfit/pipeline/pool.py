"""Bounded worker pool over a shared work queue.

``min(concurrency, len(items))`` workers drain one queue. A failing item is
logged and skipped; it never stops its worker or the batch. Results come back
in input order regardless of completion order.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_CONCURRENCY = 6
MIN_CONCURRENCY = 2


class PoolReport:
    """Counts from one pool run."""

    def __init__(self, submitted: int, succeeded: int, failed: int, workers: int) -> None:
        self.submitted = submitted
        self.succeeded = succeeded
        self.failed = failed
        self.workers = workers


async def run_bounded(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R | None]],
    concurrency: int = DEFAULT_CONCURRENCY,
) -> tuple[list[R], PoolReport]:
    """Run ``worker`` over ``items`` with at most ``concurrency`` in flight.

    A worker returning None counts as success with nothing to collect.
    Cancellation of the caller cancels every worker and propagates.
    """
    queue: asyncio.Queue[tuple[int, T]] = asyncio.Queue()
    for seq, item in enumerate(items):
        queue.put_nowait((seq, item))

    results: dict[int, R] = {}
    failures = 0
    n_workers = min(max(concurrency, 1), len(items))

    async def drain(worker_no: int) -> None:
        nonlocal failures
        while True:
            try:
                seq, item = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                value = await worker(item)
            except Exception:
                failures += 1
                logger.debug("Worker %d: item %r failed, skipping", worker_no, item, exc_info=True)
                continue
            if value is not None:
                results[seq] = value

    if n_workers:
        await asyncio.gather(*(drain(n) for n in range(n_workers)))

    ordered = [results[seq] for seq in sorted(results)]
    report = PoolReport(
        submitted=len(items),
        succeeded=len(items) - failures,
        failed=failures,
        workers=n_workers,
    )
    if failures:
        logger.info("Pool finished: %d/%d items failed", failures, len(items))
    return ordered, report
