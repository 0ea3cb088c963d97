"""Concurrency-limited execution of async operations in sequential batches."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Iterator, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class BatchOutcome(Generic[R]):
    """Result for one item: value on success, error on failure."""

    index: int
    success: bool
    value: R | None = None
    error: BaseException | None = None


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive slices of at most size items."""
    if size < 1:
        raise ValueError("Chunk size must be at least 1")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


async def run_in_batches(
    items: Sequence[T],
    batch_size: int,
    operation: Callable[[T], Awaitable[R]],
) -> list[BatchOutcome[R]]:
    """Run operation over items, batch_size at a time.

    Batches run one after another; items within a batch run concurrently.
    An exception in one item is captured in its outcome and never affects
    siblings or later batches. Each item is invoked exactly once.

    Returns:
        One BatchOutcome per item, in input order.
    """
    outcomes: list[BatchOutcome[R]] = []
    offset = 0

    for batch in chunked(items, batch_size):
        results: list[Any] = await asyncio.gather(
            *(operation(item) for item in batch),
            return_exceptions=True,
        )
        for i, result in enumerate(results):
            index = offset + i
            if isinstance(result, Exception):
                logger.debug("Batch item %d failed: %s", index, result)
                outcomes.append(BatchOutcome(index=index, success=False, error=result))
            elif isinstance(result, BaseException):
                # CancelledError and friends are not item failures
                raise result
            else:
                outcomes.append(BatchOutcome(index=index, success=True, value=result))
        offset += len(batch)

    return outcomes
