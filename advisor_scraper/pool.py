import asyncio
import logging
from typing import Awaitable, Callable, Hashable, Iterable, List, Optional, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def bounded_gather(
    items: Iterable[T],
    worker: Callable[[T], Awaitable[Optional[R]]],
    limit: int,
) -> List[R]:
    """
    Run `worker` over every item with at most `limit` calls in flight.

    A worker that raises only loses its own item: the error is logged and the
    other results are kept. None results are dropped. Results come back in
    submission order.
    """
    semaphore = asyncio.Semaphore(limit)
    items = list(items)

    async def _run(item: T) -> Optional[R]:
        async with semaphore:
            return await worker(item)

    results = await asyncio.gather(*(_run(item) for item in items), return_exceptions=True)

    collected = []
    for item, result in zip(items, results):
        if isinstance(result, Exception):
            logger.error(f"Failed on {item}: {result!r}", exc_info=result)
            continue
        if isinstance(result, BaseException):
            raise result
        if result is not None:
            collected.append(result)
    return collected


def flatten(batches: Iterable[Iterable[T]]) -> List[T]:
    return [item for batch in batches for item in batch]


def unique(items: Iterable[Hashable]) -> list:
    """Drop repeats, keeping first-seen order."""
    return list(dict.fromkeys(items))
