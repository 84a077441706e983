"""Concurrent fan-out over a collection of preview records.

resolve_all() runs one sub-scrape per item concurrently, waits for all of
them, and merges the successful results. A failing sub-scrape is logged and
its item dropped, so one broken page cannot blank out an otherwise
successful listing.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

from speakerdeck.common.exceptions import ScraperException

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")


async def resolve_all(
    items: Iterable[ItemT],
    resolve: Callable[[ItemT], Awaitable[Iterable[ResultT]]],
    *,
    sort_key: Callable[[ResultT], Any] | None = None,
    describe: Callable[[ItemT], str] = repr,
) -> list[ResultT]:
    """Resolve every item concurrently and collect the results.

    ``resolve`` may itself call resolve_all() for items that stand for a
    collection; the same concurrency and failure rules apply at every level.

    Args:
        items: The preview records to resolve.
        resolve: Coroutine function returning the full records for one item.
        sort_key: If given, the merged results are sorted by it (stable sort)
            once every task has finished.
        describe: Formats an item for the failure log message.

    Returns:
        The merged results of all successful resolutions. Without sort_key
        they are in completion order.
    """
    results: list[ResultT] = []
    lock = asyncio.Lock()

    async def resolve_one(item: ItemT) -> None:
        try:
            resolved = await resolve(item)
        except ScraperException as e:
            logger.error(f"could not resolve {describe(item)}: {e}")
            return

        async with lock:
            results.extend(resolved)

    await asyncio.gather(*(resolve_one(item) for item in items))

    if sort_key is not None:
        return sorted(results, key=sort_key)
    return results
