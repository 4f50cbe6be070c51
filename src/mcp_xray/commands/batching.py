"""Bucketing and bounded fan-out for bulk remote work.

Results of a fan-out come back in completion order. Anything that depends
on position (step indexes, for one) must carry its own index.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TypeVar

logger = logging.getLogger("mcp-xray.commands.batching")

T = TypeVar("T")
R = TypeVar("R")

FIND_BY_KEY_BUCKET_SIZE = 10
ADD_TO_EXECUTION_BUCKET_SIZE = 49


def split(items: Iterable[T], size: int) -> list[list[T]]:
    """Partition items into consecutive buckets of at most ``size`` elements.

    Raises:
        ValueError: If size is lower than 1.
    """
    if size < 1:
        raise ValueError(f"Bucket size must be at least 1, got {size}")
    sequence = list(items or [])
    return [sequence[i : i + size] for i in range(0, len(sequence), size)]


def key_query(ids_or_keys: Sequence[str]) -> str:
    """Build the JQL filter selecting one bucket of issues."""
    return f"key in ({','.join(ids_or_keys)})"


def for_each_parallel(
    items: Iterable[T], func: Callable[[T], R], max_workers: int
) -> list[R]:
    """Apply ``func`` to every item on a bounded thread pool.

    Every item is processed even when some fail; the first failure is then
    re-raised.

    Args:
        items: Work items.
        func: Blocking callable applied to each item.
        max_workers: Maximum degree of parallelism; values below 1 mean 1.

    Returns:
        Results in completion order.
    """
    work = list(items)
    if not work:
        return []

    workers = min(max(max_workers, 1), len(work))
    results: list[R] = []
    errors: list[BaseException] = []

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="mcp-xray") as executor:
        futures = [executor.submit(func, item) for item in work]
        for future in as_completed(futures):
            try:
                results.append(future.result())
            except Exception as e:  # noqa: BLE001 - collected and re-raised below
                errors.append(e)

    if errors:
        if len(errors) > 1:
            logger.warning(f"{len(errors)} of {len(work)} parallel calls failed")
        raise errors[0]
    return results


def flat_map_parallel(
    items: Iterable[T], func: Callable[[T], Iterable[R]], max_workers: int
) -> list[R]:
    """Like ``for_each_parallel`` but merges the iterables each call returns."""
    merged: list[R] = []
    for chunk in for_each_parallel(items, lambda item: list(func(item)), max_workers):
        merged.extend(chunk)
    return merged
