"""Fail-fast fan-out for independent filesystem-bound tasks."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextvars import copy_context
from typing import TypeVar

T = TypeVar("T")


def run_indexed_tasks_fail_fast(
    tasks: list[Callable[[], T]],
    *,
    max_workers: int,
) -> list[T]:
    """Run tasks concurrently and return results in task order.

    The first failure cancels pending tasks and is re-raised.
    """
    if not tasks:
        return []
    if max_workers <= 1 or len(tasks) == 1:
        return [task() for task in tasks]

    results: dict[int, T] = {}
    with ThreadPoolExecutor(max_workers=min(max_workers, len(tasks))) as executor:
        future_to_index = {
            executor.submit(copy_context().run, task): index for index, task in enumerate(tasks)
        }
        try:
            for future in as_completed(future_to_index):
                results[future_to_index[future]] = future.result()
        except Exception:
            for future in future_to_index:
                future.cancel()
            raise

    return [results[index] for index in sorted(results)]
