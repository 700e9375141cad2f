from __future__ import annotations

import threading
import time
from collections.abc import Callable
from functools import partial

import pytest

from comptrack.concurrency import run_indexed_tasks_fail_fast


def _slow_value(value: int, delay: float) -> int:
    time.sleep(delay)
    return value


def test_results_follow_task_order() -> None:
    tasks: list[Callable[[], int]] = [
        partial(_slow_value, index, 0.02 * (3 - index)) for index in range(4)
    ]

    assert run_indexed_tasks_fail_fast(tasks, max_workers=4) == [0, 1, 2, 3]


def test_single_worker_runs_serially_on_caller_thread() -> None:
    seen: list[str] = []

    def record() -> None:
        seen.append(threading.current_thread().name)

    run_indexed_tasks_fail_fast([record, record], max_workers=1)

    assert seen == [threading.current_thread().name] * 2


def test_first_failure_is_raised() -> None:
    def boom() -> int:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        run_indexed_tasks_fail_fast([partial(_slow_value, 1, 0.0), boom], max_workers=2)


def test_no_tasks_returns_empty_list() -> None:
    assert run_indexed_tasks_fail_fast([], max_workers=4) == []
