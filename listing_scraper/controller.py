from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence, TypeVar

from .logging_utils import log_event

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class BatchController:
    """Runs a function over many items on a bounded thread pool.

    Results come back in input order regardless of completion order. An
    exception escaping the function for one item is turned into that
    item's result by ``on_error`` and never reaches its siblings.
    """

    def __init__(self, max_workers: int) -> None:
        self._max_workers = max(1, int(max_workers))
        self._executor = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="batch")
        self._lock = threading.Lock()
        self._running = True

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def run(
        self,
        fn: Callable[[T], R],
        items: Sequence[T],
        on_error: Callable[[T, BaseException], R],
    ) -> List[R]:
        futures = []
        with self._lock:
            running = self._running
            for item in items:
                if running:
                    futures.append(self._executor.submit(self._wrap_task, fn, item, on_error))
                else:
                    futures.append(None)

        results: List[R] = []
        for item, future in zip(items, futures):
            if future is None:
                results.append(on_error(item, RuntimeError("batch controller stopped")))
            else:
                results.append(future.result())
        return results

    @staticmethod
    def _wrap_task(fn: Callable[[T], R], item: T, on_error: Callable[[T, BaseException], R]) -> R:
        try:
            return fn(item)
        except Exception as exc:  # noqa: BLE001
            log_event(logger, logging.ERROR, "batch_item_crashed", error=f"{type(exc).__name__}: {exc}")
            return on_error(item, exc)

    def stop(self, wait: bool = True) -> None:
        with self._lock:
            self._running = False
        self._executor.shutdown(wait=wait, cancel_futures=False)
