from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable, Hashable, Iterable, Mapping, Optional, TypeVar

from ..core.constants import DEFAULT_FANOUT_MAX_WORKERS

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
R = TypeVar("R")
A = TypeVar("A")


class FanOutCoordinator:
    """Runs independent reads concurrently on a bounded thread pool and joins them.

    Branches are expected to absorb their own store failures; an exception that
    still escapes a branch is re-raised at the join, after every branch has
    finished. There is no cancellation: abandoning a batch leaves its in-flight
    branches to complete on the pool.

    Branches must not submit to the same coordinator (the pool is bounded).
    """

    def __init__(self, max_workers: int = DEFAULT_FANOUT_MAX_WORKERS, *, executor: Optional[Executor] = None):
        self._max_workers = int(max_workers)
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="smart-attend-fanout",
        )

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def run(self, tasks: Mapping[K, Callable[[], R]]) -> dict[K, R]:
        futures = {key: self._executor.submit(fn) for key, fn in tasks.items()}

        results: dict[K, R] = {}
        first_error: Optional[BaseException] = None
        for key, future in futures.items():
            try:
                results[key] = future.result()
            except Exception as e:
                logger.warning("Fan-out branch %r failed: %s", key, e)
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error
        return results

    def map(self, fn: Callable[[A], R], items: Iterable[A]) -> dict[A, R]:
        """fn(item) for every distinct item, concurrently; keyed by item."""
        return self.run({item: (lambda item=item: fn(item)) for item in items})

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
