"""
The bounded thread pool that performs all network I/O.

The pool is process-wide and configured once at startup. Batch operations
submit independent units of work and fold the results after they have all
completed; no state is shared between the units.
"""
from __future__ import annotations
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, Iterator, Optional, Tuple, TypeVar

import psutil

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

MAX_WORKERS = 255
WORKERS_PER_CPU = 4

T = TypeVar('T')
R = TypeVar('R')

_global_pool: Optional["WorkerPool"] = None
_global_lock = threading.Lock()


def default_worker_count() -> int:
    """Number of logical CPUs times four, capped at MAX_WORKERS."""
    cpus = psutil.cpu_count(logical=True) or 1
    return min(cpus * WORKERS_PER_CPU, MAX_WORKERS)


def resolve_worker_count(workers: int = 0) -> int:
    """Zero selects the default size; larger values are capped at MAX_WORKERS."""
    try:
        workers = int(workers or 0)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid worker count {workers!r}.")
    if workers < 0:
        raise ConfigurationError(f"Invalid worker count {workers}. Use 0 for the default or a positive number.")
    if workers == 0:
        return default_worker_count()
    return min(workers, MAX_WORKERS)


class WorkerPool:
    """A fixed-size thread pool with a fan-out/fan-in helper."""

    def __init__(self, workers: int = 0):
        self.size = resolve_worker_count(workers)
        self._executor = ThreadPoolExecutor(max_workers=self.size, thread_name_prefix="isonline")

    def map_unordered(self, fn: Callable[[T], R], items: Iterable[T]) -> Iterator[Tuple[T, R]]:
        """
        Runs `fn` on every item and yields (item, result) pairs in completion
        order. All items are submitted before the first result is yielded.
        An exception raised by `fn` is re-raised here.
        """
        futures = {self._executor.submit(fn, item): item for item in items}
        for future in as_completed(futures):
            yield futures[future], future.result()

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()


def configure_pool(workers: int = 0) -> WorkerPool:
    """
    Installs the process-wide pool. Must be called at most once, before the
    first round; the pool is not resized afterwards.
    """
    global _global_pool
    with _global_lock:
        if _global_pool is not None:
            raise ConfigurationError("The worker pool has already been configured.")
        _global_pool = WorkerPool(workers)
        logger.info("Worker pool configured with %d threads", _global_pool.size)
        return _global_pool


def get_pool() -> WorkerPool:
    """Returns the process-wide pool, creating a default-sized one on first use."""
    global _global_pool
    with _global_lock:
        if _global_pool is None:
            _global_pool = WorkerPool()
            logger.info("Worker pool created with default size of %d threads", _global_pool.size)
        return _global_pool
