# src/lumicheck/pooling/executor.py
"""Bounded task pool for block-level catalog calls.

One pool is shared by every dataset resolution in the process, so the total
number of in-flight catalog calls never exceeds pool_size regardless of how
many workflows or datasets are being resolved concurrently.

Units are grouped for barrier-style waiting:

    pool = BoundedTaskPool(PoolConfig(pool_size=16))
    group = pool.group()
    for block in blocks:
        group.submit(fetch_block, block)
    futures = group.wait()       # blocks until every unit has finished
    for future in futures:
        future.result()          # failures surface here, not in wait()
"""

from __future__ import annotations

import contextvars
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from threading import Lock
from typing import Any, TypeVar

import structlog

from lumicheck.pooling.config import PoolConfig

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Set on pool worker threads so that waiting on a group from inside a unit
# can be rejected instead of deadlocking a saturated pool.
_worker_state = threading.local()


class BoundedTaskPool:
    """Fixed-capacity executor shared across the whole process.

    submit() only enqueues; a unit starts as soon as one of the pool_size
    worker threads is free. No ordering is guaranteed between units.
    """

    def __init__(self, config: PoolConfig) -> None:
        """Initialize pool.

        Args:
            config: Pool configuration with the concurrency bound
        """
        self._pool_size = config.pool_size
        self._thread_pool = ThreadPoolExecutor(
            max_workers=config.pool_size,
            thread_name_prefix="lumicheck-pool",
        )

        # Concurrency tracking for diagnostics
        self._stats_lock = Lock()
        self._submitted = 0
        self._completed = 0
        self._active_workers = 0
        self._max_concurrent = 0

        self._shutdown = False

    @property
    def pool_size(self) -> int:
        """Maximum concurrently executing units."""
        return self._pool_size

    def _increment_active_workers(self) -> None:
        with self._stats_lock:
            self._active_workers += 1
            if self._active_workers > self._max_concurrent:
                self._max_concurrent = self._active_workers

    def _decrement_active_workers(self) -> None:
        with self._stats_lock:
            self._active_workers -= 1
            self._completed += 1

    def _run_unit(self, fn: Callable[..., T], args: tuple[Any, ...], kwargs: dict[str, Any]) -> T:
        _worker_state.in_pool = True
        self._increment_active_workers()
        try:
            return fn(*args, **kwargs)
        finally:
            self._decrement_active_workers()

    def submit(self, fn: Callable[..., T], /, *args: Any, **kwargs: Any) -> Future[T]:
        """Enqueue a unit of work.

        The unit runs inside a copy of the caller's contextvars, so log
        context bound by the submitting thread is visible in the unit.

        Returns:
            Future resolving to the unit's return value or exception

        Raises:
            RuntimeError: If the pool has been shut down
        """
        context = contextvars.copy_context()
        with self._stats_lock:
            if self._shutdown:
                raise RuntimeError("cannot submit to a pool that has been shut down")
            self._submitted += 1
            return self._thread_pool.submit(context.run, self._run_unit, fn, args, kwargs)

    def group(self) -> TaskGroup:
        """Create a new submission scope on this pool."""
        return TaskGroup(self)

    def shutdown(self, wait: bool = True) -> None:
        """Shutdown the pool.

        Args:
            wait: If True, wait for queued and running units to complete
        """
        with self._stats_lock:
            self._shutdown = True
        self._thread_pool.shutdown(wait=wait)
        logger.debug("pool_shutdown", **self.get_stats())

    def get_stats(self) -> dict[str, int]:
        """Get pool statistics for diagnostics.

        Returns:
            Dict with pool_size, submitted, completed, active and
            max_concurrent_reached
        """
        with self._stats_lock:
            return {
                "pool_size": self._pool_size,
                "submitted": self._submitted,
                "completed": self._completed,
                "active": self._active_workers,
                "max_concurrent_reached": self._max_concurrent,
            }


class TaskGroup:
    """A set of units submitted to a pool, awaited together.

    A group is owned by the call that created it. wait() never raises on
    behalf of a unit; each unit's outcome stays in its future.
    """

    def __init__(self, pool: BoundedTaskPool) -> None:
        self._pool = pool
        self._futures: list[Future[Any]] = []
        self._lock = Lock()

    def submit(self, fn: Callable[..., T], /, *args: Any, **kwargs: Any) -> Future[T]:
        """Submit a unit to the pool as part of this group."""
        future = self._pool.submit(fn, *args, **kwargs)
        with self._lock:
            self._futures.append(future)
        return future

    def __len__(self) -> int:
        with self._lock:
            return len(self._futures)

    def wait(self, timeout: float | None = None) -> list[Future[Any]]:
        """Block until every unit submitted so far has completed.

        Args:
            timeout: Optional upper bound in seconds; on expiry the returned
                futures may include unfinished ones

        Returns:
            The group's futures in submission order

        Raises:
            RuntimeError: If called from a pool worker thread
        """
        if getattr(_worker_state, "in_pool", False):
            raise RuntimeError("TaskGroup.wait() called from a pool worker; this would deadlock a saturated pool")
        with self._lock:
            futures = list(self._futures)
        wait(futures, timeout=timeout)
        return futures

    @staticmethod
    def first_exception(futures: list[Future[Any]]) -> BaseException | None:
        """Return the first failure in submission order, if any.

        Only finished futures are inspected.
        """
        for future in futures:
            if future.done() and not future.cancelled():
                exc = future.exception()
                if exc is not None:
                    return exc
        return None
