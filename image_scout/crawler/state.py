"""
Shared per-crawl state: deduplication sets and the completion counter.

Every crawl invocation builds its own instances; nothing here is a module
level singleton.
"""
from __future__ import annotations

import asyncio
import threading
from typing import Hashable, Iterator, Optional, Set

__all__ = ("VisitedSet", "TaskTracker")


class VisitedSet:
    """Set of addresses already scheduled, with an atomic check-and-insert."""

    def __init__(self) -> None:
        self._items: Set[Hashable] = set()
        self._lock = threading.Lock()

    def check_and_insert(self, key: Hashable) -> bool:
        """Insert *key* and return True, or return False if it was already present."""
        with self._lock:
            if key in self._items:
                return False
            self._items.add(key)
            return True

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[Hashable]:
        with self._lock:
            return iter(list(self._items))


class TaskTracker:
    """Counts queued-but-unfinished tasks and lets the caller wait for zero.

    :meth:`queue_task` must be called by the submitter *before* the task is
    created and :meth:`task_complete` exactly once when the task body
    returns, so the count can only reach zero once no task is running or
    pending. Must be used from the event loop that owns the tasks.
    """

    def __init__(self) -> None:
        self._value = 0
        self._changed = asyncio.Event()

    @property
    def pending(self) -> int:
        return self._value

    def queue_task(self) -> None:
        self._value += 1

    def task_complete(self) -> None:
        if self._value <= 0:
            raise RuntimeError("task_complete() called more times than queue_task()")
        self._value -= 1
        self._changed.set()

    async def _until_idle(self) -> None:
        while self._value > 0:
            # any decrement wakes us; zero is re-checked on every wakeup
            self._changed.clear()
            await self._changed.wait()

    async def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait until the count drops to zero. Returns False if *timeout* elapsed first."""
        try:
            await asyncio.wait_for(self._until_idle(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True
