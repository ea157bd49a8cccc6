"""In-memory runtime state: upstream queries currently in flight."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class InflightCoalescer(Generic[T]):
    """Share one running task between concurrent callers of the same key.

    Lookup and registration happen without an await in between, so the task
    table needs no lock. The task is shielded: a cancelled caller does not
    cancel the work other callers (or the cache write) are waiting on.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Future[T]] = {}

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._tasks[key] = task
            task.add_done_callback(lambda done, k=key: self._forget(k, done))
        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Future[T]) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]
        # Retrieve the outcome so an exception nobody awaited is not reported.
        if not task.cancelled():
            task.exception()

    def in_flight(self) -> int:
        return len(self._tasks)
