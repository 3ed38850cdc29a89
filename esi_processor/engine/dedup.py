"""Deduplication of concurrently issued identical requests."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, TypeVar

T = TypeVar("T")


class InFlightRequests:
    """Share one pending task per key between concurrent callers.

    An entry exists only while its task is running: it is inserted when the
    call is issued and dropped from the task's done-callback, so settled
    results are never served to later callers.
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._pending: Dict[str, asyncio.Future] = {}

    @property
    def pending(self) -> list[str]:
        return list(self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, key: object) -> bool:
        return key in self._pending

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        if not self.enabled:
            return await factory()
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._pending[key] = task
            task.add_done_callback(lambda done, key=key: self._discard(key, done))
        # one waiter being cancelled must not cancel the shared fetch
        return await asyncio.shield(task)

    def _discard(self, key: str, task: asyncio.Future) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        if not task.cancelled():
            # mark the outcome as retrieved even when every waiter was cancelled
            task.exception()


__all__ = ["InFlightRequests"]
