"""Keyed, cancellable timers on the asyncio event loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    """Runs callbacks later on the owner's event loop.

    At most one job exists per key: scheduling a key replaces (and cancels)
    the job already registered under it.
    """

    def schedule_repeating(self, key: str, interval: float, callback: Callable[[], None]) -> None: ...

    def schedule_once(self, key: str, delay: float, callback: Callable[[], None]) -> None: ...

    def cancel(self, key: str) -> None: ...

    def cancel_all(self) -> None: ...

    def is_scheduled(self, key: str) -> bool: ...


class AsyncioScheduler:
    """Scheduler backed by one asyncio task per key.

    Must be used from inside a running event loop. Callbacks run on that
    loop, so they never overlap with each other or with caller code.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task] = {}

    def schedule_repeating(self, key: str, interval: float, callback: Callable[[], None]) -> None:
        self.cancel(key)
        self._tasks[key] = asyncio.create_task(self._repeat(key, interval, callback))

    def schedule_once(self, key: str, delay: float, callback: Callable[[], None]) -> None:
        self.cancel(key)
        self._tasks[key] = asyncio.create_task(self._once(key, delay, callback))

    def cancel(self, key: str) -> None:
        task = self._tasks.pop(key, None)
        if task and not task.done():
            task.cancel()

    def cancel_all(self) -> None:
        for key in list(self._tasks):
            self.cancel(key)

    def is_scheduled(self, key: str) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()

    async def _repeat(self, key: str, interval: float, callback: Callable[[], None]) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                callback()
            except Exception as e:
                logger.error(f"Error in scheduled job {key}: {e}")

    async def _once(self, key: str, delay: float, callback: Callable[[], None]) -> None:
        await asyncio.sleep(delay)
        # Drop the registration before running so the callback may reschedule the key
        if self._tasks.get(key) is asyncio.current_task():
            del self._tasks[key]
        try:
            callback()
        except Exception as e:
            logger.error(f"Error in scheduled job {key}: {e}")
