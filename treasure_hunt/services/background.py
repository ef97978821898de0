"""
Fire-and-forget progress writes

Correct answers are acknowledged before their write completes. The writes are
kept here so they are not garbage collected mid-flight and can be drained on
shutdown; the ones given up after retry are kept for the health endpoint.
"""
import asyncio
import logging
from collections import deque
from typing import Awaitable, Deque, List, Set

from treasure_hunt.models import UnsavedAdvance


logger = logging.getLogger(__name__)


class BackgroundWrites:

    def __init__(self, keep_failures: int = 100):
        self._pending: Set[asyncio.Task] = set()
        self.failures: Deque[UnsavedAdvance] = deque(maxlen=keep_failures)

    def spawn(self, coro: Awaitable) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._pending.add(task)
        task.add_done_callback(self._finished)
        return task

    def _finished(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.warning("⚠️ Background write cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"❌ Background write crashed: {type(exc).__name__}: {exc}", exc_info=exc)

    def report(self, failure: UnsavedAdvance) -> None:
        self.failures.append(failure)

    @property
    def pending(self) -> int:
        return sum(1 for task in self._pending if not task.done())

    async def drain(self) -> None:
        """Wait for every in-flight write"""
        while True:
            in_flight = [task for task in self._pending if not task.done()]
            if not in_flight:
                return
            await asyncio.gather(*in_flight, return_exceptions=True)

    def recent_failures(self) -> List[UnsavedAdvance]:
        return list(self.failures)
