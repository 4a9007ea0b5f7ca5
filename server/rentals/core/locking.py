"""In-process per-item locks for the reservation check-and-write sequence."""

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable

from .exceptions import ConcurrencyConflictError

logger = logging.getLogger(__name__)


class ItemLockManager:
    """
    Hands out one ``asyncio.Lock`` per item id.

    Locks are always taken in sorted id order, so two reservations touching
    overlapping item sets can never deadlock on each other. Locks are kept
    per event loop because an ``asyncio.Lock`` binds to the loop that first
    waits on it.
    """

    def __init__(self):
        self._locks_by_loop: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, dict[str, asyncio.Lock]]" = (
            weakref.WeakKeyDictionary()
        )

    def _locks(self) -> dict[str, asyncio.Lock]:
        loop = asyncio.get_running_loop()
        locks = self._locks_by_loop.get(loop)
        if locks is None:
            locks = {}
            self._locks_by_loop[loop] = locks
        return locks

    @asynccontextmanager
    async def hold(self, item_ids: Iterable[str], timeout: float) -> AsyncIterator[list[str]]:
        """
        Hold the locks of every item in ``item_ids`` for the duration of the block.

        Args:
            item_ids: Item ids to lock; duplicates are ignored
            timeout: Seconds to wait for each lock

        Yields:
            The sorted item ids that are held

        Raises:
            ConcurrencyConflictError: If a lock could not be acquired in time
        """
        ordered = sorted(set(item_ids))
        locks = self._locks()
        acquired: list[asyncio.Lock] = []
        try:
            for item_id in ordered:
                lock = locks.setdefault(item_id, asyncio.Lock())
                try:
                    async with asyncio.timeout(timeout):
                        await lock.acquire()
                except TimeoutError:
                    logger.warning(
                        "Timed out waiting for item reservation lock",
                        extra={"item_id": item_id, "timeout_seconds": timeout}
                    )
                    raise ConcurrencyConflictError(item_ids=ordered, cause="lock_timeout")
                acquired.append(lock)
            yield ordered
        finally:
            for lock in reversed(acquired):
                lock.release()


# Shared by every store bound to this process
item_locks = ItemLockManager()
