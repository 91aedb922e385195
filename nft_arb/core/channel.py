"""
Bounded event channel with an explicit overflow policy.

Collectors publish into the channel; the engine is its only reader.
"""

import asyncio
import logging
from enum import Enum
from typing import Dict, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OverflowPolicy(Enum):
    """What ``publish`` does when the channel is full."""
    BLOCK = "block"              # producer waits for room
    DROP_OLDEST = "drop_oldest"  # evict the oldest queued item
    DROP_NEWEST = "drop_newest"  # discard the item being published


class EventChannel(Generic[T]):
    """
    FIFO channel backed by a bounded ``asyncio.Queue``.

    Items are delivered in the order ``publish`` accepted them. Dropped items
    are counted and logged, never silently lost.
    """

    def __init__(self, capacity: int = 512, policy: OverflowPolicy = OverflowPolicy.BLOCK, name: str = "events"):
        if capacity <= 0:
            raise ValueError("Channel capacity must be positive")
        self.name = name
        self.capacity = capacity
        self.policy = policy
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=capacity)
        self.stats: Dict[str, int] = {"published": 0, "dropped": 0, "consumed": 0}

    async def publish(self, item: T) -> bool:
        """
        Append an item according to the overflow policy.

        Returns:
            True if the item was queued, False if it was dropped
        """
        if self.policy is OverflowPolicy.BLOCK:
            await self._queue.put(item)
            self.stats["published"] += 1
            return True

        if self._queue.full():
            if self.policy is OverflowPolicy.DROP_NEWEST:
                self._record_drop(item)
                return False
            dropped = self._queue.get_nowait()
            self._queue.task_done()
            self._record_drop(dropped)

        self._queue.put_nowait(item)
        self.stats["published"] += 1
        return True

    async def get(self) -> T:
        """Wait for and return the next item."""
        item = await self._queue.get()
        self._queue.task_done()
        self.stats["consumed"] += 1
        return item

    def qsize(self) -> int:
        return self._queue.qsize()

    def empty(self) -> bool:
        return self._queue.empty()

    def full(self) -> bool:
        return self._queue.full()

    def _record_drop(self, item: T) -> None:
        self.stats["dropped"] += 1
        logger.warning(
            f"Channel '{self.name}' full ({self.capacity}), dropped "
            f"{getattr(item, 'kind', type(item).__name__)} "
            f"(total dropped: {self.stats['dropped']})"
        )

    def drain(self) -> int:
        """Discard everything queued; returns the number of items removed."""
        drained = 0
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()
            drained += 1
        return drained
