"""
In-Memory Event Bus

Single-process fan-out over asyncio queues. Used in development and tests,
where no Redis server is available.
"""

import asyncio
import logging
from typing import Optional

from restaurant_admin.services.events.base import (
    BaseEventBus,
    EventSubscription,
    OrderEvent,
)

logger = logging.getLogger(__name__)


class MemorySubscription(EventSubscription):
    """Subscription backed by its own asyncio.Queue."""

    def __init__(self, bus: "MemoryEventBus", max_queue_size: int):
        self._bus = bus
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)
        # Registered immediately so no event published after subscribe() is lost
        bus._subscribers.add(self)

    async def get(self, timeout: Optional[float] = None) -> OrderEvent:
        if timeout is None:
            return await self.queue.get()
        return await asyncio.wait_for(self.queue.get(), timeout)

    async def close(self) -> None:
        self._bus._subscribers.discard(self)


class MemoryEventBus(BaseEventBus):
    """
    In-process event bus.

    Slow subscribers whose queue is full miss events instead of blocking
    the publisher.
    """

    def __init__(self, max_queue_size: int = 100):
        self.max_queue_size = max_queue_size
        self._subscribers: set[MemorySubscription] = set()
        self.published_count = 0

    @property
    def provider_name(self) -> str:
        return "memory"

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def publish(self, event: OrderEvent) -> int:
        delivered = 0
        for subscription in list(self._subscribers):
            try:
                subscription.queue.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning(f"Subscriber queue full, dropping {event.type} event")
        self.published_count += 1
        logger.debug(f"Published {event.type} on {event.table} to {delivered} subscriber(s)")
        return delivered

    def subscribe(self) -> MemorySubscription:
        return MemorySubscription(self, self.max_queue_size)

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        self._subscribers.clear()
