"""
Event Bus Factory

Single entry point for the realtime order change feed.

Usage:
    from restaurant_admin.services.events import get_event_bus, OrderEvent

    bus = get_event_bus()
    await bus.publish(OrderEvent(type="UPDATE", new={"id": 7}))

Environment Switching:
    - ENV_MODE=development → MemoryEventBus (single process)
    - ENV_MODE=staging/production → RedisEventBus
"""

import logging
from functools import lru_cache

from restaurant_admin.core.config import get_settings
from restaurant_admin.services.events.base import (
    BaseEventBus,
    EventSubscription,
    OrderEvent,
)
from restaurant_admin.services.events.memory import MemoryEventBus
from restaurant_admin.services.events.redis_bus import RedisEventBus

logger = logging.getLogger(__name__)


@lru_cache()
def get_event_bus() -> BaseEventBus:
    """
    Get the configured event bus instance.

    The instance is cached so publishers and subscribers share it.
    """
    settings = get_settings()

    if settings.is_development:
        logger.info("Event Bus: Using MemoryEventBus (development mode)")
        return MemoryEventBus()

    logger.info(f"Event Bus: Using RedisEventBus ({settings.env_mode.value} mode)")
    return RedisEventBus()


def reset_event_bus() -> None:
    """Clear the cached bus. The next get_event_bus() builds a new one."""
    get_event_bus.cache_clear()
    logger.debug("Event bus cache cleared")


async def publish_order_change(event_type: str, new: dict = None, old: dict = None) -> None:
    """
    Publish a change on the orders table.

    Failures are logged, never raised: the write has already been committed.
    """
    bus = get_event_bus()
    try:
        await bus.publish(OrderEvent(type=event_type, table="orders", new=new, old=old))
    except Exception as e:
        logger.error(f"Failed to publish {event_type} order event: {e}")


__all__ = [
    "get_event_bus",
    "reset_event_bus",
    "publish_order_change",
    "BaseEventBus",
    "EventSubscription",
    "OrderEvent",
    "MemoryEventBus",
    "RedisEventBus",
]
