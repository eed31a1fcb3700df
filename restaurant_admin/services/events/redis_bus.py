"""
Redis Event Bus

Publishes order change events on a Redis pub/sub channel so every API
worker (and every connected dashboard) receives them.

Configuration:
    REDIS_URL: Redis connection URL
    ORDERS_CHANNEL: Channel name (default "orders")
"""

import asyncio
import logging
import time
from typing import Optional

import redis.asyncio as redis

from restaurant_admin.core.config import get_settings
from restaurant_admin.services.events.base import (
    BaseEventBus,
    EventSubscription,
    OrderEvent,
)

logger = logging.getLogger(__name__)


class RedisSubscription(EventSubscription):
    """Pub/sub subscription to a single channel."""

    def __init__(self, client: redis.Redis, channel: str):
        self._client = client
        self._channel = channel
        self._pubsub = None

    async def open(self) -> None:
        self._pubsub = self._client.pubsub()
        await self._pubsub.subscribe(self._channel)
        logger.info(f"Subscribed to Redis channel '{self._channel}'")

    async def get(self, timeout: Optional[float] = None) -> OrderEvent:
        if self._pubsub is None:
            await self.open()

        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            msg = await self._pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)

            if msg is not None and msg.get("type") == "message":
                try:
                    return OrderEvent.from_json(msg["data"])
                except (ValueError, TypeError) as e:
                    logger.warning(f"Ignoring malformed event on '{self._channel}': {e}")

            if deadline is not None and time.monotonic() >= deadline:
                raise asyncio.TimeoutError()

    async def close(self) -> None:
        if self._pubsub is None:
            return
        try:
            await self._pubsub.unsubscribe(self._channel)
            await self._pubsub.aclose()
        except redis.RedisError as e:
            logger.warning(f"Error during pubsub cleanup: {e}")
        finally:
            self._pubsub = None


class RedisEventBus(BaseEventBus):
    """Event bus on Redis pub/sub."""

    def __init__(self, url: Optional[str] = None, channel: Optional[str] = None):
        settings = get_settings()
        self.url = url or settings.redis_url
        self.channel = channel or settings.orders_channel
        self._client = redis.from_url(self.url, decode_responses=True)
        logger.info(f"RedisEventBus initialized (channel='{self.channel}')")

    @property
    def provider_name(self) -> str:
        return "redis"

    async def publish(self, event: OrderEvent) -> int:
        receivers = await self._client.publish(self.channel, event.to_json())
        logger.debug(f"Published {event.type} on {event.table} to {receivers} subscriber(s)")
        return receivers

    def subscribe(self) -> RedisSubscription:
        return RedisSubscription(self._client, self.channel)

    async def health_check(self) -> bool:
        try:
            return bool(await self._client.ping())
        except redis.RedisError as e:
            logger.error(f"Redis health check failed: {e}")
            return False

    async def close(self) -> None:
        await self._client.aclose()
