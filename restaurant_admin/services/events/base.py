"""
Event Bus Abstract Base Class

Defines the contract for realtime order change feeds. Writes publish an
OrderEvent after commit; dashboards subscribe and refresh.

Design Pattern: Strategy Pattern
    - MemoryEventBus for development and tests (single process)
    - RedisEventBus for staging/production (fan-out across workers)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Optional, Union
import json


EVENT_TYPES = ("INSERT", "UPDATE", "DELETE")


@dataclass
class OrderEvent:
    """
    Row change notification.

    Attributes:
        type: INSERT, UPDATE or DELETE
        table: Table that changed
        new: Row after the change (None for deletes)
        old: Row identity before the change (None for inserts)
        timestamp: When the change was published
    """
    type: str
    table: str = "orders"
    new: Optional[dict[str, Any]] = None
    old: Optional[dict[str, Any]] = None
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def __post_init__(self):
        if self.type not in EVENT_TYPES:
            raise ValueError(f"Invalid event type: {self.type}")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    @classmethod
    def from_json(cls, raw: Union[str, bytes]) -> "OrderEvent":
        return cls(**json.loads(raw))


class EventSubscription(ABC):
    """
    A live subscription. Use as an async context manager and iterate it.

    Example:
        async with bus.subscribe() as subscription:
            async for event in subscription:
                ...
    """

    async def __aenter__(self) -> "EventSubscription":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def __aiter__(self) -> AsyncIterator[OrderEvent]:
        return self

    async def __anext__(self) -> OrderEvent:
        return await self.get()

    async def open(self) -> None:
        """Start receiving events. Default: nothing to do."""

    @abstractmethod
    async def get(self, timeout: Optional[float] = None) -> OrderEvent:
        """
        Wait for the next event.

        Raises:
            asyncio.TimeoutError: If `timeout` elapses first
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        pass


class BaseEventBus(ABC):
    """Abstract base class for realtime event buses."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of the bus backend ("memory" or "redis")."""
        pass

    @abstractmethod
    async def publish(self, event: OrderEvent) -> int:
        """
        Publish an event to every subscriber.

        Returns:
            Number of subscribers that received it (when known)
        """
        pass

    @abstractmethod
    def subscribe(self) -> EventSubscription:
        """Create a subscription to the orders channel."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass

    async def close(self) -> None:
        """Release connections held by the bus."""
