"""
Realtime order feed.

Clients connect to /ws/orders and receive every order change as JSON:
    {"type": "INSERT", "table": "orders", "new": {...}, "old": null, "timestamp": "..."}
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from restaurant_admin.services.events import get_event_bus

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


@router.websocket("/ws/orders")
async def orders_feed(websocket: WebSocket) -> None:
    await websocket.accept()
    bus = get_event_bus()
    logger.info(f"Realtime client connected ({bus.provider_name})")

    try:
        async with bus.subscribe() as subscription:
            async for event in subscription:
                await websocket.send_text(event.to_json())
    except WebSocketDisconnect:
        logger.info("Realtime client disconnected")
