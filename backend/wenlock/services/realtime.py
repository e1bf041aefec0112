"""
Real-time push of state changes to connected browsers.

Services depend only on the Broadcaster protocol; the WebSocket-backed
ConnectionManager is the production implementation. Delivery is best-effort
and at-most-once: a subscriber that is not connected misses the event.
"""

import logging
from typing import Any, Protocol

from fastapi import WebSocket

logger = logging.getLogger(__name__)

SCHEDULE_UPDATE = "scheduleUpdate"
TOKEN_UPDATE = "tokenUpdate"
INVENTORY_UPDATE = "inventoryUpdate"
LOW_STOCK_ALERT = "lowStockAlert"
EMERGENCY_ALERT = "emergencyAlert"


class Broadcaster(Protocol):
    async def publish(self, event: str, payload: dict[str, Any]) -> None: ...


class ConnectionManager:
    """Live set of WebSocket subscribers."""

    def __init__(self):
        self.connections: set[WebSocket] = set()

    async def connect(self, ws: WebSocket) -> None:
        await ws.accept()
        self.connections.add(ws)
        logger.info("Client connected (%d live)", len(self.connections))

    def disconnect(self, ws: WebSocket) -> None:
        self.connections.discard(ws)
        logger.info("Client disconnected (%d live)", len(self.connections))

    async def publish(self, event: str, payload: dict[str, Any]) -> None:
        message = {"event": event, "data": payload}
        gone = []
        for ws in list(self.connections):
            try:
                await ws.send_json(message)
            except Exception:
                logger.debug("Dropping subscriber after failed send of %s", event, exc_info=True)
                gone.append(ws)
        for ws in gone:
            self.disconnect(ws)
