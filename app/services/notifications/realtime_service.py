import logging
from datetime import datetime, timezone

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks open dashboard websockets and fans events out to them."""

    def __init__(self):
        self._connections: set[WebSocket] = set()

    @property
    def active_count(self) -> int:
        return len(self._connections)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections.add(websocket)
        logger.debug("Realtime client connected (%d open)", self.active_count)

    def disconnect(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)
        logger.debug("Realtime client disconnected (%d open)", self.active_count)

    async def broadcast(self, event_type: str, payload: dict) -> int:
        message = {
            "type": event_type,
            **payload,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        delivered = 0
        dead: list[WebSocket] = []
        for websocket in list(self._connections):
            try:
                await websocket.send_json(message)
                delivered += 1
            except (WebSocketDisconnect, RuntimeError, ConnectionError):
                dead.append(websocket)

        for websocket in dead:
            self.disconnect(websocket)
        if dead:
            logger.info("Pruned %d dead realtime connections", len(dead))

        return delivered


connection_manager = ConnectionManager()
