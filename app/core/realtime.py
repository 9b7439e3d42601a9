# app/core/realtime.py

from typing import Any, Dict, Set
from fastapi import WebSocket
from app.core.logger import logger

VIEWS_CHANNEL = "views"


class ConnectionManager:
    """
    Keeps the console's open WebSocket connections grouped by channel.

    Pages subscribe to the `views` channel and reload when one of the
    paths they render is revalidated.
    """

    def __init__(self) -> None:
        self._channels: Dict[str, Set[WebSocket]] = {}

    async def connect(self, channel_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        self._channels.setdefault(channel_id, set()).add(websocket)
        logger.info("[RT] connected channel=%s total=%s", channel_id, len(self._channels[channel_id]))

    def disconnect(self, channel_id: str, websocket: WebSocket) -> None:
        conns = self._channels.get(channel_id)
        if not conns:
            return
        conns.discard(websocket)
        if not conns:
            self._channels.pop(channel_id, None)
        logger.info("[RT] disconnected channel=%s", channel_id)

    def count(self, channel_id: str) -> int:
        return len(self._channels.get(channel_id, ()))

    async def broadcast(self, channel_id: str, message: Dict[str, Any]) -> int:
        """Send `message` to every socket in the channel; returns deliveries."""
        conns = list(self._channels.get(channel_id, set()))
        if not conns:
            return 0

        delivered = 0
        dead: list[WebSocket] = []
        for ws in conns:
            try:
                await ws.send_json(message)
                delivered += 1
            except Exception as e:
                logger.debug("[RT] dropping socket channel=%s err=%s", channel_id, e)
                dead.append(ws)

        for ws in dead:
            self.disconnect(channel_id, ws)
        return delivered


def build_event(resource: str, action: str, payload: Dict[str, Any] | None = None) -> Dict[str, Any]:
    """Standard realtime envelope shared by every event the console emits."""
    return {
        "type": f"{resource}.{action}",
        "resource": resource,
        "action": action,
        "payload": payload or {},
    }
