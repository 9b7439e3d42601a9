from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from dependency_injector.wiring import inject, Provide

from app.app_containers import ApplicationContainer
from app.core.logger import logger
from app.core.realtime import VIEWS_CHANNEL, ConnectionManager

router = APIRouter(prefix="/ws", tags=["Realtime"])

@router.websocket("/views")
@inject
async def websocket_views(
    websocket: WebSocket,
    manager: ConnectionManager = Depends(Provide[ApplicationContainer.api_container.realtime_manager]),
):
    await manager.connect(VIEWS_CHANNEL, websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(VIEWS_CHANNEL, websocket)
    except Exception as e:
        logger.warning("[RT] socket error: %s", e)
        manager.disconnect(VIEWS_CHANNEL, websocket)
        await websocket.close()
