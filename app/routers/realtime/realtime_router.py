from fastapi import APIRouter, Query, WebSocket, status
from starlette.websockets import WebSocketDisconnect

from app.constants.permissions import is_privileged
from app.core.db import AsyncSessionLocal
from app.core.exceptions import AppException
from app.services.notifications.realtime_service import connection_manager
from app.utils.get_user import user_from_token
from app.utils.logger import get_logger

logger = get_logger("realtime.router")

router = APIRouter(tags=["Realtime"])


@router.websocket("/ws/complaints")
async def complaint_events_ws(websocket: WebSocket, token: str = Query(...)):
    """Staff dashboard feed. Browsers cannot set headers here, so the token rides in the query."""
    try:
        async with AsyncSessionLocal() as db:
            user = await user_from_token(db, token)
    except AppException as exc:
        logger.warning("Realtime connection rejected: %s", exc.message)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    if not is_privileged(user.role):
        logger.warning("Realtime connection denied", extra={"user_id": user.id})
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await connection_manager.connect(websocket)
    try:
        while True:
            # Inbound messages are only keep-alives
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        connection_manager.disconnect(websocket)
