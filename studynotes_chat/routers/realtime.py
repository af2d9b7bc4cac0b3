"""
WebSocket endpoint of the realtime chat channel.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from starlette.websockets import WebSocketState

from ..core.auth import extract_bearer_token
from ..core.exceptions import AuthenticationError
from ..services.realtime import RealtimeHub
from ..services.realtime_events import RealtimeEventDispatcher

logger = structlog.get_logger(__name__)
router = APIRouter()


def _handshake_token(websocket: WebSocket) -> Optional[str]:
    """Credential from the ``token`` query parameter or the Authorization header."""
    token = websocket.query_params.get("token")
    if token:
        return token
    return extract_bearer_token(websocket.headers.get("authorization"))


@router.websocket("/ws")
async def realtime_channel(websocket: WebSocket) -> None:
    hub: RealtimeHub = websocket.app.state.realtime_hub
    dispatcher: RealtimeEventDispatcher = websocket.app.state.realtime_dispatcher

    try:
        identity = await hub.authenticate(_handshake_token(websocket))
    except AuthenticationError as exc:
        logger.warning("Realtime handshake rejected", reason=exc.detail)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=str(exc.detail))
        return

    await hub.connect(websocket, identity)
    try:
        while websocket.application_state == WebSocketState.CONNECTED:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", status.WS_1000_NORMAL_CLOSURE))

            raw = message.get("text")
            if raw is None:
                raw = (message.get("bytes") or b"").decode("utf-8", errors="replace")
            await dispatcher.handle_text(websocket, identity, raw)
    except WebSocketDisconnect as exc:
        logger.debug("Realtime client closed connection", user_id=identity.id, code=exc.code)
    finally:
        await hub.disconnect(identity, websocket)
