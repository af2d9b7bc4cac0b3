"""
Dispatch of client frames received over the realtime channel.

Message mutations coming from a socket go through ``ChatService`` exactly
like their REST counterparts, so both paths share validation and ownership
rules and emit the same broadcast events. Failures are reported to the
sending connection only as an ``error`` frame.
"""

import json
from typing import Any, Awaitable, Callable, Dict

import structlog
from fastapi import WebSocket, status
from pydantic import ValidationError as PydanticValidationError

from ..core.auth import Identity
from ..core.exceptions import APIError
from ..schemas.realtime import (
    AddReactionPayload,
    ClientEvent,
    DeleteMessagePayload,
    EditMessagePayload,
    ErrorNotice,
    Frame,
    SendMessagePayload,
    ServerEvent,
    TypingNotice,
    TypingPayload,
)
from .chat_service import ChatService
from .realtime import RealtimeHub

logger = structlog.get_logger(__name__)

Handler = Callable[[WebSocket, Identity, Dict[str, Any]], Awaitable[None]]


class RealtimeEventDispatcher:
    """Routes client events to the chat service and the hub."""

    def __init__(self, hub: RealtimeHub, chat_service: ChatService):
        self.hub = hub
        self.chat_service = chat_service
        self._handlers: Dict[str, Handler] = {
            ClientEvent.SEND_MESSAGE.value: self._on_send_message,
            ClientEvent.EDIT_MESSAGE.value: self._on_edit_message,
            ClientEvent.DELETE_MESSAGE.value: self._on_delete_message,
            ClientEvent.ADD_REACTION.value: self._on_add_reaction,
            ClientEvent.TYPING.value: self._on_typing,
        }

    async def handle_text(self, websocket: WebSocket, identity: Identity, raw: str) -> None:
        """Parse and handle one text frame."""
        try:
            frame = Frame.model_validate(json.loads(raw))
        except ValueError:
            # Covers JSONDecodeError and pydantic's ValidationError
            await self._send_error(websocket, None, status.HTTP_400_BAD_REQUEST, "Malformed frame")
            return

        handler = self._handlers.get(frame.event)
        if handler is None:
            await self._send_error(websocket, frame.event, status.HTTP_400_BAD_REQUEST, "Unknown event")
            return

        try:
            await handler(websocket, identity, frame.data)
        except APIError as exc:
            logger.info(
                "Realtime event rejected",
                client_event=frame.event,
                user_id=identity.id,
                status_code=exc.status_code,
                detail=exc.detail,
            )
            await self._send_error(websocket, frame.event, exc.status_code, exc.detail)
        except PydanticValidationError as exc:
            await self._send_error(
                websocket,
                frame.event,
                status.HTTP_400_BAD_REQUEST,
                [error.get("msg", "") for error in exc.errors()],
            )
        except Exception as exc:
            logger.error(
                "Realtime event failed",
                client_event=frame.event,
                user_id=identity.id,
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=True,
            )
            await self._send_error(
                websocket,
                frame.event,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "Internal server error",
            )

    async def _on_send_message(self, websocket: WebSocket, identity: Identity, data: Dict[str, Any]) -> None:
        payload = SendMessagePayload.model_validate(data)
        message = await self.chat_service.send_message(identity, payload.content, payload.reply_to)
        await self.hub.send_to(websocket, ServerEvent.MESSAGE_SENT, message.to_wire())

    async def _on_edit_message(self, websocket: WebSocket, identity: Identity, data: Dict[str, Any]) -> None:
        payload = EditMessagePayload.model_validate(data)
        await self.chat_service.edit_message(identity, payload.message_id, payload.content)

    async def _on_delete_message(self, websocket: WebSocket, identity: Identity, data: Dict[str, Any]) -> None:
        payload = DeleteMessagePayload.model_validate(data)
        await self.chat_service.delete_message(identity, payload.message_id)

    async def _on_add_reaction(self, websocket: WebSocket, identity: Identity, data: Dict[str, Any]) -> None:
        payload = AddReactionPayload.model_validate(data)
        await self.chat_service.toggle_reaction(identity, payload.message_id, payload.emoji)

    async def _on_typing(self, websocket: WebSocket, identity: Identity, data: Dict[str, Any]) -> None:
        payload = TypingPayload.model_validate(data)
        notice = TypingNotice(user_id=identity.id, user_name=identity.name, is_typing=payload.is_typing)
        await self.hub.publish(ServerEvent.USER_TYPING, notice.to_wire(), exclude_user_id=identity.id)

    async def _send_error(self, websocket: WebSocket, event: Any, status_code: int, detail: Any) -> None:
        notice = ErrorNotice(event=event, status=status_code, detail=detail)
        await self.hub.send_to(websocket, ServerEvent.ERROR, notice.to_wire())
