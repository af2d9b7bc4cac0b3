"""
Chat message REST endpoints.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, Request, status

from ..core.auth import Identity, get_current_identity
from ..schemas.chat import (
    DeleteMessageResponse,
    EditMessageRequest,
    MessageListResponse,
    MessageSchema,
    OnlineUsersResponse,
    ReactionRequest,
    SendMessageRequest,
)
from ..services.chat_service import ChatService
from ..services.realtime import RealtimeHub

logger = structlog.get_logger(__name__)
router = APIRouter()


def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


def get_realtime_hub(request: Request) -> RealtimeHub:
    return request.app.state.realtime_hub


@router.get("/messages", response_model=MessageListResponse, tags=["chat"])
async def list_messages(
    page: Optional[str] = Query(None, description="Page number, defaults to 1"),
    limit: Optional[str] = Query(None, description="Page size, defaults to 50"),
    identity: Identity = Depends(get_current_identity),
    chat_service: ChatService = Depends(get_chat_service),
) -> MessageListResponse:
    """
    GET /api/messages -> messages of the last 24 hours, oldest first per page.

    Page 1 holds the most recent messages. Invalid ``page``/``limit`` values
    fall back to the defaults instead of failing the request.
    """
    return await chat_service.list_messages(page=page, page_size=limit)


@router.post(
    "/messages",
    response_model=MessageSchema,
    status_code=status.HTTP_201_CREATED,
    tags=["chat"],
)
async def send_message(
    request: SendMessageRequest,
    identity: Identity = Depends(get_current_identity),
    chat_service: ChatService = Depends(get_chat_service),
) -> MessageSchema:
    return await chat_service.send_message(identity, request.content, request.reply_to)


@router.get("/messages/{message_id}", response_model=MessageSchema, tags=["chat"])
async def get_message(
    message_id: str,
    identity: Identity = Depends(get_current_identity),
    chat_service: ChatService = Depends(get_chat_service),
) -> MessageSchema:
    """Fetch a single message of the live window, 404 once it has expired."""
    return await chat_service.get_message(message_id)


@router.put("/messages/{message_id}", response_model=MessageSchema, tags=["chat"])
async def edit_message(
    message_id: str,
    request: EditMessageRequest,
    identity: Identity = Depends(get_current_identity),
    chat_service: ChatService = Depends(get_chat_service),
) -> MessageSchema:
    """Edit a message. Authors may edit for 15 minutes; admins at any time."""
    return await chat_service.edit_message(identity, message_id, request.content)


@router.delete("/messages/{message_id}", response_model=DeleteMessageResponse, tags=["chat"])
async def delete_message(
    message_id: str,
    identity: Identity = Depends(get_current_identity),
    chat_service: ChatService = Depends(get_chat_service),
) -> DeleteMessageResponse:
    deleted_id = await chat_service.delete_message(identity, message_id)
    return DeleteMessageResponse(id=deleted_id)


@router.post("/messages/{message_id}/reactions", response_model=MessageSchema, tags=["chat"])
async def toggle_reaction(
    message_id: str,
    request: ReactionRequest,
    identity: Identity = Depends(get_current_identity),
    chat_service: ChatService = Depends(get_chat_service),
) -> MessageSchema:
    """Add the caller's reaction, or remove it if it is already there."""
    return await chat_service.toggle_reaction(identity, message_id, request.emoji)


@router.get("/online-users", response_model=OnlineUsersResponse, tags=["chat"])
async def online_users(
    identity: Identity = Depends(get_current_identity),
    hub: RealtimeHub = Depends(get_realtime_hub),
) -> OnlineUsersResponse:
    return hub.online_users()
