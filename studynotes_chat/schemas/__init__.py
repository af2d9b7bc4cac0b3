"""
Pydantic schemas for the REST API and the realtime channel
"""

from .chat import (
    Author,
    DeleteMessageResponse,
    EditMessageRequest,
    MessageListResponse,
    MessageSchema,
    OnlineUser,
    OnlineUsersResponse,
    PaginationInfo,
    ReactionRequest,
    ReactionSchema,
    ReplyPreview,
    SendMessageRequest,
)
from .realtime import ClientEvent, Frame, ServerEvent, build_frame

__all__ = [
    "Author",
    "ClientEvent",
    "DeleteMessageResponse",
    "EditMessageRequest",
    "Frame",
    "MessageListResponse",
    "MessageSchema",
    "OnlineUser",
    "OnlineUsersResponse",
    "PaginationInfo",
    "ReactionRequest",
    "ReactionSchema",
    "ReplyPreview",
    "SendMessageRequest",
    "ServerEvent",
    "build_frame",
]
