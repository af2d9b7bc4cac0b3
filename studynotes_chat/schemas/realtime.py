"""
Realtime channel event names and frame schemas.

Every frame in either direction is a JSON envelope ``{"event": ..., "data": {...}}``.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from .chat import CamelModel


class ClientEvent(str, Enum):
    """Events a client may send."""
    SEND_MESSAGE = "sendMessage"
    EDIT_MESSAGE = "editMessage"
    DELETE_MESSAGE = "deleteMessage"
    ADD_REACTION = "addReaction"
    TYPING = "typing"


class ServerEvent(str, Enum):
    """Events pushed by the server."""
    ONLINE_USERS_UPDATE = "onlineUsersUpdate"
    NEW_MESSAGE = "newMessage"
    MESSAGE_EDITED = "messageEdited"
    MESSAGE_DELETED = "messageDeleted"
    REACTION_ADDED = "reactionAdded"
    USER_TYPING = "userTyping"
    MESSAGE_SENT = "messageSent"
    ERROR = "error"


class Frame(BaseModel):
    """Envelope of a realtime frame."""
    event: str = Field(..., min_length=1)
    data: Dict[str, Any] = Field(default_factory=dict)


def build_frame(event: ServerEvent, data: Dict[str, Any]) -> Dict[str, Any]:
    return {"event": event.value, "data": data}


class SendMessagePayload(CamelModel):
    content: Optional[str] = None
    reply_to: Optional[str] = Field(None, alias="replyTo")


class EditMessagePayload(CamelModel):
    message_id: str = Field(..., alias="messageId", min_length=1)
    content: Optional[str] = None


class DeleteMessagePayload(CamelModel):
    message_id: str = Field(..., alias="messageId", min_length=1)


class AddReactionPayload(CamelModel):
    message_id: str = Field(..., alias="messageId", min_length=1)
    emoji: Optional[str] = None


class TypingPayload(CamelModel):
    is_typing: bool = Field(default=False, alias="isTyping")


class TypingNotice(CamelModel):
    user_id: str = Field(..., alias="userId")
    user_name: str = Field(..., alias="userName")
    is_typing: bool = Field(..., alias="isTyping")


class MessageDeletedNotice(CamelModel):
    message_id: str = Field(..., alias="messageId")


class ErrorNotice(CamelModel):
    event: Optional[str] = None
    status: int
    detail: Any
