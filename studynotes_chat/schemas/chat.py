"""
Chat API schemas
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.message import ChatMessage as ChatMessageModel
from ..models.user import UserRole


class CamelModel(BaseModel):
    """Base schema emitting camelCase keys to clients."""
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        """JSON-ready dict with camelCase keys, as sent over the realtime channel."""
        return self.model_dump(mode="json", by_alias=True)


class Author(CamelModel):
    """Author snapshot embedded in a message."""
    id: str = Field(..., description="Author user ID")
    name: str = Field(..., description="Author display name at send time")
    role: UserRole = Field(..., description="Author role at send time")


class ReactionSchema(CamelModel):
    """Reaction schema"""
    user: str = Field(..., description="Reacting user ID")
    emoji: str = Field(..., description="Emoji string")


class ReplyPreview(CamelModel):
    """Excerpt of the message being replied to."""
    id: str
    content: str
    user_name: str = Field(..., alias="userName")


class MessageSchema(CamelModel):
    """Chat message as returned by the API and the realtime channel."""

    id: str = Field(..., description="Message ID")
    content: str = Field(..., description="Message content")
    user: Author = Field(..., description="Author snapshot")
    user_name: str = Field(..., alias="userName")
    user_role: UserRole = Field(..., alias="userRole")
    is_edited: bool = Field(default=False, alias="isEdited")
    edited_at: Optional[datetime] = Field(None, alias="editedAt")
    reactions: List[ReactionSchema] = Field(default_factory=list)
    reply_to: Optional[str] = Field(None, alias="replyTo", description="Parent message ID")
    reply_preview: Optional[ReplyPreview] = Field(
        None,
        alias="replyPreview",
        description="Parent excerpt, null when the parent no longer exists"
    )
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    @classmethod
    def from_document(
        cls,
        message: ChatMessageModel,
        parent: Optional[ChatMessageModel] = None,
    ) -> "MessageSchema":
        reply_preview = None
        if parent is not None:
            reply_preview = ReplyPreview(id=parent.id, content=parent.content, user_name=parent.user_name)

        return cls(
            id=message.id,
            content=message.content,
            user=Author(id=message.user_id, name=message.user_name, role=message.user_role),
            user_name=message.user_name,
            user_role=message.user_role,
            is_edited=message.is_edited,
            edited_at=message.edited_at,
            reactions=[ReactionSchema(user=r.user_id, emoji=r.emoji) for r in message.reactions],
            reply_to=message.reply_to,
            reply_preview=reply_preview,
            created_at=message.created_at,
            updated_at=message.updated_at,
        )


class PaginationInfo(CamelModel):
    """Pagination information"""
    current_page: int = Field(..., ge=1, alias="currentPage")
    total_pages: int = Field(..., ge=0, alias="totalPages")
    total_messages: int = Field(..., ge=0, alias="totalMessages")
    has_next: bool = Field(..., alias="hasNext")
    has_prev: bool = Field(..., alias="hasPrev")


class MessageListResponse(CamelModel):
    """One page of the live 24-hour window, oldest first."""
    messages: List[MessageSchema]
    pagination: PaginationInfo


class SendMessageRequest(CamelModel):
    """Request to send a new message"""
    content: Optional[str] = Field(None, description="Message content")
    reply_to: Optional[str] = Field(None, alias="replyTo", description="ID of the message being replied to")


class EditMessageRequest(CamelModel):
    """Request to edit a message"""
    content: Optional[str] = Field(None, description="New message content")


class ReactionRequest(CamelModel):
    """Request to toggle a reaction"""
    emoji: Optional[str] = Field(None, description="Emoji to toggle")


class DeleteMessageResponse(CamelModel):
    message: str = "Message deleted successfully"
    id: str


class OnlineUser(CamelModel):
    id: str
    name: str
    role: UserRole


class OnlineUsersResponse(CamelModel):
    """Presence snapshot"""
    count: int = Field(..., ge=0)
    users: List[OnlineUser] = Field(default_factory=list)
