"""
Chat message document model
"""

from datetime import datetime, timedelta
from typing import List, Optional
from uuid import uuid4

from beanie import Document, Indexed
from pydantic import BaseModel, Field
from pymongo import ASCENDING, DESCENDING, IndexModel

from ..core.constants import EDIT_WINDOW, MESSAGE_TTL_SECONDS
from .user import UserRole


class Reaction(BaseModel):
    """A single (user, emoji) reaction on a message."""
    user_id: str = Field(..., description="Reacting user ID")
    emoji: str = Field(..., description="Emoji string")


class ChatMessage(Document):
    """Chat message document model"""

    id: str = Field(default_factory=lambda: str(uuid4()), alias="_id")
    content: str = Field(..., description="Trimmed message content")

    # Author snapshot taken at send time, never re-synced with the user record
    user_id: Indexed(str) = Field(..., description="Author user ID")
    user_name: str = Field(..., description="Author display name at send time")
    user_role: UserRole = Field(default=UserRole.USER, description="Author role at send time")

    created_at: datetime = Field(default_factory=datetime.utcnow, description="Creation timestamp")
    updated_at: datetime = Field(default_factory=datetime.utcnow, description="Last update timestamp")
    is_edited: bool = Field(default=False, description="Whether the content was edited")
    edited_at: Optional[datetime] = Field(None, description="Last edit timestamp")

    reactions: List[Reaction] = Field(default_factory=list, description="Reactions in insertion order")
    reply_to: Optional[str] = Field(None, description="Parent message ID (may dangle after expiry)")

    class Settings:
        name = "messages"
        indexes = [
            # MongoDB's TTL monitor removes messages 24h after creation
            IndexModel(
                [("created_at", ASCENDING)],
                name="created_at_ttl",
                expireAfterSeconds=MESSAGE_TTL_SECONDS,
            ),
            IndexModel([("created_at", DESCENDING)], name="created_at_desc"),
        ]

    def __str__(self) -> str:
        return f"ChatMessage(id={self.id}, user_id={self.user_id})"

    def within_edit_window(self, now: Optional[datetime] = None, window: timedelta = EDIT_WINDOW) -> bool:
        return (now or datetime.utcnow()) - self.created_at <= window

    def is_authored_by(self, user_id: str) -> bool:
        return self.user_id == user_id

    def apply_edit(self, content: str, now: Optional[datetime] = None) -> None:
        now = now or datetime.utcnow()
        self.content = content
        self.is_edited = True
        self.edited_at = now
        self.updated_at = now

    def toggle_reaction(self, user_id: str, emoji: str, now: Optional[datetime] = None) -> bool:
        """
        Add the (user, emoji) reaction, or remove it if already present.

        Returns:
            True if the reaction was added, False if it was removed.
        """
        remaining = [
            reaction for reaction in self.reactions
            if not (reaction.user_id == user_id and reaction.emoji == emoji)
        ]
        added = len(remaining) == len(self.reactions)
        if added:
            remaining.append(Reaction(user_id=user_id, emoji=emoji))
        self.reactions = remaining
        self.updated_at = now or datetime.utcnow()
        return added
