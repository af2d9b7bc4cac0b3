"""
Message persistence over the Beanie ``ChatMessage`` document.

Physical expiry is handled by the MongoDB TTL index declared on the model
(and by ``MessageExpiryWorker`` calling ``purge_expired``). Every read here
also applies the live-window filter so a message past its TTL is never
returned, even before the TTL monitor has removed it.
"""

from datetime import datetime
from typing import Callable, List, Optional

import structlog
from beanie.operators import In

from ..core.constants import MESSAGE_TTL
from ..models.message import ChatMessage

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


class MessageStore:
    """Store operations for chat messages."""

    def __init__(self, clock: Clock = datetime.utcnow):
        self.clock = clock

    def window_start(self) -> datetime:
        """Oldest ``created_at`` still inside the live window."""
        return self.clock() - MESSAGE_TTL

    async def insert(self, message: ChatMessage) -> ChatMessage:
        await message.insert()
        return message

    async def get(self, message_id: str) -> Optional[ChatMessage]:
        """Find a live message by ID."""
        if not message_id:
            return None
        message = await ChatMessage.get(message_id)
        if message is None:
            return None
        if message.created_at < self.window_start():
            logger.debug("Ignoring expired message", message_id=message_id)
            return None
        return message

    async def get_many(self, message_ids: List[str]) -> List[ChatMessage]:
        """Find the live messages among ``message_ids``."""
        ids = list({message_id for message_id in message_ids if message_id})
        if not ids:
            return []
        return await ChatMessage.find(
            In(ChatMessage.id, ids),
            ChatMessage.created_at >= self.window_start(),
        ).to_list()

    async def find_recent(self, skip: int, limit: int) -> List[ChatMessage]:
        """Live messages, newest first."""
        return await ChatMessage.find(
            ChatMessage.created_at >= self.window_start()
        ).sort(-ChatMessage.created_at).skip(skip).limit(limit).to_list()

    async def count_recent(self) -> int:
        return await ChatMessage.find(
            ChatMessage.created_at >= self.window_start()
        ).count()

    async def save(self, message: ChatMessage) -> ChatMessage:
        await message.save()
        return message

    async def delete(self, message_id: str) -> bool:
        result = await ChatMessage.find(ChatMessage.id == message_id).delete()
        return bool(result and result.deleted_count)

    async def purge_expired(self) -> int:
        """Delete every message older than the TTL. Returns the number removed."""
        cutoff = self.window_start()
        result = await ChatMessage.find(ChatMessage.created_at < cutoff).delete()
        deleted = result.deleted_count if result else 0
        if deleted:
            logger.info("Purged expired messages", deleted_count=deleted, cutoff=cutoff.isoformat())
        return deleted
