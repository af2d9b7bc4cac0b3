"""
Chat service: validation, ownership policy and lifecycle of chat messages.

Every successful mutation publishes exactly one realtime event through the
configured ``EventPublisher`` so connected peers can update their view
without re-fetching.
"""

from typing import Any, Dict, List, Optional, Protocol

import structlog

from ..core.auth import Identity
from ..core.constants import EDIT_WINDOW, MAX_MESSAGE_LENGTH
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.telemetry import track_chat_operation
from ..models.message import ChatMessage
from ..schemas.chat import MessageListResponse, MessageSchema
from ..schemas.realtime import MessageDeletedNotice, ServerEvent
from .message_store import Clock, MessageStore
from .pagination import PageRequest, build_pagination

logger = structlog.get_logger(__name__)


class EventPublisher(Protocol):
    """Sink for chat events, implemented by the realtime hub."""

    async def publish(
        self,
        event: ServerEvent,
        data: Dict[str, Any],
        exclude_user_id: Optional[str] = None,
    ) -> None:
        ...


class NullPublisher:
    """Publisher used when no realtime layer is attached."""

    async def publish(self, event: ServerEvent, data: Dict[str, Any], exclude_user_id: Optional[str] = None) -> None:
        return None


def validate_content(content: Any) -> str:
    """Return the trimmed content, or raise ValidationError."""
    if not isinstance(content, str) or not content.strip():
        raise ValidationError("Message content is required")
    text = content.strip()
    if len(text) > MAX_MESSAGE_LENGTH:
        raise ValidationError(f"Message too long (max {MAX_MESSAGE_LENGTH} characters)")
    return text


def validate_emoji(emoji: Any) -> str:
    if not isinstance(emoji, str) or not emoji.strip():
        raise ValidationError("Emoji is required")
    return emoji.strip()


class ChatService:
    """Message lifecycle operations."""

    def __init__(
        self,
        store: MessageStore,
        publisher: Optional[EventPublisher] = None,
        default_page_size: int = 50,
        clock: Optional[Clock] = None,
    ):
        self.store = store
        self.publisher = publisher or NullPublisher()
        self.default_page_size = default_page_size
        self.clock = clock or store.clock

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_messages(self, page: Any = None, page_size: Any = None) -> MessageListResponse:
        """
        One page of the live 24-hour window.

        Messages are read newest first (so page 1 holds the latest ones) and
        returned oldest first for display.
        """
        request = PageRequest.from_params(page, page_size, self.default_page_size)

        newest_first = await self.store.find_recent(skip=request.skip, limit=request.page_size)
        total = await self.store.count_recent()

        messages = list(reversed(newest_first))
        parents = await self._load_parents(messages)

        logger.debug(
            "Listed messages",
            page=request.page,
            page_size=request.page_size,
            returned=len(messages),
            total=total,
        )

        return MessageListResponse(
            messages=[MessageSchema.from_document(m, parents.get(m.reply_to)) for m in messages],
            pagination=build_pagination(request, total),
        )

    async def get_message(self, message_id: str) -> MessageSchema:
        message = await self._require_message(message_id)
        return await self._to_schema(message)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def send_message(self, author: Identity, content: Any, reply_to: Optional[str] = None) -> MessageSchema:
        async with track_chat_operation("send"):
            text = validate_content(content)

            parent = None
            if reply_to:
                parent = await self.store.get(reply_to)
                if parent is None:
                    raise NotFoundError("Reply-to message not found")

            now = self.clock()
            message = ChatMessage(
                content=text,
                user_id=author.id,
                user_name=author.name,
                user_role=author.role,
                reply_to=parent.id if parent else None,
                created_at=now,
                updated_at=now,
            )
            await self.store.insert(message)

            payload = MessageSchema.from_document(message, parent)
            logger.info("Message sent", message_id=message.id, user_id=author.id, reply_to=message.reply_to)

            await self.publisher.publish(ServerEvent.NEW_MESSAGE, payload.to_wire(), exclude_user_id=author.id)
            return payload

    async def edit_message(self, requester: Identity, message_id: str, content: Any) -> MessageSchema:
        async with track_chat_operation("edit"):
            message = await self._require_message(message_id)
            self._require_owner_or_admin(message, requester, "edit")

            now = self.clock()
            if not requester.is_admin and not message.within_edit_window(now, EDIT_WINDOW):
                raise AuthorizationError(
                    f"Cannot edit messages older than {int(EDIT_WINDOW.total_seconds() // 60)} minutes"
                )

            text = validate_content(content)
            message.apply_edit(text, now)
            await self.store.save(message)

            payload = await self._to_schema(message)
            logger.info("Message edited", message_id=message.id, user_id=requester.id)

            await self.publisher.publish(ServerEvent.MESSAGE_EDITED, payload.to_wire())
            return payload

    async def delete_message(self, requester: Identity, message_id: str) -> str:
        async with track_chat_operation("delete"):
            message = await self._require_message(message_id)
            self._require_owner_or_admin(message, requester, "delete")

            await self.store.delete(message.id)
            logger.info("Message deleted", message_id=message.id, user_id=requester.id)

            notice = MessageDeletedNotice(message_id=message.id)
            await self.publisher.publish(ServerEvent.MESSAGE_DELETED, notice.to_wire())
            return message.id

    async def toggle_reaction(self, requester: Identity, message_id: str, emoji: Any) -> MessageSchema:
        async with track_chat_operation("react"):
            emoji = validate_emoji(emoji)
            message = await self._require_message(message_id)

            added = message.toggle_reaction(requester.id, emoji, self.clock())
            await self.store.save(message)

            payload = await self._to_schema(message)
            logger.info(
                "Reaction toggled",
                message_id=message.id,
                user_id=requester.id,
                emoji=emoji,
                added=added,
            )

            await self.publisher.publish(ServerEvent.REACTION_ADDED, payload.to_wire())
            return payload

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _require_message(self, message_id: Optional[str]) -> ChatMessage:
        message = await self.store.get(message_id) if message_id else None
        if message is None:
            raise NotFoundError("Message not found")
        return message

    @staticmethod
    def _require_owner_or_admin(message: ChatMessage, requester: Identity, action: str) -> None:
        if not message.is_authored_by(requester.id) and not requester.is_admin:
            raise AuthorizationError(f"Not authorized to {action} this message")

    async def _to_schema(self, message: ChatMessage) -> MessageSchema:
        parent = await self.store.get(message.reply_to) if message.reply_to else None
        return MessageSchema.from_document(message, parent)

    async def _load_parents(self, messages: List[ChatMessage]) -> Dict[str, ChatMessage]:
        reply_ids = [m.reply_to for m in messages if m.reply_to]
        if not reply_ids:
            return {}
        parents = await self.store.get_many(reply_ids)
        return {parent.id: parent for parent in parents}
