"""
Chat domain services
"""

from .chat_service import ChatService, EventPublisher, NullPublisher
from .message_store import MessageStore
from .presence import PresenceEntry, PresenceRegistry
from .realtime import RealtimeHub
from .realtime_events import RealtimeEventDispatcher

__all__ = [
    "ChatService",
    "EventPublisher",
    "MessageStore",
    "NullPublisher",
    "PresenceEntry",
    "PresenceRegistry",
    "RealtimeEventDispatcher",
    "RealtimeHub",
]
