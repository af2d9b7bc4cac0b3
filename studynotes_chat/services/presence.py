"""
In-memory presence registry.

Maps each connected identity to its live connection handle. The registry
holds exactly one entry per identity: registering an identity that is
already present replaces the previous entry (last connection wins).

All methods are synchronous so a mutation and the snapshot taken right after
it happen in one step of the event loop. The registry is owned by
``RealtimeHub`` and is not thread-safe.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from ..models.user import UserRole
from ..schemas.chat import OnlineUser, OnlineUsersResponse


@dataclass
class PresenceEntry:
    """A connected identity and its connection handle."""
    user_id: str
    name: str
    role: UserRole
    connection: Any
    connected_at: datetime = field(default_factory=datetime.utcnow)

    def to_online_user(self) -> OnlineUser:
        return OnlineUser(id=self.user_id, name=self.name, role=self.role)


class PresenceRegistry:
    """Single-writer registry of connected identities."""

    def __init__(self):
        self._entries: Dict[str, PresenceEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._entries

    def __iter__(self) -> Iterator[PresenceEntry]:
        return iter(list(self._entries.values()))

    def get(self, user_id: str) -> Optional[PresenceEntry]:
        return self._entries.get(user_id)

    def register(self, entry: PresenceEntry) -> Optional[PresenceEntry]:
        """
        Add ``entry``, replacing any entry of the same identity.

        Returns:
            The replaced entry, or None.
        """
        previous = self._entries.pop(entry.user_id, None)
        self._entries[entry.user_id] = entry
        return previous

    def unregister(self, user_id: str, connection: Any) -> Optional[PresenceEntry]:
        """
        Remove the identity's entry if it is still bound to ``connection``.

        A connection superseded by a newer one for the same identity does not
        remove the newer entry when it goes away.
        """
        entry = self._entries.get(user_id)
        if entry is None or entry.connection is not connection:
            return None
        return self._entries.pop(user_id)

    def connections(self, exclude_user_id: Optional[str] = None) -> List[PresenceEntry]:
        return [
            entry for entry in self._entries.values()
            if entry.user_id != exclude_user_id
        ]

    def snapshot(self) -> OnlineUsersResponse:
        users = [entry.to_online_user() for entry in self._entries.values()]
        return OnlineUsersResponse(count=len(users), users=users)
