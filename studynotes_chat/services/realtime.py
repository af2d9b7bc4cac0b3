"""
Realtime broadcast hub.

Owns the ``PresenceRegistry`` and every live WebSocket. Connections are
authenticated through the shared ``IdentityResolver`` before they are
registered; events are fanned out concurrently with ``asyncio.gather`` and a
connection whose send fails is dropped from presence like any other
disconnect.
"""

import asyncio
from typing import Any, Dict, List, Optional

import structlog
from fastapi import WebSocket
from starlette.websockets import WebSocketState

from ..core.auth import Identity, IdentityResolver
from ..core.constants import WS_CLOSE_SUPERSEDED, WS_CLOSE_UNREACHABLE
from ..core.telemetry import record_realtime_event, set_active_connections
from ..schemas.chat import OnlineUsersResponse
from ..schemas.realtime import ServerEvent, build_frame
from .presence import PresenceEntry, PresenceRegistry

logger = structlog.get_logger(__name__)


class RealtimeHub:
    """Presence tracking and event fan-out for the chat room."""

    def __init__(self, identity_resolver: IdentityResolver, registry: Optional[PresenceRegistry] = None):
        self.identity_resolver = identity_resolver
        self.registry = registry or PresenceRegistry()

    async def authenticate(self, token: Optional[str]) -> Identity:
        """Resolve the handshake credential. Raises AuthenticationError."""
        return await self.identity_resolver.resolve(token)

    def online_users(self) -> OnlineUsersResponse:
        return self.registry.snapshot()

    async def connect(self, websocket: WebSocket, identity: Identity) -> None:
        """Accept an authenticated connection and announce the new presence."""
        await websocket.accept()

        previous = self.registry.register(
            PresenceEntry(
                user_id=identity.id,
                name=identity.name,
                role=identity.role,
                connection=websocket,
            )
        )
        snapshot = self.registry.snapshot()
        set_active_connections(len(self.registry))

        logger.info("Realtime client connected", user_id=identity.id, online=snapshot.count)

        if previous is not None and previous.connection is not websocket:
            logger.info("Closing superseded connection", user_id=identity.id)
            await self._close_quietly(previous.connection, WS_CLOSE_SUPERSEDED, "Superseded by a newer connection")

        await self._broadcast_frame(build_frame(ServerEvent.ONLINE_USERS_UPDATE, snapshot.to_wire()))

    async def disconnect(self, identity: Identity, websocket: WebSocket) -> None:
        """Drop the connection from presence and re-announce if it was current."""
        removed = self.registry.unregister(identity.id, websocket)
        if removed is None:
            return

        snapshot = self.registry.snapshot()
        set_active_connections(len(self.registry))
        logger.info("Realtime client disconnected", user_id=identity.id, online=snapshot.count)

        await self._broadcast_frame(build_frame(ServerEvent.ONLINE_USERS_UPDATE, snapshot.to_wire()))

    async def publish(
        self,
        event: ServerEvent,
        data: Dict[str, Any],
        exclude_user_id: Optional[str] = None,
    ) -> None:
        """Broadcast ``event`` to every connection, optionally skipping one identity."""
        await self._broadcast_frame(build_frame(event, data), exclude_user_id=exclude_user_id)

    async def send_to(self, websocket: WebSocket, event: ServerEvent, data: Dict[str, Any]) -> bool:
        """Send a frame to a single connection."""
        return await self._safe_send(websocket, build_frame(event, data))

    async def _broadcast_frame(self, frame: Dict[str, Any], exclude_user_id: Optional[str] = None) -> None:
        targets = self.registry.connections(exclude_user_id=exclude_user_id)
        record_realtime_event(frame["event"])
        if not targets:
            return

        results = await asyncio.gather(
            *[self._safe_send(entry.connection, frame) for entry in targets],
            return_exceptions=True,
        )

        failed = [entry for entry, ok in zip(targets, results) if ok is not True]
        if failed:
            await self._drop_failed(failed)

    async def _drop_failed(self, failed: List[PresenceEntry]) -> None:
        removed = [
            entry for entry in failed
            if self.registry.unregister(entry.user_id, entry.connection) is not None
        ]
        if not removed:
            return

        for entry in removed:
            await self._close_quietly(entry.connection, WS_CLOSE_UNREACHABLE, "Connection unreachable")

        snapshot = self.registry.snapshot()
        set_active_connections(len(self.registry))
        logger.warning(
            "Dropped unreachable realtime connections",
            user_ids=[entry.user_id for entry in removed],
            online=snapshot.count,
        )
        await self._broadcast_frame(build_frame(ServerEvent.ONLINE_USERS_UPDATE, snapshot.to_wire()))

    @staticmethod
    async def _safe_send(websocket: WebSocket, frame: Dict[str, Any]) -> bool:
        try:
            if websocket.application_state != WebSocketState.CONNECTED:
                return False
            await websocket.send_json(frame)
            return True
        except Exception as exc:
            logger.debug("Realtime send failed", frame_event=frame.get("event"), error=str(exc))
            return False

    @staticmethod
    async def _close_quietly(websocket: WebSocket, code: int, reason: str) -> None:
        try:
            if websocket.application_state == WebSocketState.CONNECTED:
                await websocket.close(code=code, reason=reason)
        except Exception as exc:
            logger.debug("Closing websocket failed", error=str(exc))
