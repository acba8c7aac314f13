# zenwhisper/services/session_manager.py

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict

from pydantic import ValidationError

from zenwhisper.models.models import ChatMessage, RoomPresenceEvent
from zenwhisper.services.broadcaster import Broadcaster
from zenwhisper.services.connection_manager import ConnectionRegistry
from zenwhisper.services.presence import PresenceNotifier
from zenwhisper.services.room_manager import RoomMembershipTable

logger = logging.getLogger(__name__)

# ============================================================================
# SESSION LIFECYCLE MANAGER
# ============================================================================

class SessionManager:
    """
    Drives one connection through connect -> join/send/leave -> disconnect.

    Inbound events are looked up in a fixed handler table and validated
    against their pydantic schema before anything shared is touched.
    Unknown events and payloads that fail validation are logged and
    dropped; nothing is sent back to the client.

    Lifecycle:
    ==========
    1. ``connect`` accepts the socket and registers it (state: Connected)
    2. ``join_room`` adds the connection to a room and announces it to the
       room, joiner included (state: InRoom)
    3. ``send_message`` fans the payload out to the room, sender included
    4. ``leave_room`` removes the membership and, when ``notify_on_leave``
       is set, tells the remaining members
    5. ``disconnect`` purges every membership, announces the departures,
       then unregisters (state: Disconnected, terminal)
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        rooms: RoomMembershipTable,
        broadcaster: Broadcaster,
        presence: PresenceNotifier,
        notify_on_leave: bool = True,
        anonymous_name: str = "Anonymous",
    ) -> None:
        self.registry = registry
        self.rooms = rooms
        self.broadcaster = broadcaster
        self.presence = presence
        self.notify_on_leave = notify_on_leave
        self.anonymous_name = anonymous_name

        self._handlers: Dict[str, Callable[[str, Any], Awaitable[None]]] = {
            "join_room": self.join_room,
            "send_message": self.send_message,
            "leave_room": self.leave_room,
        }

    async def connect(self, websocket: Any, user_id: str = "anonymous") -> str:
        """
        Accept a new WebSocket connection and register it.

        Note:
            The connection is not joined to any room. Clients must send
            ``join_room`` for each room they want.
        """
        await websocket.accept()
        return self.registry.register(websocket, user_id)

    async def dispatch(self, connection_id: str, event: Any, data: Any) -> bool:
        """
        Route one inbound event to its handler.

        Returns:
            True if the event was handled, False if it was dropped
        """
        if not self.registry.exists(connection_id):
            logger.debug("Dropped %s for closed connection %s", event, connection_id)
            return False

        handler = self._handlers.get(event) if isinstance(event, str) else None
        if handler is None:
            logger.warning("Dropped unknown event %r from %s", event, connection_id)
            return False

        try:
            await handler(connection_id, data)
        except ValidationError as e:
            logger.warning("Dropped malformed %s from %s: %d error(s)", event, connection_id, e.error_count())
            return False
        return True

    async def join_room(self, connection_id: str, data: Any) -> None:
        payload = RoomPresenceEvent.from_payload(data)
        username = (payload.username or "").strip() or self.anonymous_name

        if not self.rooms.join(connection_id, payload.room_id, username):
            return  # already a member

        # Membership is in place, so the joiner sees its own notification
        await self.presence.notify_join(payload.room_id, username)

    async def send_message(self, connection_id: str, data: Any) -> None:
        message = ChatMessage.model_validate(data)
        await self.broadcaster.route(message)

    async def leave_room(self, connection_id: str, data: Any) -> None:
        payload = RoomPresenceEvent.from_payload(data)
        recorded_name = self.rooms.leave(connection_id, payload.room_id)
        if recorded_name is None:
            return  # was not a member

        if self.notify_on_leave:
            username = (payload.username or "").strip() or recorded_name
            await self.presence.notify_leave(payload.room_id, username)

    async def disconnect(self, connection_id: str) -> None:
        """
        Tear down a connection. Safe to call more than once.

        Memberships are purged before the registry entry is removed, and
        leave notifications go out only to the members that remain.
        """
        if not self.registry.exists(connection_id):
            return

        left = self.rooms.purge_connection(connection_id)
        self.registry.unregister(connection_id)

        if self.notify_on_leave:
            for room_id, username in left.items():
                await self.presence.notify_leave(room_id, username)
