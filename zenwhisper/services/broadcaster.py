# zenwhisper/services/broadcaster.py

from __future__ import annotations

import asyncio
import logging

from zenwhisper.models.models import ChatMessage
from zenwhisper.services.connection_manager import Connection, ConnectionRegistry
from zenwhisper.services.room_manager import RoomMembershipTable

logger = logging.getLogger(__name__)

GROUP_MESSAGE_EVENT = "receive_group_message"

# ============================================================================
# ROOM BROADCASTER
# ============================================================================

class Broadcaster:
    """
    Fans a payload out to every current member of a room.

    Routing takes a membership snapshot under the table lock, then releases
    it before touching any socket. Each member is written to concurrently
    and independently, bounded by ``send_timeout`` seconds, so one slow or
    dead recipient neither blocks the others nor stalls joins and leaves.

    Failed deliveries are logged and dropped. The broadcaster never evicts
    a connection: the transport's receive loop notices a dead socket and
    runs the normal disconnect path.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        rooms: RoomMembershipTable,
        send_timeout: float = 5.0,
    ) -> None:
        self.registry = registry
        self.rooms = rooms
        self.send_timeout = send_timeout

    async def route(self, message: ChatMessage) -> int:
        """
        Deliver a user message to its target room, sender included.

        Args:
            message: Validated ``send_message`` payload

        Returns:
            Number of members the message was delivered to
        """
        return await self.publish(message.room_id, GROUP_MESSAGE_EVENT, message.to_wire())

    async def publish(self, room_id: str, event: str, payload: dict) -> int:
        """
        Send one event frame to every connection in ``room_id``.

        Rooms without members are a no-op.
        """
        member_ids = self.rooms.members_of(room_id)
        if not member_ids:
            logger.debug("[routing] Skipped %s: room=%s has 0 members", event, room_id)
            return 0

        connections = self.registry.get_many(member_ids)
        logger.debug("📨 %s to room %s: %d clients", event, room_id, len(connections))

        results = await asyncio.gather(
            *(self._deliver(connection, event, payload) for connection in connections)
        )
        return sum(results)

    async def _deliver(self, connection: Connection, event: str, payload: dict) -> bool:
        # Skip connections torn down after the snapshot was taken
        if not self.registry.exists(connection.id):
            return False

        try:
            await asyncio.wait_for(connection.send(event, payload), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            logger.warning("Send to %s timed out after %.1fs", connection.id, self.send_timeout)
            return False
        except Exception as e:
            logger.warning("Send to %s failed: %s", connection.id, e)
            return False
        return True
