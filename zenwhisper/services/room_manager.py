# zenwhisper/services/room_manager.py

from __future__ import annotations

import logging
import threading
from typing import Dict, FrozenSet, Optional, Set

logger = logging.getLogger(__name__)

# ============================================================================
# ROOM MEMBERSHIP TABLE
# ============================================================================

class RoomMembershipTable:
    """
    Many-to-many index between rooms and connection ids.

    Rooms are ephemeral: a room exists only while it has at least one
    member. It appears on the first join and its entry is deleted as soon
    as the last member leaves, so a later join to the same id is
    indistinguishable from a brand new room.

    Data Structures:
        rooms: Maps room_id -> Set of member connection ids
               Example: {"lobby": {"9f1c...", "a03b..."}}

        connection_rooms: Maps connection_id -> {room_id: display_name}
                          Example: {"9f1c...": {"lobby": "alice"}}

    The display name is the username supplied on join; it is kept so that a
    leave notification can still name the user when the transport drops the
    connection without an explicit ``leave_room``.

    Both maps are mutated together under one lock, which makes ``join``,
    ``leave`` and ``purge_connection`` atomic with respect to each other and
    to the ``members_of`` snapshot used for routing.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.rooms: Dict[str, Set[str]] = {}
        self.connection_rooms: Dict[str, Dict[str, str]] = {}

    def join(self, connection_id: str, room_id: str, display_name: str = "") -> bool:
        """
        Add a connection to a room.

        Returns:
            True if the connection was not a member before, False if this
            was a repeated join (which changes nothing).
        """
        with self._lock:
            members = self.rooms.setdefault(room_id, set())
            if connection_id in members:
                return False

            members.add(connection_id)
            self.connection_rooms.setdefault(connection_id, {})[room_id] = display_name
            member_count = len(members)

        logger.info("→ %s joined '%s' (%d members)", display_name or connection_id, room_id, member_count)
        return True

    def leave(self, connection_id: str, room_id: str) -> Optional[str]:
        """
        Remove a connection from a room. Never fails.

        Returns:
            The display name recorded on join if the connection was a
            member, None if it was not (nothing changed).
        """
        with self._lock:
            joined = self.connection_rooms.get(connection_id)
            if joined is None or room_id not in joined:
                return None

            display_name = joined.pop(room_id)
            if not joined:
                del self.connection_rooms[connection_id]
            member_count = self._discard_member(room_id, connection_id)

        logger.info("← %s left '%s' (%d members)", display_name or connection_id, room_id, member_count)
        return display_name

    def purge_connection(self, connection_id: str) -> Dict[str, str]:
        """
        Remove a connection from every room it belongs to in one step.

        Returns:
            Maps room_id -> display name for each membership removed
        """
        with self._lock:
            joined = self.connection_rooms.pop(connection_id, {})
            for room_id in joined:
                self._discard_member(room_id, connection_id)

        if joined:
            logger.info("Purged %s from %d room(s)", connection_id, len(joined))
        return joined

    def members_of(self, room_id: str) -> FrozenSet[str]:
        """Point-in-time snapshot of a room's members (empty if unknown)."""
        with self._lock:
            return frozenset(self.rooms.get(room_id, ()))

    def rooms_of(self, connection_id: str) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self.connection_rooms.get(connection_id, ()))

    def active_room_count(self) -> int:
        with self._lock:
            return len(self.rooms)

    def _discard_member(self, room_id: str, connection_id: str) -> int:
        # Caller holds self._lock
        members = self.rooms.get(room_id)
        if members is None:
            return 0
        members.discard(connection_id)
        if not members:
            del self.rooms[room_id]
            return 0
        return len(members)
