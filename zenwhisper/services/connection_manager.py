# zenwhisper/services/connection_manager.py

from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# ============================================================================
# CONNECTION
# ============================================================================

class Connection:
    """
    One live client session.

    Holds the outbound channel (the accepted WebSocket, or anything exposing
    an awaitable ``send_json``) and a per-connection write lock so frames
    from concurrent broadcasts never interleave on the same socket.

    Room membership is not stored here: ``RoomMembershipTable`` keeps the
    connection's joined-set keyed by ``id`` so that both sides of the
    many-to-many index change under one lock.
    """

    def __init__(self, connection_id: str, websocket: Any, user_id: str = "anonymous") -> None:
        self.id = connection_id
        self.websocket = websocket
        self.user_id = user_id
        self._send_lock = asyncio.Lock()

    async def send(self, event: str, data: dict) -> None:
        async with self._send_lock:
            await self.websocket.send_json({"event": event, "data": data})

    def __repr__(self) -> str:
        return f"Connection(id={self.id!r}, user_id={self.user_id!r})"


# ============================================================================
# CONNECTION REGISTRY
# ============================================================================

class ConnectionRegistry:
    """
    Tracks every live connection by its opaque identifier.

    This is the single source of truth for "is this connection still
    alive": once ``unregister`` returns, ``exists`` is False and the
    broadcaster will no longer deliver to it.

    Data Structures:
        connections: Maps connection_id -> Connection
                     Example: {"9f1c...": Connection(id="9f1c...", user_id="alice")}

    All methods are synchronous and guarded by a ``threading.Lock`` that is
    never held across an ``await``.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.connections: Dict[str, Connection] = {}

    def register(self, websocket: Any, user_id: str = "anonymous") -> str:
        """
        Allocate a fresh identifier for an accepted websocket.

        Args:
            websocket: The outbound channel for this connection
            user_id: Label used in logs only (not verified)

        Returns:
            The new connection id. Never fails.
        """
        connection_id = uuid.uuid4().hex
        connection = Connection(connection_id, websocket, user_id)
        with self._lock:
            self.connections[connection_id] = connection
            total = len(self.connections)

        logger.info("✓ Connection %s (%s) registered. Total: %d", connection_id, user_id, total)
        return connection_id

    def unregister(self, connection_id: str) -> bool:
        """
        Remove a connection. Idempotent: unknown ids are ignored.

        Returns:
            True if an entry was removed, False if it was already gone
        """
        with self._lock:
            connection = self.connections.pop(connection_id, None)
            total = len(self.connections)

        if connection is None:
            return False

        logger.info("✗ Connection %s (%s) unregistered. Total: %d", connection_id, connection.user_id, total)
        return True

    def exists(self, connection_id: str) -> bool:
        with self._lock:
            return connection_id in self.connections

    def get(self, connection_id: str) -> Optional[Connection]:
        with self._lock:
            return self.connections.get(connection_id)

    def get_many(self, connection_ids) -> List[Connection]:
        """Resolve ids to live connections, silently skipping dead ones."""
        with self._lock:
            return [
                self.connections[cid]
                for cid in connection_ids
                if cid in self.connections
            ]

    def __len__(self) -> int:
        with self._lock:
            return len(self.connections)
