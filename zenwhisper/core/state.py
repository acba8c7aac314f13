# zenwhisper/core/state.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from zenwhisper.core.config import Settings
from zenwhisper.services.broadcaster import Broadcaster
from zenwhisper.services.connection_manager import ConnectionRegistry
from zenwhisper.services.presence import PresenceNotifier
from zenwhisper.services.room_manager import RoomMembershipTable
from zenwhisper.services.session_manager import SessionManager
from zenwhisper.services.user_store import UserStore


@dataclass
class AppState:
    """Shared services for one app instance; attached to ``app.state.chat``."""
    registry: ConnectionRegistry
    rooms: RoomMembershipTable
    broadcaster: Broadcaster
    presence: PresenceNotifier
    sessions: SessionManager
    users: UserStore
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def build_state(settings: Settings) -> AppState:
    registry = ConnectionRegistry()
    rooms = RoomMembershipTable()
    broadcaster = Broadcaster(registry, rooms, send_timeout=settings.SEND_TIMEOUT_SECONDS)
    presence = PresenceNotifier(broadcaster, tz_name=settings.PRESENCE_TIMEZONE)
    sessions = SessionManager(
        registry,
        rooms,
        broadcaster,
        presence,
        notify_on_leave=settings.NOTIFY_ON_LEAVE,
        anonymous_name=settings.ANONYMOUS_NAME,
    )
    return AppState(
        registry=registry,
        rooms=rooms,
        broadcaster=broadcaster,
        presence=presence,
        sessions=sessions,
        users=UserStore(),
    )
