# zenwhisper/services/presence.py

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from zenwhisper.models.models import SystemNotification
from zenwhisper.services.broadcaster import Broadcaster

logger = logging.getLogger(__name__)

JOIN_EVENT = "joining_message"
LEAVE_EVENT = "leave_message"

TIMESTAMP_FORMAT = "%m/%d/%Y, %I:%M %p"  # 10/19/2026, 09:05 PM


def format_timestamp(moment: datetime, tz: ZoneInfo) -> str:
    """Render an aware datetime as a 12-hour local time string in ``tz``."""
    return moment.astimezone(tz).strftime(TIMESTAMP_FORMAT)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PresenceNotifier:
    """
    Builds "System" notifications for joins and leaves and hands them to the
    broadcaster. Usernames are taken verbatim from the client.
    """

    def __init__(
        self,
        broadcaster: Broadcaster,
        tz_name: str = "Asia/Dhaka",
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.broadcaster = broadcaster
        self.tz = ZoneInfo(tz_name)
        self.clock = clock or utc_now

    def build(self, text: str) -> SystemNotification:
        return SystemNotification(message=text, time=format_timestamp(self.clock(), self.tz))

    async def notify_join(self, room_id: str, username: str) -> int:
        notification = self.build(f"{username} has joined the room.")
        return await self.broadcaster.publish(room_id, JOIN_EVENT, notification.to_wire())

    async def notify_leave(self, room_id: str, username: str) -> int:
        notification = self.build(f"{username} has left the room.")
        return await self.broadcaster.publish(room_id, LEAVE_EVENT, notification.to_wire())
