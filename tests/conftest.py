"""
tests.conftest
~~~~~~~~~~~~~~

Shared fixtures: an in-memory socket double and a fully wired chat engine
with a frozen clock, so presence timestamps are deterministic.
"""
from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Any

import pytest

os.environ.setdefault("SECRET_KEY", "test-secret")

from zenwhisper.services.broadcaster import Broadcaster
from zenwhisper.services.connection_manager import ConnectionRegistry
from zenwhisper.services.presence import PresenceNotifier
from zenwhisper.services.room_manager import RoomMembershipTable
from zenwhisper.services.session_manager import SessionManager

# 2024-01-01 15:05 UTC is 09:05 PM in Dhaka (UTC+6)
FROZEN_NOW = datetime(2024, 1, 1, 15, 5, tzinfo=timezone.utc)
FROZEN_TIME = "01/01/2024, 09:05 PM"


class FakeSocket:
    """Records every frame sent to it; can be told to fail on send."""

    def __init__(self, fail: bool = False) -> None:
        self.accepted = False
        self.fail = fail
        self.sent: list[dict[str, Any]] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, data: dict[str, Any]) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)

    def events(self, name: str | None = None) -> list[dict[str, Any]]:
        return [f["data"] for f in self.sent if name is None or f["event"] == name]


class Engine:
    """Bundle of wired services, built the same way the app builds them."""

    def __init__(self, notify_on_leave: bool = True, send_timeout: float = 1.0) -> None:
        self.registry = ConnectionRegistry()
        self.rooms = RoomMembershipTable()
        self.broadcaster = Broadcaster(self.registry, self.rooms, send_timeout=send_timeout)
        self.presence = PresenceNotifier(self.broadcaster, clock=lambda: FROZEN_NOW)
        self.sessions = SessionManager(
            self.registry,
            self.rooms,
            self.broadcaster,
            self.presence,
            notify_on_leave=notify_on_leave,
        )

    async def connect(self, socket: FakeSocket | None = None) -> tuple[str, FakeSocket]:
        socket = socket or FakeSocket()
        connection_id = await self.sessions.connect(socket)
        return connection_id, socket


@pytest.fixture()
def engine() -> Engine:
    return Engine()


@pytest.fixture()
def quiet_engine() -> Engine:
    """Engine with leave notifications turned off."""
    return Engine(notify_on_leave=False)
