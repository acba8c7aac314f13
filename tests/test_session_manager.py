"""
tests.test_session_manager
~~~~~~~~~~~~~~~~~~~~~~~~~~

Event dispatch and the connect -> join -> send -> leave/disconnect lifecycle.
"""
from __future__ import annotations

import asyncio

import pytest

from conftest import FROZEN_TIME, Engine


def sent_message(author: str, room: str, text: str) -> dict:
    return {"author": author, "roomId": room, "message": text}


class TestJoin:

    @pytest.mark.asyncio
    async def test_connect_accepts_socket(self, engine: Engine) -> None:
        cid, sock = await engine.connect()

        assert sock.accepted
        assert engine.registry.exists(cid)
        assert engine.rooms.rooms_of(cid) == frozenset()

    @pytest.mark.asyncio
    async def test_joiner_receives_own_notification(self, engine: Engine) -> None:
        cid, sock = await engine.connect()

        assert await engine.sessions.dispatch(cid, "join_room", ["lobby", "alice"])

        assert sock.events("joining_message") == [
            {"author": "System", "message": "alice has joined the room.", "time": FROZEN_TIME}
        ]

    @pytest.mark.asyncio
    async def test_object_payload_and_missing_username(self, engine: Engine) -> None:
        cid, sock = await engine.connect()

        await engine.sessions.dispatch(cid, "join_room", {"roomId": "lobby"})

        assert engine.rooms.members_of("lobby") == {cid}
        assert sock.events("joining_message")[0]["message"] == "Anonymous has joined the room."

    @pytest.mark.asyncio
    async def test_rejoin_is_noop(self, engine: Engine) -> None:
        cid, sock = await engine.connect()
        await engine.sessions.dispatch(cid, "join_room", ["lobby", "alice"])
        await engine.sessions.dispatch(cid, "join_room", ["lobby", "alice"])
        await engine.sessions.dispatch(cid, "send_message", sent_message("alice", "lobby", "once"))

        assert len(sock.events("joining_message")) == 1
        assert sock.events("receive_group_message") == [sent_message("alice", "lobby", "once")]

    @pytest.mark.asyncio
    async def test_concurrent_joins_all_receive_next_message(self, engine: Engine) -> None:
        clients = [await engine.connect() for _ in range(10)]

        await asyncio.gather(*(
            engine.sessions.dispatch(cid, "join_room", ["lobby", f"user{n}"])
            for n, (cid, _) in enumerate(clients)
        ))
        await engine.sessions.dispatch(clients[0][0], "send_message", sent_message("user0", "lobby", "hello all"))

        assert engine.rooms.members_of("lobby") == {cid for cid, _ in clients}
        for _, sock in clients:
            assert sock.events("receive_group_message") == [sent_message("user0", "lobby", "hello all")]


class TestMalformedEvents:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("event,data", [
        ("join_room", []),
        ("join_room", {"username": "alice"}),
        ("join_room", ["", "alice"]),
        ("send_message", {"author": "a", "message": "no room"}),
        ("send_message", {"author": "a", "roomId": "lobby"}),
        ("send_message", None),
        ("leave_room", {"roomId": 42}),
        ("shout", {"roomId": "lobby"}),
        (None, None),
    ])
    async def test_dropped_without_error(self, engine: Engine, event, data) -> None:
        cid, sock = await engine.connect()
        await engine.sessions.dispatch(cid, "join_room", ["lobby", "alice"])
        sock.sent.clear()

        assert await engine.sessions.dispatch(cid, event, data) is False
        assert sock.sent == []
        assert engine.rooms.members_of("lobby") == {cid}

    @pytest.mark.asyncio
    async def test_events_after_disconnect_are_ignored(self, engine: Engine) -> None:
        cid, sock = await engine.connect()
        await engine.sessions.disconnect(cid)

        assert await engine.sessions.dispatch(cid, "join_room", ["lobby", "alice"]) is False
        assert engine.rooms.members_of("lobby") == frozenset()


class TestLeaveAndDisconnect:

    @pytest.mark.asyncio
    async def test_leave_notifies_remaining_members(self, engine: Engine) -> None:
        a, sock_a = await engine.connect()
        b, sock_b = await engine.connect()
        await engine.sessions.dispatch(a, "join_room", ["lobby", "A"])
        await engine.sessions.dispatch(b, "join_room", ["lobby", "B"])

        await engine.sessions.dispatch(b, "leave_room", ["lobby", "B"])

        assert sock_a.events("leave_message")[0]["message"] == "B has left the room."
        assert sock_b.events("leave_message") == []
        assert engine.rooms.members_of("lobby") == {a}

    @pytest.mark.asyncio
    async def test_leave_without_username_uses_join_name(self, engine: Engine) -> None:
        a, sock_a = await engine.connect()
        b, _ = await engine.connect()
        await engine.sessions.dispatch(a, "join_room", ["lobby", "A"])
        await engine.sessions.dispatch(b, "join_room", ["lobby", "Bea"])

        await engine.sessions.dispatch(b, "leave_room", {"roomId": "lobby"})

        assert sock_a.events("leave_message")[0]["message"] == "Bea has left the room."

    @pytest.mark.asyncio
    async def test_leave_of_room_never_joined(self, engine: Engine) -> None:
        a, sock_a = await engine.connect()
        b, _ = await engine.connect()
        await engine.sessions.dispatch(a, "join_room", ["lobby", "A"])

        assert await engine.sessions.dispatch(b, "leave_room", ["lobby", "B"])

        assert engine.rooms.members_of("lobby") == {a}
        assert sock_a.events("leave_message") == []

    @pytest.mark.asyncio
    async def test_leave_notifications_can_be_disabled(self, quiet_engine: Engine) -> None:
        a, sock_a = await quiet_engine.connect()
        b, _ = await quiet_engine.connect()
        await quiet_engine.sessions.dispatch(a, "join_room", ["lobby", "A"])
        await quiet_engine.sessions.dispatch(b, "join_room", ["lobby", "B"])

        await quiet_engine.sessions.dispatch(b, "leave_room", ["lobby", "B"])
        await quiet_engine.sessions.disconnect(a)

        assert sock_a.events("leave_message") == []

    @pytest.mark.asyncio
    async def test_disconnect_cleans_up_every_room(self, engine: Engine) -> None:
        a, sock_a = await engine.connect()
        b, sock_b = await engine.connect()
        await engine.sessions.dispatch(a, "join_room", ["lobby", "A"])
        await engine.sessions.dispatch(b, "join_room", ["lobby", "B"])
        await engine.sessions.dispatch(b, "join_room", ["kitchen", "B"])

        await engine.sessions.disconnect(b)
        sock_b.sent.clear()
        await engine.sessions.dispatch(a, "send_message", sent_message("A", "lobby", "anyone?"))

        assert not engine.registry.exists(b)
        assert engine.rooms.rooms_of(b) == frozenset()
        assert "kitchen" not in engine.rooms.rooms
        assert sock_a.events("leave_message")[0]["message"] == "B has left the room."
        assert sock_a.events("receive_group_message") == [sent_message("A", "lobby", "anyone?")]
        assert sock_b.sent == []

    @pytest.mark.asyncio
    async def test_duplicate_disconnect_is_noop(self, engine: Engine) -> None:
        a, sock_a = await engine.connect()
        b, _ = await engine.connect()
        await engine.sessions.dispatch(a, "join_room", ["lobby", "A"])
        await engine.sessions.dispatch(b, "join_room", ["lobby", "B"])

        await engine.sessions.disconnect(b)
        await engine.sessions.disconnect(b)
        await engine.sessions.disconnect("unknown")

        assert len(sock_a.events("leave_message")) == 1


class TestScenario:

    @pytest.mark.asyncio
    async def test_lobby_walkthrough(self, engine: Engine) -> None:
        a, sock_a = await engine.connect()
        b, sock_b = await engine.connect()

        await engine.sessions.dispatch(a, "join_room", ["lobby", "A"])
        await engine.sessions.dispatch(b, "join_room", ["lobby", "B"])

        assert [n["message"] for n in sock_a.events("joining_message")] == [
            "A has joined the room.",
            "B has joined the room.",
        ]
        assert [n["message"] for n in sock_b.events("joining_message")] == ["B has joined the room."]

        hi = sent_message("A", "lobby", "hi")
        await engine.sessions.dispatch(a, "send_message", hi)
        assert sock_a.events("receive_group_message") == [hi]
        assert sock_b.events("receive_group_message") == [hi]

        await engine.sessions.disconnect(b)
        assert sock_a.events("leave_message")[0]["message"] == "B has left the room."

        solo = sent_message("A", "lobby", "solo")
        await engine.sessions.dispatch(a, "send_message", solo)
        assert sock_a.events("receive_group_message") == [hi, solo]
        assert sock_b.events("receive_group_message") == [hi]

    @pytest.mark.asyncio
    async def test_no_backlog_for_late_joiner(self, engine: Engine) -> None:
        a, _ = await engine.connect()
        late, sock_late = await engine.connect()
        await engine.sessions.dispatch(a, "join_room", ["lobby", "A"])
        await engine.sessions.dispatch(a, "send_message", sent_message("A", "lobby", "early"))

        await engine.sessions.dispatch(late, "join_room", ["lobby", "Late"])

        assert sock_late.events("receive_group_message") == []

    @pytest.mark.asyncio
    async def test_non_member_send_reaches_room_without_echo(self, engine: Engine) -> None:
        member, sock_member = await engine.connect()
        outsider, sock_outsider = await engine.connect()
        await engine.sessions.dispatch(member, "join_room", ["lobby", "M"])

        shout = sent_message("O", "lobby", "from outside")
        assert await engine.sessions.dispatch(outsider, "send_message", shout)

        assert sock_member.events("receive_group_message") == [shout]
        assert sock_outsider.sent == []
        assert engine.rooms.members_of("lobby") == {member}
