# zenwhisper/api/websocket.py

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Tuple

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from zenwhisper.core.state import AppState

logger = logging.getLogger(__name__)

router = APIRouter()


def decode_frame(raw: str) -> Optional[Tuple[str, Any]]:
    """
    Parse an inbound text frame into ``(event, data)``.

    Returns None for anything that is not a JSON object with a string
    ``event`` field; such frames are dropped by the caller.
    """
    try:
        frame = json.loads(raw)
    except json.JSONDecodeError:
        return None

    if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
        return None
    return frame["event"], frame.get("data")

# ============================================================================
# WEBSOCKET ENDPOINT
# ============================================================================

@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, user_id: str = "anonymous"):
    """
    WebSocket endpoint for room chat.

    Protocol:
    =========
    Every frame is JSON: {"event": "<name>", "data": <payload>}

    Client -> Server Events:
    ------------------------
    Join Room:
        {"event": "join_room", "data": ["lobby", "alice"]}
        or {"event": "join_room", "data": {"roomId": "lobby", "username": "alice"}}

    Send Message:
        {"event": "send_message", "data": {"author": "alice", "roomId": "lobby", "message": "hi"}}

    Leave Room:
        {"event": "leave_room", "data": ["lobby", "alice"]}

    Server -> Room Events:
    ----------------------
    Presence:
        {"event": "joining_message", "data": {"author": "System", "message": "alice has joined the room.", "time": "..."}}
        {"event": "leave_message", "data": {"author": "System", "message": "alice has left the room.", "time": "..."}}

    Message:
        {"event": "receive_group_message", "data": {"author": "alice", "roomId": "lobby", "message": "hi"}}

    Error Handling:
        - Binary frames, invalid JSON, unknown events, malformed payloads: dropped, no reply
        - Disconnect or receive errors: connection purged from all rooms
    """
    state: AppState = websocket.app.state.chat
    connection_id = await state.sessions.connect(websocket, user_id)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            raw = message.get("text")
            if raw is None:
                logger.warning("Dropped binary frame from %s", connection_id)
                continue

            frame = decode_frame(raw)
            if frame is None:
                logger.warning("Dropped undecodable frame from %s", connection_id)
                continue

            event, data = frame
            await state.sessions.dispatch(connection_id, event, data)

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error("WebSocket error on %s: %s", connection_id, e)
        try:
            await websocket.close(code=1011)
        except RuntimeError:
            pass  # already closed by the peer
    finally:
        await state.sessions.disconnect(connection_id)
