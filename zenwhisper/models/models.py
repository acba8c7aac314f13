# zenwhisper/models/models.py
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

SYSTEM_AUTHOR = "System"


# ============================================================================
# INBOUND WEBSOCKET EVENTS
# ============================================================================

class RoomPresenceEvent(BaseModel):
    """
    Payload of ``join_room`` / ``leave_room``.

    Clients send either the positional form ``["lobby", "alice"]`` or an
    object ``{"roomId": "lobby", "username": "alice"}``.
    """
    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field(alias="roomId", min_length=1)
    username: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Any) -> "RoomPresenceEvent":
        if isinstance(data, (list, tuple)):
            keys = ("roomId", "username")
            data = dict(zip(keys, data))
        elif isinstance(data, str):
            data = {"roomId": data}
        return cls.model_validate(data)


class ChatMessage(BaseModel):
    """``send_message`` payload; echoed unchanged as ``receive_group_message``."""
    model_config = ConfigDict(populate_by_name=True)

    author: str
    room_id: str = Field(alias="roomId", min_length=1)
    message: str

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


# ============================================================================
# OUTBOUND NOTIFICATIONS
# ============================================================================

class SystemNotification(BaseModel):
    author: str = SYSTEM_AUTHOR
    message: str
    time: str

    def to_wire(self) -> dict:
        return self.model_dump()


# ============================================================================
# AUTHENTICATION BOUNDARY
# ============================================================================

class SignupRequest(BaseModel):
    # Fields are optional so a missing one surfaces as a 400, not a 422
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserProfile(BaseModel):
    username: str
    email: str


class UserRecord(UserProfile):
    password: str  # one-way hash, never the plain text


class LoginResponse(BaseModel):
    token: str
    user: UserProfile
