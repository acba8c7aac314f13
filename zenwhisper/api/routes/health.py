# zenwhisper/api/routes/health.py

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from zenwhisper.api.routes.utils import get_state
from zenwhisper.core.state import AppState

router = APIRouter()

@router.get("/health")
async def health(state: AppState = Depends(get_state)):
    """
    Health check endpoint.

    Returns:
        dict: Status, live connection count, rooms that currently have members
    """
    uptime_seconds = (datetime.now(timezone.utc) - state.started_at).total_seconds()
    return {
        "status": "healthy",
        "connections": len(state.registry),
        "active_rooms": state.rooms.active_room_count(),
        "uptime_seconds": round(uptime_seconds, 1),
    }
