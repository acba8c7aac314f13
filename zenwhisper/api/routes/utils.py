# zenwhisper/api/routes/utils.py

from __future__ import annotations

from fastapi import Request

from zenwhisper.core.state import AppState


def get_state(request: Request) -> AppState:
    """FastAPI dependency returning the app's shared services."""
    return request.app.state.chat
