# zenwhisper/api/routes/root.py

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def root():
    """Root endpoint - plain-text banner used as a liveness check by the frontend."""
    return "Welcome to zenWhisper"
