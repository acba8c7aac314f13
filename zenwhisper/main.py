# zenwhisper/main.py

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from zenwhisper.core.config import Settings, settings as default_settings
from zenwhisper.core.logging import setup_logging, get_logger
from zenwhisper.core.state import build_state
from zenwhisper.api.routes import root, health, auth
from zenwhisper.api import websocket as websocket_module

# Configure logging first
setup_logging()
logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(title="zenWhisper - Room Chat Relay")
    app.state.chat = build_state(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    # REST routes
    app.include_router(root.router)
    app.include_router(health.router)
    app.include_router(auth.router)

    # WebSocket routes
    app.include_router(websocket_module.router)

    @app.on_event("startup")
    async def startup_event():
        logger.info("🚀 zenWhisper starting - leave notifications %s",
                    "on" if settings.NOTIFY_ON_LEAVE else "off")

    @app.on_event("shutdown")
    async def on_shutdown():
        logger.info("zenWhisper shutting down with %d live connection(s)", len(app.state.chat.registry))

    return app


app = create_app()


def run() -> None:
    import uvicorn
    uvicorn.run("zenwhisper.main:app", host=default_settings.HOST, port=default_settings.PORT)


if __name__ == "__main__":
    run()
