from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .logging_config import get_logger, setup_logging
from .registry import RoomRegistry
from .routers import rooms as rooms_router
from .routers import websockets as ws_router

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None, registry: Optional[RoomRegistry] = None) -> FastAPI:
    """Build the relay application around one room registry."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_file)

    app = FastAPI(title="Dead Zone Relay")
    app.state.settings = settings
    app.state.registry = registry or RoomRegistry(
        code_length=settings.room_code_length,
        max_attempts=settings.room_code_attempts,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(rooms_router.router)
    app.include_router(ws_router.router)

    logger.info("relay application initialised")
    return app


app = create_app()
