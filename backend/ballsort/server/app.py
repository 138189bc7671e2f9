from __future__ import annotations

import contextlib
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from starlette.applications import Starlette
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route, WebSocketRoute
from starlette.staticfiles import StaticFiles

from ballsort.messaging.router import MessageRouter
from ballsort.server.settings import GameServerSettings
from ballsort.server.websocket import websocket_endpoint
from ballsort.session.manager import SessionManager
from shared.build_info import APP_VERSION
from shared.logging import setup_logging

logger = structlog.get_logger()

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from starlette.requests import Request
    from starlette.websockets import WebSocket


async def health(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok", "version": APP_VERSION})


async def status(request: Request) -> JSONResponse:
    session_manager: SessionManager = request.app.state.session_manager
    return JSONResponse(
        {
            "status": "ok",
            "version": APP_VERSION,
            "sessions": session_manager.session_count,
            "connections": session_manager.connection_count,
            "leaderboard": len(session_manager.leaderboard),
        },
    )


def create_session_manager(settings: GameServerSettings) -> SessionManager:
    return SessionManager(
        settings.rules,
        session_timeout_seconds=settings.session_timeout_seconds,
        sweep_interval_seconds=settings.sweep_interval_seconds,
        leaderboard_size=settings.leaderboard_size,
        max_name_length=settings.max_name_length,
        broadcast_timeout_seconds=settings.broadcast_send_timeout_seconds,
    )


def create_app(
    settings: GameServerSettings | None = None,
    session_manager: SessionManager | None = None,
    message_router: MessageRouter | None = None,
) -> Starlette:
    if settings is None:
        settings = GameServerSettings()

    if session_manager is None:
        session_manager = create_session_manager(settings)

    if message_router is None:
        message_router = MessageRouter(session_manager)

    async def ws_endpoint(websocket: WebSocket) -> None:
        await websocket_endpoint(
            websocket,
            message_router,
            max_message_size=settings.max_message_size,
            rate_limit_window=settings.rate_limit_window_seconds,
            rate_limit_max_messages=settings.rate_limit_max_messages,
        )

    routes: list[Route | WebSocketRoute | Mount] = [
        Route("/health", health, methods=["GET"]),
        Route("/status", status, methods=["GET"]),
        WebSocketRoute("/ws", ws_endpoint),
    ]

    if settings.static_dir is not None:
        static_dir = Path(settings.static_dir)
        if static_dir.is_dir():
            routes.append(Mount("/", app=StaticFiles(directory=str(static_dir), html=True), name="static"))
        else:
            logger.warning("static directory not found, client bundle will not be served", path=str(static_dir))

    @contextlib.asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncIterator[None]:
        session_manager.start_session_sweeper()
        try:
            yield
        finally:
            await session_manager.stop_session_sweeper()

    app = Starlette(routes=routes, lifespan=lifespan)
    app.state.settings = settings
    app.state.session_manager = session_manager

    logger.info("game server ready", move_rule=settings.move_rule)
    return app


def get_app() -> Starlette:  # pragma: no cover
    """ASGI application factory for production use (e.g., uvicorn --factory)."""
    _settings = GameServerSettings()
    setup_logging(log_dir=_settings.log_dir)
    return create_app(settings=_settings)
