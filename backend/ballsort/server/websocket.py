from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog
from starlette.websockets import WebSocket, WebSocketDisconnect

from ballsort.messaging.encoder import MAX_MESSAGE_SIZE, DecodeError, decode
from ballsort.messaging.protocol import ConnectionProtocol
from ballsort.server.rate_limit import FixedWindowRateLimiter

logger = structlog.get_logger()

if TYPE_CHECKING:
    from ballsort.messaging.router import MessageRouter

# Rate limit: 20 messages per 1 second window. Drag-and-drop sends a
# selectColumn and a move per gesture, so a quick player stays well below.
_RATE_LIMIT_WINDOW = 1.0
_RATE_LIMIT_MAX_MESSAGES = 20


class WebSocketConnection(ConnectionProtocol):
    def __init__(self, websocket: WebSocket, connection_id: str | None = None) -> None:
        self._websocket = websocket
        self._connection_id = connection_id or str(uuid4())
        self._closed = False

    @property
    def connection_id(self) -> str:
        return self._connection_id

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def send_text(self, data: str) -> None:
        try:
            await self._websocket.send_text(data)
        except WebSocketDisconnect:
            raise ConnectionError("WebSocket already disconnected") from None

    async def receive_frame(self) -> str | bytes:
        """Return the next text or binary frame's payload."""
        message = await self._websocket.receive()
        if message["type"] == "websocket.disconnect":
            raise ConnectionError("WebSocket already disconnected")
        text = message.get("text")
        if text is not None:
            return text
        return message.get("bytes") or b""

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self._closed = True
        with contextlib.suppress(WebSocketDisconnect, RuntimeError):
            await self._websocket.close(code=code, reason=reason)


async def websocket_endpoint(
    websocket: WebSocket,
    router: MessageRouter,
    *,
    max_message_size: int = MAX_MESSAGE_SIZE,
    rate_limit_window: float = _RATE_LIMIT_WINDOW,
    rate_limit_max_messages: int = _RATE_LIMIT_MAX_MESSAGES,
) -> None:
    await websocket.accept()

    connection = WebSocketConnection(websocket)
    structlog.contextvars.bind_contextvars(connection_id=connection.connection_id)
    logger.info("websocket connected")
    await router.handle_connect(connection)

    limiter = FixedWindowRateLimiter(window=rate_limit_window, max_messages=rate_limit_max_messages)

    try:
        while not connection.is_closed:
            # Transport errors end the loop; errors while handling a frame never do.
            try:
                raw = await connection.receive_frame()
            except (WebSocketDisconnect, RuntimeError, ConnectionError):  # fmt: skip
                break

            # Over-limit and malformed frames are dropped without a reply;
            # the connection stays open for well-behaved follow-up messages.
            if not limiter.allow():
                logger.debug("rate limit exceeded, dropping message")
                continue

            try:
                data = decode(raw, max_size=max_message_size)
            except DecodeError as e:
                logger.warning("dropping undecodable message", error=str(e))
                continue

            await router.handle_message(connection, data)
    finally:
        logger.info("websocket disconnected")
        await router.handle_disconnect(connection)
        structlog.contextvars.clear_contextvars()
