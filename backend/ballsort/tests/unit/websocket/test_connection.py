"""Unit tests for WebSocketConnection wrapper class."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from starlette.websockets import WebSocketDisconnect

from ballsort.server.websocket import WebSocketConnection


class TestWebSocketConnection:
    """Test error handling and delegation in WebSocketConnection wrapper."""

    async def test_send_text_converts_disconnect_to_connection_error(self):
        """Verify that WebSocketDisconnect is converted to ConnectionError on send."""
        mock_ws = MagicMock()
        mock_ws.send_text = AsyncMock(side_effect=WebSocketDisconnect())
        conn = WebSocketConnection(mock_ws, connection_id="test-conn")

        with pytest.raises(ConnectionError, match="WebSocket already disconnected"):
            await conn.send_text("{}")

    async def test_send_message_encodes_json(self):
        mock_ws = MagicMock()
        mock_ws.send_text = AsyncMock()
        conn = WebSocketConnection(mock_ws, connection_id="test-conn")

        await conn.send_message({"type": "gameState", "data": {"level": 1}})

        mock_ws.send_text.assert_awaited_once_with('{"type":"gameState","data":{"level":1}}')

    async def test_close_suppresses_disconnect(self):
        """Closing an already-disconnected WebSocket completes without error."""
        mock_ws = MagicMock()
        mock_ws.close = AsyncMock(side_effect=WebSocketDisconnect())
        conn = WebSocketConnection(mock_ws, connection_id="test-conn")

        await conn.close()

        assert conn.is_closed is True

    async def test_close_passes_code_and_reason(self):
        mock_ws = MagicMock()
        mock_ws.close = AsyncMock()
        conn = WebSocketConnection(mock_ws, connection_id="test-conn")

        await conn.close(code=1008, reason="invalid_session_id")

        mock_ws.close.assert_awaited_once_with(code=1008, reason="invalid_session_id")

    async def test_receive_frame_returns_text(self):
        mock_ws = MagicMock()
        mock_ws.receive = AsyncMock(return_value={"type": "websocket.receive", "text": '{"type":"getState"}'})
        conn = WebSocketConnection(mock_ws, connection_id="test-conn")

        assert await conn.receive_frame() == '{"type":"getState"}'

    async def test_receive_frame_returns_bytes(self):
        mock_ws = MagicMock()
        mock_ws.receive = AsyncMock(return_value={"type": "websocket.receive", "bytes": b'{"type":"getState"}'})
        conn = WebSocketConnection(mock_ws, connection_id="test-conn")

        assert await conn.receive_frame() == b'{"type":"getState"}'

    async def test_receive_frame_converts_disconnect_to_connection_error(self):
        mock_ws = MagicMock()
        mock_ws.receive = AsyncMock(return_value={"type": "websocket.disconnect", "code": 1000})
        conn = WebSocketConnection(mock_ws, connection_id="test-conn")

        with pytest.raises(ConnectionError, match="WebSocket already disconnected"):
            await conn.receive_frame()

    def test_generates_connection_id(self):
        first = WebSocketConnection(MagicMock())
        second = WebSocketConnection(MagicMock())

        assert first.connection_id
        assert first.connection_id != second.connection_id
