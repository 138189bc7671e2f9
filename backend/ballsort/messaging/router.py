from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from ballsort.messaging.types import (
    GetStateMessage,
    JoinMessage,
    MoveMessage,
    NextLevelMessage,
    RestartMessage,
    SelectColumnMessage,
    UpdateNameMessage,
    parse_client_message,
)
from ballsort.session.exceptions import InvalidSessionIdError

if TYPE_CHECKING:
    from ballsort.messaging.protocol import ConnectionProtocol
    from ballsort.session.manager import SessionManager

logger = logging.getLogger(__name__)

# WebSocket close code for policy violations (RFC 6455)
POLICY_VIOLATION_CLOSE_CODE = 1008


class MessageRouter:
    """
    Routes incoming messages to appropriate handlers.

    A connection starts unjoined: until a ``join`` succeeds every other
    message is ignored. Nothing raised while handling one message escapes
    this class, so a bad message never tears down the connection.

    This class contains pure business logic and can be tested
    without real WebSocket connections.
    """

    def __init__(self, session_manager: SessionManager) -> None:
        self._session_manager = session_manager

    async def handle_message(
        self,
        connection: ConnectionProtocol,
        raw_message: dict[str, Any],
    ) -> None:
        try:
            message = parse_client_message(raw_message)
        except (ValidationError, KeyError, TypeError, ValueError) as e:
            logger.warning("invalid message from %s: %s", connection.connection_id, e)
            return

        try:
            await self._dispatch(connection, message)
        except Exception:
            logger.exception("unexpected error handling %s from %s", message.type, connection.connection_id)

    async def _dispatch(
        self,
        connection: ConnectionProtocol,
        message: JoinMessage
        | MoveMessage
        | NextLevelMessage
        | RestartMessage
        | UpdateNameMessage
        | GetStateMessage
        | SelectColumnMessage,
    ) -> None:
        if isinstance(message, JoinMessage):
            await self._handle_join(connection, message)
            return

        if not self._session_manager.is_joined(connection):
            logger.debug("ignoring %s from unjoined connection %s", message.type, connection.connection_id)
            return

        if isinstance(message, MoveMessage):
            await self._session_manager.move(connection, message.data.from_column, message.data.to_column)
        elif isinstance(message, NextLevelMessage):
            await self._session_manager.next_level(connection)
        elif isinstance(message, RestartMessage):
            await self._session_manager.restart(connection)
        elif isinstance(message, UpdateNameMessage):
            await self._session_manager.update_name(connection, message.data.name)
        elif isinstance(message, GetStateMessage):
            await self._session_manager.get_state(connection)
        elif isinstance(message, SelectColumnMessage):
            await self._session_manager.select_column(connection, message.data.column)

    async def _handle_join(self, connection: ConnectionProtocol, message: JoinMessage) -> None:
        """Join or resume a session; close the connection on a malformed session id."""
        try:
            await self._session_manager.join(connection, message.data.session_id, message.data.name)
        except InvalidSessionIdError:
            logger.warning("invalid session id from %s, closing", connection.connection_id)
            await connection.close(code=POLICY_VIOLATION_CLOSE_CODE, reason="invalid_session_id")

    async def handle_connect(self, connection: ConnectionProtocol) -> None:
        self._session_manager.register_connection(connection)

    async def handle_disconnect(self, connection: ConnectionProtocol) -> None:
        self._session_manager.unregister_connection(connection)
