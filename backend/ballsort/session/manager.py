from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING

import structlog

from ballsort.logic.progress import advance_level, complete_level, restart_game
from ballsort.messaging.types import GameStateMessage, LeaderboardMessage, LevelCompleteMessage, to_wire
from ballsort.session.broadcast import DEFAULT_SEND_TIMEOUT, broadcast_to_connections
from ballsort.session.leaderboard import DEFAULT_LEADERBOARD_SIZE, Leaderboard
from ballsort.session.models import MAX_DISPLAY_NAME_LENGTH
from ballsort.session.session_store import SessionStore
from ballsort.session.types import LeaderboardEntryView

if TYPE_CHECKING:
    import random

    from ballsort.logic.settings import GameRules
    from ballsort.logic.types import BoardView, LevelCompletion
    from ballsort.messaging.protocol import ConnectionProtocol
    from ballsort.session.models import Session

logger = structlog.get_logger()

DEFAULT_SESSION_TIMEOUT = 24 * 60 * 60
DEFAULT_SWEEP_INTERVAL = 60 * 60


class SessionManager:
    """Coordinate connections, sessions and the shared leaderboard.

    Every board mutation runs under its session's lock, so two connections
    bound to the same session (e.g. two browser tabs) cannot interleave a
    legality check with another move. Replies are sent after the lock is
    released.
    """

    def __init__(
        self,
        rules: GameRules | None = None,
        *,
        session_timeout_seconds: float = DEFAULT_SESSION_TIMEOUT,
        sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL,
        leaderboard_size: int = DEFAULT_LEADERBOARD_SIZE,
        max_name_length: int = MAX_DISPLAY_NAME_LENGTH,
        broadcast_timeout_seconds: float = DEFAULT_SEND_TIMEOUT,
        rng: random.Random | None = None,
    ) -> None:
        self._rng = rng
        self._session_timeout = session_timeout_seconds
        self._sweep_interval = sweep_interval_seconds
        self._broadcast_timeout = broadcast_timeout_seconds
        self._sessions = SessionStore(rules, max_name_length=max_name_length, rng=rng)
        self._leaderboard = Leaderboard(leaderboard_size)
        self._connections: dict[str, ConnectionProtocol] = {}  # connection_id -> connection
        self._bindings: dict[str, str] = {}  # connection_id -> session_id
        self._sweeper_task: asyncio.Task[None] | None = None

    @property
    def sessions(self) -> SessionStore:
        return self._sessions

    @property
    def leaderboard(self) -> Leaderboard:
        return self._leaderboard

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    # --- Connections ---

    def register_connection(self, connection: ConnectionProtocol) -> None:
        self._connections[connection.connection_id] = connection

    def unregister_connection(self, connection: ConnectionProtocol) -> None:
        """Forget a connection. Its session stays alive for reconnection."""
        self._connections.pop(connection.connection_id, None)
        session_id = self._bindings.pop(connection.connection_id, None)
        if session_id is not None:
            logger.info("session detached", session_id=session_id)

    def is_joined(self, connection: ConnectionProtocol) -> bool:
        return connection.connection_id in self._bindings

    def _bound_session(self, connection: ConnectionProtocol) -> Session | None:
        """Return the connection's session, refreshing its activity timestamp."""
        session_id = self._bindings.get(connection.connection_id)
        if session_id is None:
            return None
        session = self._sessions.get(session_id)
        if session is None:
            logger.debug("session no longer exists", session_id=session_id)
            return None
        session.touch()
        return session

    # --- Game operations ---

    async def join(self, connection: ConnectionProtocol, session_id: object, name: str | None = None) -> None:
        """Create or restore a session and bind it to the connection.

        Raises InvalidSessionIdError for a malformed id; the caller closes
        the connection.
        """
        session, created = self._sessions.join(session_id, name)
        self._bindings[connection.connection_id] = session.session_id
        structlog.contextvars.bind_contextvars(session_id=session.session_id)
        logger.info("player joined", created=created, display_name=session.display_name)

        async with session.lock:
            view = session.board.snapshot()
        await self._send_game_state(connection, view)
        await self.broadcast_leaderboard()

    async def move(self, connection: ConnectionProtocol, from_column: int, to_column: int) -> None:
        session = self._bound_session(connection)
        if session is None:
            return

        completion: LevelCompletion | None = None
        leaderboard_changed = False
        async with session.lock:
            board = session.board
            # a solved board only accepts nextLevel/restart; more moves could re-score it
            moved = not board.is_complete and board.move(from_column, to_column)
            if moved and board.is_complete:
                completion = complete_level(board, rng=self._rng)
                leaderboard_changed = self._leaderboard.record(
                    session.session_id,
                    completion.total_score,
                    completion.level,
                    session.display_name,
                )
            view = board.snapshot()

        if not moved:
            logger.debug("move rejected", from_column=from_column, to_column=to_column)

        await self._send_game_state(connection, view)
        if completion is not None:
            logger.info(
                "level complete",
                level=completion.level,
                moves=completion.moves,
                seconds=completion.time,
                level_score=completion.level_score,
                total_score=completion.total_score,
                game_reset=completion.game_reset,
            )
            await connection.send_message(to_wire(LevelCompleteMessage(data=completion)))
        if leaderboard_changed:
            await self.broadcast_leaderboard()

    async def next_level(self, connection: ConnectionProtocol) -> None:
        session = self._bound_session(connection)
        if session is None:
            return
        async with session.lock:
            advance_level(session.board, rng=self._rng)
            view = session.board.snapshot()
        logger.info("level started", level=view.level)
        await self._send_game_state(connection, view)

    async def restart(self, connection: ConnectionProtocol) -> None:
        session = self._bound_session(connection)
        if session is None:
            return
        async with session.lock:
            restart_game(session.board, rng=self._rng)
            view = session.board.snapshot()
        logger.info("game restarted")
        await self._send_game_state(connection, view)

    async def select_column(self, connection: ConnectionProtocol, column: int | None) -> None:
        session = self._bound_session(connection)
        if session is None:
            return
        async with session.lock:
            selected = session.board.select_column(column)
            view = session.board.snapshot()
        if not selected:
            logger.debug("column selection out of range", column=column)
            return
        await self._send_game_state(connection, view)

    async def get_state(self, connection: ConnectionProtocol) -> None:
        session = self._bound_session(connection)
        if session is None:
            return
        async with session.lock:
            view = session.board.snapshot()
        await self._send_game_state(connection, view)

    async def update_name(self, connection: ConnectionProtocol, name: str) -> None:
        """Store a new display name and refresh the leaderboard entry if the player has one."""
        session = self._bound_session(connection)
        if session is None:
            return
        display_name = self._sessions.rename(session.session_id, name)
        if display_name is None:
            return
        logger.info("display name updated", display_name=display_name)
        if self._leaderboard.rename(session.session_id, display_name):
            await self.broadcast_leaderboard()

    async def _send_game_state(self, connection: ConnectionProtocol, view: BoardView) -> None:
        await connection.send_message(to_wire(GameStateMessage(data=view)))

    # --- Leaderboard ---

    def leaderboard_message(self) -> LeaderboardMessage:
        return LeaderboardMessage(
            data=[
                LeaderboardEntryView(session_id=entry.session_id, score=entry.score, level=entry.level, name=entry.name)
                for entry in self._leaderboard.entries
            ],
        )

    async def broadcast_leaderboard(self) -> None:
        """Push the current ranking to every connected client, best effort."""
        message = to_wire(self.leaderboard_message())
        delivered = await broadcast_to_connections(
            list(self._connections.values()),
            message,
            timeout=self._broadcast_timeout,
        )
        logger.debug("leaderboard broadcast", recipients=delivered, entries=len(self._leaderboard))

    # --- Session sweeper ---

    async def sweep_expired_sessions(self, now: float | None = None) -> list[str]:
        """Evict idle sessions, their leaderboard entries and high scores, and unbind their connections."""
        expired = self._sessions.sweep(self._session_timeout, now=now)
        if expired:
            # connections still open on an evicted session must join again
            evicted = set(expired)
            for connection_id, session_id in list(self._bindings.items()):
                if session_id in evicted:
                    del self._bindings[connection_id]
        leaderboard_changed = False
        for session_id in expired:
            logger.info("session expired", session_id=session_id)
            if self._leaderboard.remove(session_id):
                leaderboard_changed = True
        if leaderboard_changed:
            await self.broadcast_leaderboard()
        return expired

    def start_session_sweeper(self) -> None:
        """Start the periodic session sweeper task. Idempotent."""
        if self._sweeper_task is not None and not self._sweeper_task.done():
            return
        self._sweeper_task = asyncio.create_task(self._sweeper_loop())

    async def stop_session_sweeper(self) -> None:
        """Stop the session sweeper task."""
        if self._sweeper_task is not None:
            self._sweeper_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._sweeper_task
            self._sweeper_task = None

    async def _sweeper_loop(self) -> None:
        """Periodically evict sessions idle past the timeout."""
        while True:
            await asyncio.sleep(self._sweep_interval)
            try:
                await self.sweep_expired_sessions()
            except Exception:
                logger.exception("session sweeper encountered an error")
