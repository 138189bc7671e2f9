from __future__ import annotations

import time
from typing import TYPE_CHECKING

import structlog

from ballsort.logic.board import Board
from ballsort.session.exceptions import InvalidSessionIdError
from ballsort.session.models import MAX_DISPLAY_NAME_LENGTH, Session, is_valid_session_id, sanitize_display_name

if TYPE_CHECKING:
    import random

    from ballsort.logic.settings import GameRules

logger = structlog.get_logger()


class SessionStore:
    """In-memory store mapping client-chosen session ids to their boards.

    Sessions survive disconnects so a reconnecting client resumes exactly
    where it left off. They are only dropped by ``sweep`` once idle for
    longer than the timeout.
    """

    def __init__(
        self,
        rules: GameRules | None = None,
        *,
        max_name_length: int = MAX_DISPLAY_NAME_LENGTH,
        rng: random.Random | None = None,
    ) -> None:
        self._rules = rules
        self._max_name_length = max_name_length
        self._rng = rng
        self._sessions: dict[str, Session] = {}  # session_id -> Session

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def join(self, session_id: object, display_name: str | None = None) -> tuple[Session, bool]:
        """Create or restore a session. Return ``(session, created)``.

        A restored session keeps its board untouched; its display name is only
        replaced when a non-blank one is supplied.
        """
        if not is_valid_session_id(session_id):
            raise InvalidSessionIdError(session_id)

        session = self._sessions.get(session_id)
        if session is None:
            session = Session(
                session_id=session_id,
                board=Board.new(1, rules=self._rules, rng=self._rng),
                display_name=sanitize_display_name(display_name, self._max_name_length),
            )
            self._sessions[session_id] = session
            logger.info("session created", session_id=session_id)
            return session, True

        if display_name and display_name.strip():
            session.display_name = sanitize_display_name(display_name, self._max_name_length)
        session.touch()
        logger.info("session restored", session_id=session_id, level=session.board.level, moves=session.board.moves)
        return session, False

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def rename(self, session_id: str, display_name: str | None) -> str | None:
        """Store a sanitized display name. Return it, or None for an unknown session."""
        session = self._sessions.get(session_id)
        if session is None:
            return None
        session.display_name = sanitize_display_name(display_name, self._max_name_length)
        return session.display_name

    def remove(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def sweep(self, timeout: float, now: float | None = None) -> list[str]:
        """Evict sessions idle for longer than ``timeout`` seconds. Return their ids."""
        if now is None:
            now = time.monotonic()
        expired = [sid for sid, session in self._sessions.items() if now - session.last_activity > timeout]
        for session_id in expired:
            del self._sessions[session_id]
        return expired
