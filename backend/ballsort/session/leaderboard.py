"""Global top-N ranking of per-session high scores.

Entries copy the fields they rank on, so a board changing underneath never
alters the leaderboard. All methods are synchronous and never yield to the
event loop, which makes each read-modify-write atomic with respect to other
connections.
"""

import time
from dataclasses import dataclass

import structlog

DEFAULT_LEADERBOARD_SIZE = 5

logger = structlog.get_logger()


@dataclass(frozen=True)
class LeaderboardEntry:
    session_id: str
    score: int
    level: int
    name: str
    timestamp: float


class Leaderboard:
    def __init__(self, size: int = DEFAULT_LEADERBOARD_SIZE) -> None:
        if size < 1:
            raise ValueError(f"leaderboard size must be >= 1, got {size}")
        self._size = size
        self._entries: list[LeaderboardEntry] = []
        self._high_scores: dict[str, int] = {}  # session_id -> best recorded score

    @property
    def size(self) -> int:
        return self._size

    @property
    def entries(self) -> list[LeaderboardEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def high_score(self, session_id: str) -> int | None:
        return self._high_scores.get(session_id)

    def record(self, session_id: str, score: int, level: int, name: str) -> bool:
        """Record a score if it beats the session's previous best.

        Scores must be strictly greater than the stored high score (0 when
        none is stored). Return True when the ranking was updated.
        """
        if score <= self._high_scores.get(session_id, 0):
            return False

        self._high_scores[session_id] = score
        entries = [entry for entry in self._entries if entry.session_id != session_id]
        entries.append(
            LeaderboardEntry(session_id=session_id, score=score, level=level, name=name, timestamp=time.time()),
        )
        # stable sort: on equal scores the earlier entry keeps its place
        entries.sort(key=lambda entry: entry.score, reverse=True)
        self._entries = entries[: self._size]

        logger.info("high score recorded", session_id=session_id, score=score, level=level)
        return True

    def rename(self, session_id: str, name: str) -> bool:
        """Update the display name on a session's entry. Return True if it changed."""
        for i, entry in enumerate(self._entries):
            if entry.session_id == session_id:
                if entry.name == name:
                    return False
                self._entries[i] = LeaderboardEntry(
                    session_id=entry.session_id,
                    score=entry.score,
                    level=entry.level,
                    name=name,
                    timestamp=entry.timestamp,
                )
                return True
        return False

    def remove(self, session_id: str) -> bool:
        """Forget a session's entry and high score. Return True if an entry was dropped."""
        self._high_scores.pop(session_id, None)
        remaining = [entry for entry in self._entries if entry.session_id != session_id]
        removed = len(remaining) != len(self._entries)
        self._entries = remaining
        return removed
