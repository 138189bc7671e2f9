import asyncio
import re
import time
from dataclasses import dataclass, field
from typing import TypeGuard

from ballsort.logic.board import Board

SESSION_ID_PATTERN = re.compile(r"^[a-z0-9]{10,50}$")
DEFAULT_DISPLAY_NAME = "Anonymous"
MAX_DISPLAY_NAME_LENGTH = 20

_HTML_TAG_PATTERN = re.compile(r"<[^>]*>")

# ASCII control character boundaries for input validation
_SPACE_ORD = 0x20
_DEL_ORD = 0x7F


def is_valid_session_id(session_id: object) -> TypeGuard[str]:
    return isinstance(session_id, str) and SESSION_ID_PATTERN.fullmatch(session_id) is not None


def sanitize_display_name(name: str | None, max_length: int = MAX_DISPLAY_NAME_LENGTH) -> str:
    """Strip HTML tags and control characters, trim and truncate.

    Names that end up empty fall back to ``DEFAULT_DISPLAY_NAME``.
    """
    if not name:
        return DEFAULT_DISPLAY_NAME
    cleaned = _HTML_TAG_PATTERN.sub("", name)
    cleaned = "".join(c for c in cleaned if ord(c) >= _SPACE_ORD and ord(c) != _DEL_ORD)
    cleaned = cleaned.strip()[:max_length].strip()
    return cleaned or DEFAULT_DISPLAY_NAME


@dataclass
class Session:
    """A player's board and identity, kept across WebSocket reconnects.

    ``lock`` serializes every read-modify-write of ``board``; ``last_activity``
    is a ``time.monotonic()`` timestamp used for idle eviction.
    """

    session_id: str
    board: Board
    display_name: str = DEFAULT_DISPLAY_NAME
    last_activity: float = field(default_factory=time.monotonic)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    def touch(self) -> None:
        self.last_activity = time.monotonic()
