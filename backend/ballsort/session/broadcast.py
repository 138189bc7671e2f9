"""Shared broadcast utility for pushing one message to many connections."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from ballsort.messaging.encoder import encode

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ballsort.messaging.protocol import ConnectionProtocol

DEFAULT_SEND_TIMEOUT = 1.0


async def _send_quietly(connection: ConnectionProtocol, text: str, timeout: float) -> bool:
    try:
        await asyncio.wait_for(connection.send_text(text), timeout)
    except (RuntimeError, OSError, ConnectionError, TimeoutError):  # fmt: skip
        return False
    return True


async def broadcast_to_connections(
    connections: Iterable[ConnectionProtocol],
    message: dict[str, Any],
    timeout: float = DEFAULT_SEND_TIMEOUT,
) -> int:
    """Send a message to every connection concurrently. Return how many got it.

    The message is encoded once. Each send is bounded by ``timeout`` so a slow
    or dead client is skipped instead of holding up the rest. The iterable is
    snapshotted before the first await, so connections registering or leaving
    meanwhile are safe.
    """
    targets = [connection for connection in connections if not connection.is_closed]
    if not targets:
        return 0
    text = encode(message)
    results = await asyncio.gather(*(_send_quietly(connection, text, timeout) for connection in targets))
    return sum(results)
