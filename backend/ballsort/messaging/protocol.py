"""Abstract connection protocol for JSON text communication."""

from abc import ABC, abstractmethod
from typing import Any

from ballsort.messaging.encoder import encode


class ConnectionProtocol(ABC):
    """
    Abstract interface for a client connection.

    This abstraction allows message handling logic to be tested
    without real WebSocket connections.
    """

    @property
    @abstractmethod
    def connection_id(self) -> str:
        """Unique identifier for this connection."""
        ...

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """True once the server has closed this connection."""
        ...

    @abstractmethod
    async def send_text(self, data: str) -> None:
        """
        Send an encoded text frame to the client.
        """
        ...

    @abstractmethod
    async def receive_frame(self) -> str | bytes:
        """
        Receive the next raw frame from the client.
        """
        ...

    @abstractmethod
    async def close(self, code: int = 1000, reason: str = "") -> None:
        """
        Close the connection.
        """
        ...

    async def send_message(self, data: dict[str, Any]) -> None:
        """
        Send a message to the client using JSON encoding.
        """
        await self.send_text(encode(data))
