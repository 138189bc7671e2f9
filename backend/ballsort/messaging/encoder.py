"""
JSON encoder/decoder for wire format communication.

Every frame is a UTF-8 JSON object ``{"type": ..., "data": ...}``. Inbound
frames are size-checked in encoded bytes before parsing.
"""

import json
from typing import Any

# Size limit to keep a single frame from costing more than a tiny parse.
MAX_MESSAGE_SIZE = 1024


def encode(data: dict[str, Any]) -> str:
    """
    Encode a dict to compact JSON text.
    """
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


class DecodeError(Exception):
    """Error raised when an inbound frame cannot be turned into an envelope."""


def decode(data: str | bytes, max_size: int = MAX_MESSAGE_SIZE) -> dict[str, Any]:
    """
    Decode a JSON text or binary frame to a dict.

    Raises DecodeError if the frame is too large, is not valid UTF-8 JSON,
    is not an object, or lacks a string ``type`` field.
    """
    raw = data.encode("utf-8", errors="surrogatepass") if isinstance(data, str) else data
    if len(raw) > max_size:
        raise DecodeError(f"payload too large: {len(raw)} bytes (max {max_size})")
    try:
        result = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
        raise DecodeError(f"failed to decode JSON data: {e}") from e

    if not isinstance(result, dict):
        raise DecodeError(f"expected object, got {type(result).__name__}")
    if not isinstance(result.get("type"), str):
        raise DecodeError("missing message type")

    return result
