"""
Session payload serialization for dict-shaped sessions.

Supports: str, int, float, dict, list, bytes, bool, None (and anything else
orjson serializes natively, such as datetimes, which come back as strings).
bytes values are wrapped as {"__session_bytes_b64__": "<base64>"} for safe
JSON round-trip, at any nesting depth.
"""
import base64
import binascii
from collections.abc import Mapping
from typing import Any

import orjson

_BYTES_WRAPPER_KEY = "__session_bytes_b64__"


def _default(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return {_BYTES_WRAPPER_KEY: base64.b64encode(bytes(value)).decode("ascii")}
    raise TypeError(f"Type is not session serializable: {type(value).__name__}")


def _restore(value: Any) -> Any:
    if isinstance(value, dict):
        wrapped = value.get(_BYTES_WRAPPER_KEY)
        if len(value) == 1 and isinstance(wrapped, str):
            try:
                return base64.b64decode(wrapped, validate=True)
            except binascii.Error:
                pass
        return {k: _restore(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_restore(v) for v in value]
    return value


def encode_session(data: Mapping[str, Any]) -> bytes:
    """Serialize a session mapping to bytes for encryption.

    Args:
        data: Session mapping with string keys.

    Returns:
        orjson-encoded bytes.

    Raises:
        TypeError: If a value cannot be serialized.
    """
    return orjson.dumps(dict(data), default=_default)


def decode_session(payload: bytes) -> dict[str, Any]:
    """Deserialize bytes produced by ``encode_session``.

    An empty payload is an empty session.

    Args:
        payload: orjson-encoded bytes.

    Returns:
        The session mapping.

    Raises:
        ValueError: If the payload is not JSON or not a JSON object.
    """
    if not payload:
        return {}
    parsed = orjson.loads(payload)
    if not isinstance(parsed, dict):
        raise ValueError(
            f"Session payload must be a JSON object, got {type(parsed).__name__}"
        )
    # the top level is always the session mapping itself, never a wrapped value
    return {key: _restore(value) for key, value in parsed.items()}
