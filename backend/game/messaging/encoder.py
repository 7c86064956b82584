"""
MessagePack encoder/decoder for the WebSocket wire format.

Every frame in either direction is a single MessagePack map. encode() packs
outgoing dicts; decode() unpacks incoming frames under size limits and
rejects anything that is not a map.
"""

from typing import Any

import msgpack


class DecodeError(Exception):
    """Error raised when an incoming frame cannot be decoded into a map."""


# Size limits to prevent resource exhaustion from malicious payloads.
# Client frames are tiny (a join, a move, a ping), so the caps are tight.
MAX_BUFFER_LEN = 16 * 1024  # 16KB total payload
MAX_STR_LEN = 1024  # per string
MAX_BIN_LEN = 1024  # per binary
MAX_ARRAY_LEN = 64  # max array elements
MAX_MAP_LEN = 32  # max map entries
MAX_EXT_LEN = 64  # max extension data


def encode(data: dict[str, Any]) -> bytes:
    """
    Encode a dict to MessagePack bytes.

    Strings are packed as str, bytes as bin (use_bin_type).
    """
    return msgpack.packb(data, use_bin_type=True)


def decode(data: bytes) -> dict[str, Any]:
    """
    Decode MessagePack bytes to a dict.

    Raises DecodeError if data is invalid, not a map, or exceeds size limits.
    """
    if len(data) > MAX_BUFFER_LEN:
        raise DecodeError(f"payload too large: {len(data)} bytes (max {MAX_BUFFER_LEN})")
    try:
        result = msgpack.unpackb(
            data,
            raw=False,
            strict_map_key=True,
            max_str_len=MAX_STR_LEN,
            max_bin_len=MAX_BIN_LEN,
            max_array_len=MAX_ARRAY_LEN,
            max_map_len=MAX_MAP_LEN,
            max_ext_len=MAX_EXT_LEN,
        )
    except (msgpack.UnpackException, ValueError) as e:
        raise DecodeError(f"failed to decode MessagePack data: {e}") from e

    if not isinstance(result, dict):
        raise DecodeError(f"expected map, got {type(result).__name__}")

    return result
