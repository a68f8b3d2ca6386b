"""
Recursive Length Prefix (RLP) Encoding
======================================

RLP is the serialization Ethereum uses for headers, blocks and account records.
Block hashes and state roots in this package are keccak-256 digests of RLP.

An item is either a byte string or a list of items. The first byte tells
which, and how long the payload is:

+-------------+--------------------------------------------------+
| Prefix      | Meaning                                          |
+=============+==================================================+
| [0x00-0x7f] | A single byte, encoded as itself                 |
+-------------+--------------------------------------------------+
| [0x80-0xb7] | String of 0-55 bytes, length = prefix - 0x80     |
+-------------+--------------------------------------------------+
| [0xb8-0xbf] | Longer string, prefix - 0xb7 = length of length  |
+-------------+--------------------------------------------------+
| [0xc0-0xf7] | List with 0-55 payload bytes                     |
+-------------+--------------------------------------------------+
| [0xf8-0xff] | Longer list, prefix - 0xf7 = length of length    |
+-------------+--------------------------------------------------+

References:
- Ethereum Yellow Paper, Appendix B
"""

from __future__ import annotations

from typing import TypeAlias

from .exceptions import ForkSpecError

RLPItem: TypeAlias = bytes | list["RLPItem"]
"""A byte string or a (nested) list of byte strings."""

STRING_OFFSET = 0x80
"""Prefix base for byte strings."""

LIST_OFFSET = 0xC0
"""Prefix base for lists."""

SHORT_PAYLOAD_MAX = 55
"""Largest payload whose length fits in the prefix byte itself."""


class RLPDecodingError(ForkSpecError):
    """Error during RLP decoding."""


def encode_rlp(item: RLPItem) -> bytes:
    """
    Encode an item using RLP.

    Raises:
        TypeError: If item is neither bytes nor a list.
    """
    if isinstance(item, (bytes, bytearray)):
        data = bytes(item)
        if len(data) == 1 and data[0] < STRING_OFFSET:
            return data
        return _prefix(len(data), STRING_OFFSET) + data
    if isinstance(item, list):
        payload = b"".join(encode_rlp(child) for child in item)
        return _prefix(len(payload), LIST_OFFSET) + payload
    raise TypeError(f"Cannot RLP encode type: {type(item).__name__}")


def _prefix(length: int, offset: int) -> bytes:
    """Build the prefix for a payload of `length` bytes."""
    if length <= SHORT_PAYLOAD_MAX:
        return bytes([offset + length])
    length_bytes = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([offset + SHORT_PAYLOAD_MAX + len(length_bytes)]) + length_bytes


def decode_rlp(data: bytes) -> RLPItem:
    """
    Decode a single RLP item that spans all of `data`.

    Raises:
        RLPDecodingError: If data is empty, malformed, non-canonical or has trailing bytes.
    """
    if not data:
        raise RLPDecodingError("Empty RLP data")
    item, end = _decode_at(data, 0)
    if end != len(data):
        raise RLPDecodingError(f"Trailing data: decoded {end} of {len(data)} bytes")
    return item


def decode_rlp_list(data: bytes) -> list[RLPItem]:
    """
    Decode `data` and require the top-level item to be a list.

    Raises:
        RLPDecodingError: If the decoded item is a byte string.
    """
    item = decode_rlp(data)
    if not isinstance(item, list):
        raise RLPDecodingError("Expected RLP list")
    return item


def _decode_at(data: bytes, offset: int) -> tuple[RLPItem, int]:
    """Decode the item starting at `offset`; return it and the offset past it."""
    if offset >= len(data):
        raise RLPDecodingError("Unexpected end of data")

    prefix = data[offset]
    if prefix < STRING_OFFSET:
        return data[offset : offset + 1], offset + 1

    is_list = prefix >= LIST_OFFSET
    base = LIST_OFFSET if is_list else STRING_OFFSET
    start, length = _read_length(data, offset, prefix - base)
    end = start + length
    if end > len(data):
        raise RLPDecodingError(f"Data too short: need {end}, have {len(data)}")

    if not is_list:
        # A lone byte below 0x80 must be encoded as itself.
        if length == 1 and data[start] < STRING_OFFSET:
            raise RLPDecodingError("Non-canonical: single byte encoded as string")
        return data[start:end], end

    items: list[RLPItem] = []
    cursor = start
    while cursor < end:
        child, cursor = _decode_at(data, cursor)
        items.append(child)
    if cursor != end:
        raise RLPDecodingError("List payload length mismatch")
    return items, end


def _read_length(data: bytes, offset: int, marker: int) -> tuple[int, int]:
    """
    Interpret the prefix marker (prefix minus base) at `offset`.

    Returns the payload start offset and the payload length.
    """
    if marker <= SHORT_PAYLOAD_MAX:
        return offset + 1, marker

    len_of_len = marker - SHORT_PAYLOAD_MAX
    start = offset + 1
    if start + len_of_len > len(data):
        raise RLPDecodingError("Data too short for length prefix")
    if data[start] == 0:
        raise RLPDecodingError("Non-canonical: leading zeros in length encoding")

    length = int.from_bytes(data[start : start + len_of_len], "big")
    if length <= SHORT_PAYLOAD_MAX:
        raise RLPDecodingError("Non-canonical: long encoding for short payload")
    return start + len_of_len, length
