"""
Arbitrary-precision integer parsing for configuration values.

Configuration files carry heights, lengths, chain ids and balances either as
JSON integers or as numeric strings. Strings use base auto-detection:

- `0x` / `0X`: hexadecimal
- `0o` / `0O`: octal
- `0b` / `0B`: binary
- a leading `0` followed by octal digits: legacy octal (`010` is 8)
- anything else: decimal

An optional sign and `_` digit separators are accepted, as Python's own
integer literals allow.
"""

from __future__ import annotations

import re
from typing import Any

from .exceptions import IntegerParseError

_LEGACY_OCTAL = re.compile(r"^([+-]?)0([0-7_]+)$")
"""Matches C-style octal literals such as `0755` that `int(x, 0)` rejects."""


def parse_big_int(value: Any) -> int:
    """
    Parse an integer with base auto-detection.

    Args:
        value: An `int` or a numeric string.

    Returns:
        The parsed integer.

    Raises:
        IntegerParseError: If the value is not an integer or a parseable string.
    """
    # bool is an int subclass but never a meaningful configuration number.
    if isinstance(value, bool):
        raise IntegerParseError(value)
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        raise IntegerParseError(value)

    # int() would quietly strip surrounding whitespace.
    if value != value.strip():
        raise IntegerParseError(value)

    text = value
    match = _LEGACY_OCTAL.match(text)
    if match is not None:
        sign, digits = match.groups()
        text = f"{sign}0o{digits}"

    try:
        return int(text, 0)
    except ValueError as e:
        raise IntegerParseError(value) from e


def int_to_big_endian(value: int) -> bytes:
    """Encode a non-negative integer as minimal big-endian bytes (zero is empty)."""
    if value < 0:
        raise ValueError(f"cannot encode negative integer {value}")
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def big_endian_to_int(data: bytes) -> int:
    """Decode big-endian bytes as an unsigned integer (empty is zero)."""
    return int.from_bytes(data, "big")
