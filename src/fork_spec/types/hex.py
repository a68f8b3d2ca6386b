"""
Hexadecimal string codecs used by the genesis and chain configuration formats.

Two encodings appear on the wire:

- `FixedHex`: bare hex digits, no prefix. Decoding is always against a known
  width; a string of exactly `2 * N` digits fills an `N`-byte buffer.
- `PrefixedHex`: `0x` followed by hex digits. The empty string and a bare
  `0x` both mean "nothing" (no bytes, integer zero).

Both types are `str` subclasses. They validate as plain strings, so a genesis
file loads without touching its contents; decoding happens where the caller
knows the expected width and can attach field context to any failure.
"""

from __future__ import annotations

import binascii
from typing import Any

from pydantic.annotated_handlers import GetCoreSchemaHandler
from pydantic_core import core_schema
from typing_extensions import Self

from .exceptions import HexDecodeError
from .numeric import big_endian_to_int

HEX_PREFIX = "0x"
"""Prefix that marks a `PrefixedHex` string."""


def _unhex(value: str, digits: str) -> bytes:
    """Decode hex digits, reporting invalid characters as `HexDecodeError`."""
    try:
        return binascii.unhexlify(digits)
    except (binascii.Error, ValueError) as e:
        raise HexDecodeError(value, f"invalid hex: {e}") from e


class _HexString(str):
    """Shared pydantic integration for the hex string types."""

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """
        Validate as a string and wrap it in this class.

        Content is not checked here. Serialization emits the string unchanged.
        """
        return core_schema.no_info_after_validator_function(
            cls,
            core_schema.str_schema(),
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"


class FixedHex(_HexString):
    """A hexadecimal string without prefix, decoded against a fixed width."""

    def decode(self, length: int) -> bytes:
        """
        Decode into exactly `length` bytes.

        Raises:
            HexDecodeError: If the string is not `2 * length` digits of hex.
        """
        if len(self) != 2 * length:
            raise HexDecodeError(
                str(self),
                f"want {2 * length} hexadecimals",
                expected_digits=2 * length,
            )
        return _unhex(str(self), str(self))

    @classmethod
    def from_bytes(cls, data: bytes) -> Self:
        """Encode raw bytes as bare hex digits."""
        return cls(data.hex())


class PrefixedHex(_HexString):
    """A hexadecimal string with a `0x` prefix. Empty and `0x` decode to nothing."""

    def _digits(self) -> str | None:
        """Return the digits after the prefix, or None when the value is empty."""
        text = str(self)
        if len(text) == 0:
            return None
        if len(text) == 1 or not text.startswith(HEX_PREFIX):
            raise HexDecodeError(text, "want 0x prefix")
        if len(text) == 2:
            return None
        return text[2:]

    def decode(self, length: int) -> bytes:
        """
        Decode into exactly `length` bytes.

        An empty value decodes to `length` zero bytes, matching an untouched buffer.

        Raises:
            HexDecodeError: On a missing prefix, a width mismatch or bad digits.
        """
        digits = self._digits()
        if digits is None:
            return bytes(length)
        if len(digits) != 2 * length:
            raise HexDecodeError(
                str(self),
                f"want {2 * length} hexadecimals with 0x prefix",
                expected_digits=2 * length,
            )
        return _unhex(str(self), digits)

    def to_bytes(self) -> bytes:
        """
        Decode a variable-width value.

        Raises:
            HexDecodeError: On a missing prefix, an odd digit count or bad digits.
        """
        digits = self._digits()
        if digits is None:
            return b""
        if len(digits) % 2 != 0:
            raise HexDecodeError(str(self), "odd number of hexadecimals")
        return _unhex(str(self), digits)

    def to_int(self) -> int:
        """Decode as a big-endian unsigned integer (empty is zero)."""
        return big_endian_to_int(self.to_bytes())

    @classmethod
    def from_bytes(cls, data: bytes) -> Self:
        """Encode raw bytes with the `0x` prefix."""
        return cls(HEX_PREFIX + data.hex())

    @classmethod
    def from_int(cls, value: int, length: int | None = None) -> Self:
        """
        Encode an unsigned integer.

        Without `length`, the minimal even-width encoding is used (zero is `0x`).
        """
        if length is None:
            length = (value.bit_length() + 7) // 8
        return cls.from_bytes(value.to_bytes(length, "big"))
