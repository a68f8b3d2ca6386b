"""
Fixed-length byte types.

Hashes, addresses, nonces and blooms all have a width fixed by the protocol.
Each width gets its own `bytes` subclass so a 20-byte address can never be
passed where a 32-byte hash is expected.
"""

from __future__ import annotations

from typing import Any, ClassVar, Iterable, SupportsIndex

from pydantic.annotated_handlers import GetCoreSchemaHandler
from pydantic_core import core_schema
from typing_extensions import Self


def _coerce_to_bytes(value: Any) -> bytes:
    """Turn bytes, an iterable of octets, or hex text (with or without `0x`) into bytes."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        return bytes.fromhex(value.removeprefix("0x"))
    if isinstance(value, Iterable):
        return bytes(bytearray(value))
    return bytes(value)


class BaseBytes(bytes):
    """A `bytes` value whose width is fixed by the subclass `LENGTH`."""

    LENGTH: ClassVar[int]
    """Width in bytes."""

    def __new__(cls, value: Any = b"") -> Self:
        """
        Build a value of exactly `LENGTH` bytes.

        Raises:
            ValueError: If the resulting byte length differs from `LENGTH`.
        """
        if not hasattr(cls, "LENGTH"):
            raise TypeError(f"{cls.__name__} must define LENGTH")

        b = _coerce_to_bytes(value)
        if len(b) != cls.LENGTH:
            raise ValueError(f"{cls.__name__} expects exactly {cls.LENGTH} bytes, got {len(b)}")
        return super().__new__(cls, b)

    @classmethod
    def zero(cls) -> Self:
        """The all-zero value of this width."""
        return cls(b"\x00" * cls.LENGTH)

    def is_zero(self) -> bool:
        """Whether every byte is zero."""
        return not any(self)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """
        Accept instances as they are and coerce raw bytes or hex text.

        Values serialize as `0x`-prefixed hex.
        """

        def validate(value: Any) -> BaseBytes:
            try:
                return cls(value)
            except (TypeError, ValueError) as e:
                raise ValueError(str(e)) from e

        return core_schema.union_schema(
            [
                core_schema.is_instance_schema(cls),
                core_schema.no_info_plain_validator_function(validate),
            ],
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda x: "0x" + x.hex()
            ),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.hex()})"

    def __hash__(self) -> int:
        return hash((type(self), bytes(self)))

    def hex(self, sep: str | bytes | None = None, bytes_per_sep: SupportsIndex = 1) -> str:
        """Bare hex digits, without the `0x` prefix."""
        return bytes(self).hex() if sep is None else bytes(self).hex(sep, bytes_per_sep)


class Bytes8(BaseBytes):
    """Fixed-size byte array of exactly 8 bytes (block nonce)."""

    LENGTH = 8


class Bytes20(BaseBytes):
    """Fixed-size byte array of exactly 20 bytes (account address)."""

    LENGTH = 20


class Bytes32(BaseBytes):
    """Fixed-size byte array of exactly 32 bytes (hashes, roots, storage slots)."""

    LENGTH = 32


class Bytes256(BaseBytes):
    """Fixed-size byte array of exactly 256 bytes (log bloom)."""

    LENGTH = 256


Address = Bytes20
"""An account address."""

ZERO_HASH: Bytes32 = Bytes32.zero()
"""The all-zero hash. Used as "no root" and "no checkpoint"."""
