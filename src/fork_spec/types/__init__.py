"""Reusable type definitions for fork-spec."""

from .base import CamelModel, ConfigModel, StrictBaseModel
from .byte_arrays import ZERO_HASH, Address, BaseBytes, Bytes8, Bytes20, Bytes32, Bytes256
from .exceptions import ForkSpecError, HexDecodeError, IntegerParseError
from .hashing import EMPTY_CODE_HASH, EMPTY_LIST_HASH, EMPTY_ROOT, keccak256, rlp_hash
from .hex import FixedHex, PrefixedHex
from .numeric import big_endian_to_int, int_to_big_endian, parse_big_int

__all__ = [
    # Models
    "CamelModel",
    "ConfigModel",
    "StrictBaseModel",
    # Byte types
    "Address",
    "BaseBytes",
    "Bytes8",
    "Bytes20",
    "Bytes32",
    "Bytes256",
    "ZERO_HASH",
    # Hex codecs
    "FixedHex",
    "PrefixedHex",
    # Numbers
    "parse_big_int",
    "int_to_big_endian",
    "big_endian_to_int",
    # Hashing
    "keccak256",
    "rlp_hash",
    "EMPTY_ROOT",
    "EMPTY_LIST_HASH",
    "EMPTY_CODE_HASH",
    # Exceptions
    "ForkSpecError",
    "HexDecodeError",
    "IntegerParseError",
]
