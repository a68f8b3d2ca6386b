"""
Genesis dump format.

A genesis dump describes the first block of a chain: its header fields as
`0x`-prefixed hex strings and `alloc`, the accounts that exist before any
transaction runs. The format is the geth chain spec genesis subformat:

    {
        "nonce": "0x0000000000000042",
        "timestamp": "0x00",
        "parentHash": "0x0000...0000",
        "extraData": "0x11bbe8db...",
        "gasLimit": "0x1388",
        "difficulty": "0x0400000000",
        "mixhash": "0x0000...0000",
        "coinbase": "0x0000...0000",
        "alloc": {
            "3282791d6fd713f1e94f4bfd565eaa78b3a0599d": {"balance": "1337000000000000000000"}
        }
    }

Values are kept as strings on load and decoded when the genesis block is
built, so every decode failure can name the field it came from.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, TypeVar

import yaml
from pydantic import Field, ValidationInfo, field_validator

from fork_spec.subspecs.containers import Header
from fork_spec.types import (
    Address,
    Bytes8,
    Bytes32,
    ConfigModel,
    FixedHex,
    HexDecodeError,
    PrefixedHex,
)

from .exceptions import MalformedGenesisError

T = TypeVar("T")

_YAML_INT_TAG = "tag:yaml.org,2002:int"

_FIXED_WIDTH_DIGITS = {
    "nonce": 2 * Bytes8.LENGTH,
    "parent_hash": 2 * Bytes32.LENGTH,
    "mixhash": 2 * Bytes32.LENGTH,
    "coinbase": 2 * Address.LENGTH,
}
"""Hex digits of the header fields that decode against a fixed width."""

_VARIABLE_WIDTH_BYTES = {"extra_data"}
"""Header fields holding raw bytes of no fixed width. An integer cannot stand for them."""


class _GenesisLoader(yaml.SafeLoader):
    """
    Safe YAML loader that keeps integer-looking scalars as text.

    `0x0000aa` stays three bytes instead of becoming 170, and an unquoted
    all-digit address keeps its digits.
    """


_GenesisLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _YAML_INT_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _int_to_prefixed_hex(value: int, digits: int | None) -> str:
    """
    Convert an integer back into a hex string.

    Data loaded by a plain YAML loader carries `0x...` scalars as integers.
    Fixed-width fields are padded back to their width; the rest get an even
    number of digits.
    """
    if digits is None:
        text = f"{value:x}"
        digits = len(text) + len(text) % 2
    return f"0x{value:0{digits}x}"


def decode_field(field: str, decode: Callable[[], T], *, address: str | None = None) -> T:
    """
    Run `decode`, naming `field` (and the account, if given) when it fails.

    Raises:
        MalformedGenesisError: If `decode` raises `HexDecodeError`.
    """
    try:
        return decode()
    except HexDecodeError as e:
        raise MalformedGenesisError(field, e.message, address=address) from e


class GenesisAlloc(ConfigModel):
    """A pre-funded account of the genesis state."""

    code: PrefixedHex = PrefixedHex("")
    storage: dict[FixedHex, FixedHex] = Field(default_factory=dict)

    balance: str = "0"
    """Balance in wei as a decimal string. Hex and octal are accepted too."""

    @field_validator("balance", mode="before")
    @classmethod
    def _balance_to_str(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("code", mode="before")
    @classmethod
    def _code_must_be_text(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, int) and not isinstance(v, bool):
            raise ValueError(f"code must be a quoted string, got the integer {v}")
        return v

    @field_validator("storage", mode="before")
    @classmethod
    def _null_storage_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class GenesisDump(ConfigModel):
    """The genesis block of a chain and its initial allocation."""

    nonce: PrefixedHex = PrefixedHex("")
    timestamp: PrefixedHex = PrefixedHex("")
    parent_hash: PrefixedHex = PrefixedHex("")
    extra_data: PrefixedHex = PrefixedHex("")
    gas_limit: PrefixedHex = PrefixedHex("")
    difficulty: PrefixedHex = PrefixedHex("")

    mixhash: PrefixedHex = PrefixedHex("")
    """Mix digest. The wire key is all lower case."""

    coinbase: PrefixedHex = PrefixedHex("")

    alloc: dict[FixedHex, GenesisAlloc] = Field(default_factory=dict)
    """Pre-funded accounts by unprefixed address."""

    @field_validator(
        "nonce",
        "timestamp",
        "parent_hash",
        "extra_data",
        "gas_limit",
        "difficulty",
        "mixhash",
        "coinbase",
        mode="before",
    )
    @classmethod
    def _int_to_hex(cls, v: Any, info: ValidationInfo) -> Any:
        """Convert integers back to hex strings where no bytes are lost."""
        if v is None:
            return ""
        if isinstance(v, int) and not isinstance(v, bool):
            if info.field_name in _VARIABLE_WIDTH_BYTES:
                raise ValueError(
                    f"{info.field_name} must be a quoted string, got the integer {v}"
                )
            return _int_to_prefixed_hex(v, _FIXED_WIDTH_DIGITS.get(info.field_name))
        return v

    @field_validator("alloc", mode="before")
    @classmethod
    def _check_alloc_keys(cls, v: Any) -> Any:
        """
        Require addresses to be strings.

        A plain YAML loader reads an unquoted all-digit address as an
        integer, possibly in octal, and its original text cannot be recovered.
        """
        if v is None:
            return {}
        if isinstance(v, dict):
            for key in v:
                if not isinstance(key, str):
                    raise ValueError(f"alloc address {key!r} must be a quoted string")
        return v

    def header(self) -> Header:
        """
        Decode the header fields.

        The state root is left empty; the caller fills it in once the
        allocation has been committed.

        Raises:
            MalformedGenesisError: If a field does not decode, naming the field.
        """
        return Header(
            nonce=Bytes8(decode_field("nonce", lambda: self.nonce.decode(Bytes8.LENGTH))),
            time=decode_field("timestamp", self.timestamp.to_int),
            parent_hash=Bytes32(
                decode_field("parentHash", lambda: self.parent_hash.decode(Bytes32.LENGTH))
            ),
            extra=decode_field("extraData", self.extra_data.to_bytes),
            gas_limit=decode_field("gasLimit", self.gas_limit.to_int),
            difficulty=decode_field("difficulty", self.difficulty.to_int),
            mix_digest=Bytes32(
                decode_field("mixhash", lambda: self.mixhash.decode(Bytes32.LENGTH))
            ),
            coinbase=Address(
                decode_field("coinbase", lambda: self.coinbase.decode(Address.LENGTH))
            ),
        )

    @classmethod
    def from_yaml(cls, content: str) -> GenesisDump:
        """
        Parse a genesis dump from YAML text.

        Integer-looking scalars are kept as written, so unquoted hex values
        keep their leading zeros.

        Raises:
            yaml.YAMLError: If the text is not valid YAML.
            pydantic.ValidationError: If the data fails validation.
        """
        data = yaml.load(content, Loader=_GenesisLoader)
        return cls.model_validate(data if data is not None else {})

    @classmethod
    def from_yaml_file(cls, path: Path | str) -> GenesisDump:
        """
        Load a genesis dump from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            yaml.YAMLError: If the file is not valid YAML.
            pydantic.ValidationError: If the data fails validation.
        """
        path = Path(path)
        with path.open(encoding="utf-8") as f:
            return cls.from_yaml(f.read())
