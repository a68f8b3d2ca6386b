"""
Block containers.

A block header commits to its parent, the post-state root and the roots of
its transactions and receipts. The block hash is the keccak-256 digest of the
header's RLP encoding, which is how blocks are addressed in storage and how
checkpoints and bad hashes identify them.
"""

from __future__ import annotations

from typing import Self

from pydantic import Field

from fork_spec.types import (
    EMPTY_LIST_HASH,
    EMPTY_ROOT,
    ZERO_HASH,
    Address,
    Bytes8,
    Bytes32,
    Bytes256,
    StrictBaseModel,
    big_endian_to_int,
    int_to_big_endian,
    rlp_hash,
)
from fork_spec.types.rlp import RLPDecodingError, RLPItem, decode_rlp_list, encode_rlp

HEADER_FIELD_COUNT = 15
"""Number of items in an RLP-encoded header."""


class Header(StrictBaseModel):
    """A block header."""

    parent_hash: Bytes32 = ZERO_HASH
    uncle_hash: Bytes32 = EMPTY_LIST_HASH
    coinbase: Address = Address.zero()

    root: Bytes32 = EMPTY_ROOT
    """State root after applying the block."""

    tx_hash: Bytes32 = EMPTY_ROOT
    receipt_hash: Bytes32 = EMPTY_ROOT
    bloom: Bytes256 = Bytes256.zero()
    difficulty: int = Field(default=0, ge=0)
    number: int = Field(default=0, ge=0)
    gas_limit: int = Field(default=0, ge=0)
    gas_used: int = Field(default=0, ge=0)
    time: int = Field(default=0, ge=0)
    extra: bytes = b""
    mix_digest: Bytes32 = ZERO_HASH
    nonce: Bytes8 = Bytes8.zero()

    def to_rlp(self) -> list[RLPItem]:
        """The header as an RLP list, in canonical field order."""
        return [
            bytes(self.parent_hash),
            bytes(self.uncle_hash),
            bytes(self.coinbase),
            bytes(self.root),
            bytes(self.tx_hash),
            bytes(self.receipt_hash),
            bytes(self.bloom),
            int_to_big_endian(self.difficulty),
            int_to_big_endian(self.number),
            int_to_big_endian(self.gas_limit),
            int_to_big_endian(self.gas_used),
            int_to_big_endian(self.time),
            self.extra,
            bytes(self.mix_digest),
            bytes(self.nonce),
        ]

    @classmethod
    def from_rlp(cls, item: RLPItem) -> Self:
        """
        Rebuild a header from its RLP list.

        Raises:
            RLPDecodingError: If the item does not have the header's shape.
        """
        if not isinstance(item, list) or len(item) != HEADER_FIELD_COUNT:
            raise RLPDecodingError(f"Expected a {HEADER_FIELD_COUNT}-item header list")
        fields = []
        for index, value in enumerate(item):
            if not isinstance(value, bytes):
                raise RLPDecodingError(f"Header field {index} is not a byte string")
            fields.append(value)

        try:
            return cls(
                parent_hash=Bytes32(fields[0]),
                uncle_hash=Bytes32(fields[1]),
                coinbase=Address(fields[2]),
                root=Bytes32(fields[3]),
                tx_hash=Bytes32(fields[4]),
                receipt_hash=Bytes32(fields[5]),
                bloom=Bytes256(fields[6]),
                difficulty=big_endian_to_int(fields[7]),
                number=big_endian_to_int(fields[8]),
                gas_limit=big_endian_to_int(fields[9]),
                gas_used=big_endian_to_int(fields[10]),
                time=big_endian_to_int(fields[11]),
                extra=fields[12],
                mix_digest=Bytes32(fields[13]),
                nonce=Bytes8(fields[14]),
            )
        except ValueError as e:
            raise RLPDecodingError(f"Malformed header: {e}") from e

    def hash(self) -> Bytes32:
        """Keccak-256 of the RLP-encoded header."""
        return rlp_hash(self.to_rlp())


class Block(StrictBaseModel):
    """
    A block: header plus body.

    Only headers are modeled in detail. Transactions and uncles are kept as
    opaque RLP items; a genesis block has neither.
    """

    header: Header

    transactions: tuple[bytes, ...] = ()
    """RLP-encoded transactions."""

    uncles: tuple[Header, ...] = ()

    @property
    def number(self) -> int:
        """Height of the block."""
        return self.header.number

    def hash(self) -> Bytes32:
        """Hash of the block's header."""
        return self.header.hash()

    def encode_bytes(self) -> bytes:
        """RLP encoding: `[header, transactions, uncles]`."""
        return encode_rlp(
            [
                self.header.to_rlp(),
                list(self.transactions),
                [uncle.to_rlp() for uncle in self.uncles],
            ]
        )

    @classmethod
    def decode_bytes(cls, data: bytes) -> Self:
        """
        Parse an RLP-encoded block.

        Raises:
            RLPDecodingError: If the data is not a well-formed block.
        """
        items = decode_rlp_list(data)
        if len(items) != 3:
            raise RLPDecodingError("Expected a 3-item block list")
        header_item, tx_items, uncle_items = items
        if not isinstance(tx_items, list) or not isinstance(uncle_items, list):
            raise RLPDecodingError("Block body must hold two lists")

        transactions = []
        for tx in tx_items:
            if not isinstance(tx, bytes):
                raise RLPDecodingError("Transactions must be byte strings")
            transactions.append(tx)

        return cls(
            header=Header.from_rlp(header_item),
            transactions=tuple(transactions),
            uncles=tuple(Header.from_rlp(uncle) for uncle in uncle_items),
        )
