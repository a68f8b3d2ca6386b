"""Keccak-256 hashing and the well-known digests derived from it."""

from __future__ import annotations

from Crypto.Hash import keccak

from .byte_arrays import Bytes32
from .rlp import RLPItem, encode_rlp


def keccak256(data: bytes) -> Bytes32:
    """Compute the keccak-256 digest of `data`."""
    k = keccak.new(digest_bits=256)
    k.update(data)
    return Bytes32(k.digest())


def rlp_hash(item: RLPItem) -> Bytes32:
    """Compute the keccak-256 digest of an item's RLP encoding."""
    return keccak256(encode_rlp(item))


EMPTY_ROOT: Bytes32 = rlp_hash(b"")
"""Root of an empty trie: keccak256(rlp(b"")), 0x56e81f...b421."""

EMPTY_LIST_HASH: Bytes32 = rlp_hash([])
"""Hash of an empty RLP list; the uncle hash of a block without uncles."""

EMPTY_CODE_HASH: Bytes32 = keccak256(b"")
"""Code hash of an account without code."""
