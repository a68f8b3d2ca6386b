"""
Genesis block materialization.

Turns a genesis dump into the first block of a ledger: the allocation is
committed to a fresh state, the header is built on top of the resulting
root, and block, total difficulty, receipts and chain pointers are written.

Writing is not transactional. Each record commits on its own, so a failure
part way through leaves the earlier records in place; the error names the
step that failed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from fork_spec.subspecs.containers import Block
from fork_spec.subspecs.state import StateDB
from fork_spec.types import (
    Address,
    Bytes32,
    FixedHex,
    IntegerParseError,
    PrefixedHex,
    parse_big_int,
)

from .dump import GenesisAlloc, GenesisDump, decode_field
from .exceptions import MalformedGenesisError, StorageWriteError

if TYPE_CHECKING:
    from fork_spec.subspecs.storage import Database

logger = logging.getLogger(__name__)

TEST_GAS_LIMIT = PrefixedHex("0x47E7C4")
"""Gas limit of the genesis block written for tests."""

TEST_DIFFICULTY = PrefixedHex("0x020000")
"""Difficulty of the genesis block written for tests."""


@dataclass(frozen=True, slots=True)
class GenesisAccount:
    """An address and the balance it starts with."""

    address: Address
    balance: int


def _apply_alloc(state: StateDB, address_hex: FixedHex, account: GenesisAlloc) -> None:
    """Credit one allocation entry to the state."""
    address = Address(decode_field("address", lambda: address_hex.decode(Address.LENGTH)))

    try:
        balance = parse_big_int(account.balance)
    except IntegerParseError as e:
        raise MalformedGenesisError(
            "balance", repr(account.balance), address=str(address_hex)
        ) from e
    if balance < 0:
        raise MalformedGenesisError("balance", repr(account.balance), address=str(address_hex))
    state.add_balance(address, balance)

    code = decode_field("code", account.code.to_bytes, address=str(address_hex))
    state.set_code(address, code)

    for key, value in account.storage.items():
        slot = decode_field("key", lambda: key.decode(Bytes32.LENGTH), address=str(address_hex))
        data = decode_field("value", lambda: value.decode(Bytes32.LENGTH), address=str(address_hex))
        state.set_state(address, Bytes32(slot), Bytes32(data))


def _write(step: str, write: Callable[[], None]) -> None:
    try:
        write()
    except Exception as e:
        raise StorageWriteError(step, e) from e


def write_genesis_block(db: Database, dump: GenesisDump) -> Block:
    """
    Materialize a genesis dump into the ledger.

    Writing the same dump twice is harmless: when the block is already
    stored, only the canonical hash at height 0 is rewritten and the stored
    block is returned.

    Returns:
        The genesis block.

    Raises:
        MalformedGenesisError: If a header field or allocation does not decode.
        StorageWriteError: If a write fails, naming the step that failed.
    """
    state = StateDB(db)
    for address_hex, account in dump.alloc.items():
        _apply_alloc(state, address_hex, account)
    root, batch = state.commit_batch()

    header = dump.header().model_copy(update={"root": root})
    block = Block(header=header)
    block_hash = block.hash()

    if db.has_block(block_hash):
        logger.info("Genesis block already in chain. Writing canonical number")
        _write("canonical hash", lambda: db.put_canonical_hash(block.number, block_hash))
        stored = db.get_block(block_hash)
        return stored if stored is not None else block

    _write("state", batch.write)
    _write("total difficulty", lambda: db.put_td(block_hash, header.difficulty))
    _write("block", lambda: db.put_block(block))
    _write("receipts", lambda: db.put_receipts(block_hash, ()))
    _write("canonical hash", lambda: db.put_canonical_hash(block.number, block_hash))
    _write("head block hash", lambda: db.put_head_block_hash(block_hash))

    logger.info(
        "Wrote genesis block 0x%s with %d accounts (state root 0x%s)",
        block_hash.hex()[:16],
        len(dump.alloc),
        root.hex()[:16],
    )
    return block


def write_test_genesis_block(db: Database, *accounts: GenesisAccount) -> Block:
    """Write a minimal genesis block funding `accounts`, for tests."""
    dump = GenesisDump(
        gas_limit=TEST_GAS_LIMIT,
        difficulty=TEST_DIFFICULTY,
        alloc={
            FixedHex.from_bytes(bytes(account.address)): GenesisAlloc(balance=str(account.balance))
            for account in accounts
        },
    )
    return write_genesis_block(db, dump)


def make_genesis_dump(db: Database) -> GenesisDump | None:
    """
    Rebuild the genesis dump of the canonical chain.

    Header integers are written as 32-byte hex values and balances as decimal
    strings. Code and storage are included.

    Returns:
        The dump, or None if the ledger has no canonical genesis block.

    Raises:
        StateNotFoundError: If the genesis state snapshot is missing.
    """
    genesis_hash = db.get_canonical_hash(0)
    if genesis_hash is None:
        return None
    genesis = db.get_block(genesis_hash)
    if genesis is None:
        return None

    header = genesis.header
    state = StateDB(db, header.root)

    alloc = {
        FixedHex.from_bytes(bytes(address)): GenesisAlloc(
            code=PrefixedHex.from_bytes(account.code),
            storage={
                FixedHex.from_bytes(bytes(key)): FixedHex.from_bytes(bytes(value))
                for key, value in sorted(account.storage.items())
            },
            balance=str(account.balance),
        )
        for address, account in state.accounts()
    }

    return GenesisDump(
        nonce=PrefixedHex.from_bytes(bytes(header.nonce)),
        timestamp=PrefixedHex.from_int(header.time, 32),
        parent_hash=PrefixedHex.from_bytes(bytes(header.parent_hash)),
        extra_data=PrefixedHex.from_bytes(header.extra),
        gas_limit=PrefixedHex.from_int(header.gas_limit, 32),
        difficulty=PrefixedHex.from_int(header.difficulty, 32),
        mixhash=PrefixedHex.from_bytes(bytes(header.mix_digest)),
        coinbase=PrefixedHex.from_bytes(bytes(header.coinbase)),
        alloc=alloc,
    )
