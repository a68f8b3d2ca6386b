"""Tests for SQLite database implementation."""

from __future__ import annotations

import sqlite3
from contextlib import closing
from pathlib import Path

import pytest

from fork_spec.subspecs.chain import ChainConfig
from fork_spec.subspecs.containers import Block, Header
from fork_spec.subspecs.storage import Database, SQLiteDatabase
from fork_spec.subspecs.storage.namespaces import ALL_NAMESPACES
from fork_spec.types import Bytes32


@pytest.fixture
def block() -> Block:
    """A header-only block."""
    return Block(header=Header(number=7, difficulty=131072, gas_limit=4712388, extra=b"x"))


class TestBlockOperations:
    """Tests for block storage operations."""

    def test_put_and_get_block(self, db: SQLiteDatabase, block: Block) -> None:
        """Block can be stored and retrieved by hash."""
        db.put_block(block)

        retrieved = db.get_block(block.hash())
        assert retrieved == block

    def test_get_nonexistent_block(self, db: SQLiteDatabase) -> None:
        """Getting a nonexistent block returns None."""
        assert db.get_block(Bytes32(b"\x01" * 32)) is None

    def test_has_block(self, db: SQLiteDatabase, block: Block) -> None:
        """has_block returns correct existence status."""
        assert not db.has_block(block.hash())
        db.put_block(block)
        assert db.has_block(block.hash())

    def test_put_block_overwrites(self, db: SQLiteDatabase, block: Block) -> None:
        """Putting the same block twice is harmless."""
        db.put_block(block)
        db.put_block(block)
        assert db.has_block(block.hash())


class TestTotalDifficulty:
    """Tests for total difficulty storage."""

    def test_put_and_get(self, db: SQLiteDatabase) -> None:
        block_hash = Bytes32(b"\x02" * 32)
        db.put_td(block_hash, 17179869184)
        assert db.get_td(block_hash) == 17179869184

    def test_beyond_64_bits(self, db: SQLiteDatabase) -> None:
        """Difficulties larger than SQLite integers are preserved."""
        block_hash = Bytes32(b"\x03" * 32)
        td = 2**200 + 1
        db.put_td(block_hash, td)
        assert db.get_td(block_hash) == td

    def test_missing(self, db: SQLiteDatabase) -> None:
        assert db.get_td(Bytes32(b"\x04" * 32)) is None


class TestReceipts:
    """Tests for receipt storage."""

    def test_empty_receipts_are_stored(self, db: SQLiteDatabase) -> None:
        """An empty receipt set is distinct from no receipts."""
        block_hash = Bytes32(b"\x05" * 32)
        assert db.get_receipts(block_hash) is None

        db.put_receipts(block_hash, ())
        assert db.get_receipts(block_hash) == []

    def test_receipts_round_trip(self, db: SQLiteDatabase) -> None:
        block_hash = Bytes32(b"\x06" * 32)
        db.put_receipts(block_hash, [b"\xc0", b"receipt"])
        assert db.get_receipts(block_hash) == [b"\xc0", b"receipt"]


class TestChainPointers:
    """Tests for the canonical index and head pointer."""

    def test_canonical_hash(self, db: SQLiteDatabase) -> None:
        first = Bytes32(b"\x07" * 32)
        second = Bytes32(b"\x08" * 32)

        assert db.get_canonical_hash(0) is None
        db.put_canonical_hash(0, first)
        assert db.get_canonical_hash(0) == first

        # Reorgs replace the hash at a height.
        db.put_canonical_hash(0, second)
        assert db.get_canonical_hash(0) == second

    def test_head_block_hash(self, db: SQLiteDatabase) -> None:
        head = Bytes32(b"\x09" * 32)

        assert db.get_head_block_hash() is None
        db.put_head_block_hash(head)
        assert db.get_head_block_hash() == head


class TestStateSnapshots:
    """Tests for raw state snapshot storage."""

    def test_put_and_get(self, db: SQLiteDatabase) -> None:
        root = Bytes32(b"\x0a" * 32)
        db.put_state(root, b"\xc0")
        assert db.get_state(root) == b"\xc0"

    def test_missing(self, db: SQLiteDatabase) -> None:
        assert db.get_state(Bytes32(b"\x0b" * 32)) is None


class TestChainConfigs:
    """Tests for chain configurations by genesis hash."""

    def test_put_and_get(self, db: SQLiteDatabase, chain_config: ChainConfig) -> None:
        genesis_hash = Bytes32(b"\x0c" * 32)
        db.put_chain_config(genesis_hash, chain_config)
        assert db.get_chain_config(genesis_hash) == chain_config

    def test_missing(self, db: SQLiteDatabase) -> None:
        assert db.get_chain_config(Bytes32(b"\x0d" * 32)) is None


class TestLifecycle:
    """Tests for database lifecycle."""

    def test_context_manager(self, block: Block) -> None:
        with SQLiteDatabase(":memory:") as db:
            db.put_block(block)
            assert db.has_block(block.hash())

    def test_persists_across_connections(self, tmp_path: Path, block: Block) -> None:
        path = tmp_path / "chaindata.sqlite"
        with SQLiteDatabase(path) as db:
            db.put_block(block)
            db.put_head_block_hash(block.hash())

        with SQLiteDatabase(str(path)) as db:
            assert db.get_block(block.hash()) == block
            assert db.get_head_block_hash() == block.hash()

    def test_satisfies_protocol(self) -> None:
        def open_database() -> Database:
            return SQLiteDatabase(":memory:")

        database = open_database()
        database.close()

    def test_creates_every_table(self, tmp_path: Path) -> None:
        path = tmp_path / "chaindata.sqlite"
        SQLiteDatabase(path).close()

        with closing(sqlite3.connect(path)) as conn:
            rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()

        assert {name for (name,) in rows} == {ns.TABLE_NAME for ns in ALL_NAMESPACES}
