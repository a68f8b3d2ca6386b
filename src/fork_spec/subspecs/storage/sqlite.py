"""
SQLite database implementation for chain data storage.

This module provides persistent storage for execution chain data:

- Blocks, total difficulties and receipts indexed by block hash
- The canonical hash at each height and the head block pointer
- State snapshots indexed by state root
- Chain configurations indexed by genesis hash

Blocks, receipts and snapshots are stored RLP-encoded in BLOB columns.
Chain configurations are stored as JSON text.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Sequence

from fork_spec.subspecs.chain.config import ChainConfig
from fork_spec.subspecs.containers import Block
from fork_spec.types import Bytes32, big_endian_to_int, int_to_big_endian
from fork_spec.types.rlp import RLPDecodingError, decode_rlp_list, encode_rlp

from .namespaces import (
    ALL_NAMESPACES,
    BLOCKS,
    CANONICAL,
    CHAIN_CONFIGS,
    HEADS,
    RECEIPTS,
    STATES,
    TOTAL_DIFFICULTY,
)

logger = logging.getLogger(__name__)


class SQLiteDatabase:
    """
    SQLite implementation of the Database protocol.

    Stores chain data in a single SQLite file.
    Every put commits before returning.
    """

    def __init__(self, path: Path | str) -> None:
        """
        Initialize SQLite database.

        Creates database file and tables if they don't exist.

        Args:
            path: Path to SQLite database file.
                  Use ":memory:" for in-memory database.
        """
        self._path = Path(path) if isinstance(path, str) else path

        # SQLite serializes writes internally, so the connection may be
        # shared between threads.
        self._conn = sqlite3.connect(
            str(self._path),
            check_same_thread=False,
        )
        self._conn.row_factory = sqlite3.Row

        self._init_schema()
        logger.debug("Opened database at %s", self._path)

    def _init_schema(self) -> None:
        """Create tables if they don't exist."""
        cursor = self._conn.cursor()
        for namespace in ALL_NAMESPACES:
            cursor.execute(namespace.CREATE_TABLE)

        # Blocks are addressed by header hash; the height column serves
        # range queries over stored blocks.
        cursor.execute(BLOCKS.CREATE_INDEX)

        self._conn.commit()

    def _put(self, sql: str, params: tuple[object, ...]) -> None:
        cursor = self._conn.cursor()
        cursor.execute(sql, params)
        self._conn.commit()

    def _get(self, sql: str, params: tuple[object, ...]) -> sqlite3.Row | None:
        cursor = self._conn.cursor()
        cursor.execute(sql, params)
        return cursor.fetchone()

    # -------------------------------------------------------------------------
    # Block Operations
    # -------------------------------------------------------------------------

    def get_block(self, block_hash: Bytes32) -> Block | None:
        """Retrieve a block by its hash."""
        row = self._get(
            f"SELECT data FROM {BLOCKS.TABLE_NAME} WHERE hash = ?",
            (bytes(block_hash),),
        )
        if row is None:
            return None
        return Block.decode_bytes(row["data"])

    def put_block(self, block: Block) -> None:
        """Store a block under its header hash."""
        # Same hash means same content, so replacing is harmless.
        self._put(
            f"""
            INSERT OR REPLACE INTO {BLOCKS.TABLE_NAME} (hash, number, data)
            VALUES (?, ?, ?)
            """,
            (bytes(block.hash()), block.number, block.encode_bytes()),
        )

    def has_block(self, block_hash: Bytes32) -> bool:
        """Check if a block exists in storage."""
        row = self._get(
            f"SELECT 1 FROM {BLOCKS.TABLE_NAME} WHERE hash = ?",
            (bytes(block_hash),),
        )
        return row is not None

    def get_td(self, block_hash: Bytes32) -> int | None:
        """Retrieve the total difficulty of a block."""
        row = self._get(
            f"SELECT td FROM {TOTAL_DIFFICULTY.TABLE_NAME} WHERE hash = ?",
            (bytes(block_hash),),
        )
        if row is None:
            return None
        return big_endian_to_int(row["td"])

    def put_td(self, block_hash: Bytes32, td: int) -> None:
        """Store the total difficulty of a block."""
        # Difficulties outgrow SQLite's 64-bit integers.
        self._put(
            f"""
            INSERT OR REPLACE INTO {TOTAL_DIFFICULTY.TABLE_NAME} (hash, td)
            VALUES (?, ?)
            """,
            (bytes(block_hash), int_to_big_endian(td)),
        )

    def get_receipts(self, block_hash: Bytes32) -> list[bytes] | None:
        """Retrieve the RLP-encoded receipts of a block."""
        row = self._get(
            f"SELECT data FROM {RECEIPTS.TABLE_NAME} WHERE hash = ?",
            (bytes(block_hash),),
        )
        if row is None:
            return None

        receipts = []
        for item in decode_rlp_list(row["data"]):
            if not isinstance(item, bytes):
                raise RLPDecodingError("Stored receipts must be byte strings")
            receipts.append(item)
        return receipts

    def put_receipts(self, block_hash: Bytes32, receipts: Sequence[bytes]) -> None:
        """Store the receipts of a block as one RLP list."""
        self._put(
            f"""
            INSERT OR REPLACE INTO {RECEIPTS.TABLE_NAME} (hash, data)
            VALUES (?, ?)
            """,
            (bytes(block_hash), encode_rlp(list(receipts))),
        )

    # -------------------------------------------------------------------------
    # Canonical Chain
    # -------------------------------------------------------------------------
    #
    # The canonical index changes as the chain reorganizes: a height always
    # points at the block currently on the canonical chain.

    def get_canonical_hash(self, number: int) -> Bytes32 | None:
        """Retrieve the canonical block hash at a height."""
        row = self._get(
            f"SELECT hash FROM {CANONICAL.TABLE_NAME} WHERE number = ?",
            (number,),
        )
        if row is None:
            return None
        return Bytes32(row["hash"])

    def put_canonical_hash(self, number: int, block_hash: Bytes32) -> None:
        """Record the canonical block at a height."""
        self._put(
            f"""
            INSERT OR REPLACE INTO {CANONICAL.TABLE_NAME} (number, hash)
            VALUES (?, ?)
            """,
            (number, bytes(block_hash)),
        )

    def get_head_block_hash(self) -> Bytes32 | None:
        """Retrieve the hash of the current head block."""
        row = self._get(
            f"SELECT data FROM {HEADS.TABLE_NAME} WHERE key = ?",
            (HEADS.KEY_HEAD_BLOCK,),
        )
        if row is None:
            return None
        return Bytes32(row["data"])

    def put_head_block_hash(self, block_hash: Bytes32) -> None:
        """Store the hash of the current head block."""
        self._put(
            f"""
            INSERT OR REPLACE INTO {HEADS.TABLE_NAME} (key, data)
            VALUES (?, ?)
            """,
            (HEADS.KEY_HEAD_BLOCK, bytes(block_hash)),
        )

    # -------------------------------------------------------------------------
    # State Snapshots
    # -------------------------------------------------------------------------

    def get_state(self, root: Bytes32) -> bytes | None:
        """Retrieve an encoded state snapshot by its root."""
        row = self._get(
            f"SELECT data FROM {STATES.TABLE_NAME} WHERE root = ?",
            (bytes(root),),
        )
        if row is None:
            return None
        return bytes(row["data"])

    def put_state(self, root: Bytes32, data: bytes) -> None:
        """Store an encoded state snapshot under its root."""
        self._put(
            f"""
            INSERT OR REPLACE INTO {STATES.TABLE_NAME} (root, data)
            VALUES (?, ?)
            """,
            (bytes(root), bytes(data)),
        )

    # -------------------------------------------------------------------------
    # Chain Configuration
    # -------------------------------------------------------------------------

    def get_chain_config(self, genesis_hash: Bytes32) -> ChainConfig | None:
        """Retrieve the chain configuration stored for a genesis block."""
        row = self._get(
            f"SELECT data FROM {CHAIN_CONFIGS.TABLE_NAME} WHERE genesis_hash = ?",
            (bytes(genesis_hash),),
        )
        if row is None:
            return None
        return ChainConfig.from_json(row["data"])

    def put_chain_config(self, genesis_hash: Bytes32, config: ChainConfig) -> None:
        """Store the chain configuration of a genesis block."""
        self._put(
            f"""
            INSERT OR REPLACE INTO {CHAIN_CONFIGS.TABLE_NAME} (genesis_hash, data)
            VALUES (?, ?)
            """,
            (bytes(genesis_hash), config.to_json(indent=None)),
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close database connection."""
        self._conn.close()

    def __enter__(self) -> SQLiteDatabase:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()
