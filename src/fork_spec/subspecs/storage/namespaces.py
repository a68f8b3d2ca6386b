"""
Database namespace definitions for storage tables.

Each namespace represents a logical grouping of related data.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class BlockNamespace:
    """
    Namespace for block storage.

    Blocks are stored RLP-encoded under their header hash.
    """

    TABLE_NAME: str = "blocks"

    CREATE_TABLE: str = """
        CREATE TABLE IF NOT EXISTS blocks (
            hash BLOB PRIMARY KEY,
            number INTEGER NOT NULL,
            data BLOB NOT NULL
        )
    """

    CREATE_INDEX: str = """
        CREATE INDEX IF NOT EXISTS idx_blocks_number ON blocks(number)
    """


@dataclass(frozen=True, slots=True)
class TotalDifficultyNamespace:
    """
    Namespace for total difficulty by block hash.

    Difficulties are unbounded integers, stored as big-endian bytes.
    """

    TABLE_NAME: str = "total_difficulty"

    CREATE_TABLE: str = """
        CREATE TABLE IF NOT EXISTS total_difficulty (
            hash BLOB PRIMARY KEY,
            td BLOB NOT NULL
        )
    """


@dataclass(frozen=True, slots=True)
class ReceiptNamespace:
    """Namespace for block receipts, stored as an RLP list per block."""

    TABLE_NAME: str = "receipts"

    CREATE_TABLE: str = """
        CREATE TABLE IF NOT EXISTS receipts (
            hash BLOB PRIMARY KEY,
            data BLOB NOT NULL
        )
    """


@dataclass(frozen=True, slots=True)
class CanonicalNamespace:
    """
    Namespace for the canonical chain.

    Maps each height to the hash of its canonical block.
    """

    TABLE_NAME: str = "canonical"

    CREATE_TABLE: str = """
        CREATE TABLE IF NOT EXISTS canonical (
            number INTEGER PRIMARY KEY,
            hash BLOB NOT NULL
        )
    """


@dataclass(frozen=True, slots=True)
class HeadNamespace:
    """Namespace for singleton chain pointers."""

    TABLE_NAME: str = "heads"

    KEY_HEAD_BLOCK: str = "head_block"
    """Key for the head block hash."""

    CREATE_TABLE: str = """
        CREATE TABLE IF NOT EXISTS heads (
            key TEXT PRIMARY KEY,
            data BLOB NOT NULL
        )
    """


@dataclass(frozen=True, slots=True)
class StateNamespace:
    """Namespace for state snapshots by root."""

    TABLE_NAME: str = "states"

    CREATE_TABLE: str = """
        CREATE TABLE IF NOT EXISTS states (
            root BLOB PRIMARY KEY,
            data BLOB NOT NULL
        )
    """


@dataclass(frozen=True, slots=True)
class ChainConfigNamespace:
    """
    Namespace for chain configurations.

    Keyed by genesis hash; the configuration is stored as JSON text.
    """

    TABLE_NAME: str = "chain_configs"

    CREATE_TABLE: str = """
        CREATE TABLE IF NOT EXISTS chain_configs (
            genesis_hash BLOB PRIMARY KEY,
            data TEXT NOT NULL
        )
    """


BLOCKS = BlockNamespace()
TOTAL_DIFFICULTY = TotalDifficultyNamespace()
RECEIPTS = ReceiptNamespace()
CANONICAL = CanonicalNamespace()
HEADS = HeadNamespace()
STATES = StateNamespace()
CHAIN_CONFIGS = ChainConfigNamespace()

ALL_NAMESPACES = [BLOCKS, TOTAL_DIFFICULTY, RECEIPTS, CANONICAL, HEADS, STATES, CHAIN_CONFIGS]
"""All namespace definitions for schema initialization."""
