"""
Abstract database interface for chain data storage.

Defines the Protocol that all database implementations must follow.
Uses structural subtyping for flexibility.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence

if TYPE_CHECKING:
    from fork_spec.subspecs.chain.config import ChainConfig
    from fork_spec.subspecs.containers import Block
    from fork_spec.types import Bytes32


class Database(Protocol):
    """
    Protocol for chain data storage.

    Storage Organization
    --------------------
    - Blocks, total difficulties and receipts: indexed by block hash
    - Canonical chain: block hash indexed by height
    - Head pointer: hash of the current head block
    - State snapshots: indexed by state root
    - Chain configurations: indexed by genesis hash

    Every put is durable when it returns. There is no multi-put transaction;
    callers that write several records accept that a failure leaves the
    earlier ones in place.
    """

    # -------------------------------------------------------------------------
    # Block Operations
    # -------------------------------------------------------------------------

    def get_block(self, block_hash: Bytes32) -> Block | None:
        """
        Retrieve a block by its hash.

        Returns:
            Block if found, None otherwise.
        """
        ...

    def put_block(self, block: Block) -> None:
        """Store a block under its hash."""
        ...

    def has_block(self, block_hash: Bytes32) -> bool:
        """Check if a block exists in storage."""
        ...

    def get_td(self, block_hash: Bytes32) -> int | None:
        """Retrieve the total difficulty of the chain up to and including a block."""
        ...

    def put_td(self, block_hash: Bytes32, td: int) -> None:
        """Store the total difficulty of a block."""
        ...

    def get_receipts(self, block_hash: Bytes32) -> list[bytes] | None:
        """Retrieve the RLP-encoded receipts of a block."""
        ...

    def put_receipts(self, block_hash: Bytes32, receipts: Sequence[bytes]) -> None:
        """Store the RLP-encoded receipts of a block. An empty sequence is a valid receipt set."""
        ...

    # -------------------------------------------------------------------------
    # Canonical Chain
    # -------------------------------------------------------------------------

    def get_canonical_hash(self, number: int) -> Bytes32 | None:
        """
        Retrieve the hash of the canonical block at a height.

        Returns:
            Block hash, or None if no canonical block is recorded.
        """
        ...

    def put_canonical_hash(self, number: int, block_hash: Bytes32) -> None:
        """Record the canonical block at a height."""
        ...

    def get_head_block_hash(self) -> Bytes32 | None:
        """Retrieve the hash of the current head block."""
        ...

    def put_head_block_hash(self, block_hash: Bytes32) -> None:
        """Store the hash of the current head block."""
        ...

    # -------------------------------------------------------------------------
    # State Snapshots
    # -------------------------------------------------------------------------

    def get_state(self, root: Bytes32) -> bytes | None:
        """Retrieve an encoded state snapshot by its root."""
        ...

    def put_state(self, root: Bytes32, data: bytes) -> None:
        """Store an encoded state snapshot under its root."""
        ...

    # -------------------------------------------------------------------------
    # Chain Configuration
    # -------------------------------------------------------------------------

    def get_chain_config(self, genesis_hash: Bytes32) -> ChainConfig | None:
        """Retrieve the chain configuration of the network with this genesis."""
        ...

    def put_chain_config(self, genesis_hash: Bytes32, config: ChainConfig) -> None:
        """Store the chain configuration of the network with this genesis."""
        ...

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close database connection and release resources."""
        ...
