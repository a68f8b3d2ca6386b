"""Errors raised by chain configuration lookups, header checks and config files."""

from __future__ import annotations

from fork_spec.types import Bytes32, ForkSpecError


class ChainConfigNotFoundError(ForkSpecError):
    """A chain configuration the caller requires is not available."""

    def __init__(self, genesis_hash: Bytes32 | None = None) -> None:
        self.genesis_hash = genesis_hash
        msg = "chain config not found"
        if genesis_hash is not None:
            msg = f"{msg} for genesis 0x{genesis_hash.hex()}"
        super().__init__(msg)


class ForkNotFoundError(ChainConfigNotFoundError):
    """A fork the caller requires is not part of the chain configuration."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.genesis_hash = None
        ForkSpecError.__init__(self, f"chain config fork not found: {name!r}")


class HeaderCheckError(ForkSpecError):
    """
    Base class for headers rejected by the chain configuration.

    Attributes:
        number: Height of the rejected header.
        hash: Hash of the rejected header.
    """

    reason: str = "header rejected"

    def __init__(self, number: int, hash: Bytes32) -> None:
        self.number = number
        self.hash = hash
        super().__init__(f"{self.reason}: block {number} (0x{hash.hex()})")


class KnownForkHashMismatchError(HeaderCheckError):
    """
    The header disagrees with the checkpoint pinned at its height.

    The header belongs to a chain split this configuration does not follow.
    """

    reason = "known fork hash mismatch"


class KnownBadHashError(HeaderCheckError):
    """The header is registered as a known-invalid block."""

    reason = "known bad hash"


class ChainConfigIOError(ForkSpecError):
    """Reading or writing an external chain configuration file failed."""
