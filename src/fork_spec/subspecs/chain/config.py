"""
Chain Configuration Specification

A chain configuration lists the forks of a network, the blocks known to be
invalid on it, and its chain identifier. It answers which protocol rules are
in force at a given height and whether a header is acceptable with respect to
pinned checkpoints and known bad hashes.

Forks are sorted by activation height when the configuration is loaded and
stay in that order; activation heights must be unique.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final

from pydantic import Field, PrivateAttr, field_validator

from fork_spec.subspecs.containers import Header
from fork_spec.subspecs.forks import (
    Fork,
    duplicate_blocks,
    fork_at_block,
    fork_by_name,
    forks_through_block,
    latest_fork_at,
    sort_forks,
)
from fork_spec.subspecs.options import (
    HOMESTEAD_GAS_TABLE,
    FeatureOptions,
    GasTable,
    OptionResolver,
)
from fork_spec.types import Bytes32, ConfigModel, IntegerParseError, parse_big_int

from .exceptions import (
    ChainConfigNotFoundError,
    ForkNotFoundError,
    KnownBadHashError,
    KnownForkHashMismatchError,
)

if TYPE_CHECKING:
    from fork_spec.subspecs.storage import Database

logger = logging.getLogger(__name__)

HOMESTEAD: Final = "Homestead"
ETF: Final = "ETF"
DIEHARD: Final = "Diehard"


def _parse_height(v: Any) -> int:
    try:
        return parse_big_int(v)
    except IntegerParseError as e:
        raise ValueError(e.message) from e


class BadHash(ConfigModel):
    """A block known to be invalid, identified by height and hash."""

    block: int = Field(alias="Block", ge=0)
    hash: Bytes32 = Field(alias="Hash")

    @field_validator("block", mode="before")
    @classmethod
    def _parse_block(cls, v: Any) -> int:
        return _parse_height(v)


class ChainConfig(ConfigModel):
    """
    The protocol configuration of a network.

    Stored per genesis block, so every network identified by its genesis can
    carry its own fork schedule.
    """

    forks: tuple[Fork, ...] = ()
    """Forks ordered by ascending activation height. See `KnownForkHashMismatchError`."""

    bad_hashes: tuple[BadHash, ...] = Field(default=(), alias="bad_hashes")
    """Well-known blocks with consensus issues. See `KnownBadHashError`."""

    chain_id: int | None = Field(default=None, alias="chain_id")
    """Network chain identifier, if configured."""

    _resolver: OptionResolver = PrivateAttr(default_factory=OptionResolver)

    @field_validator("forks", mode="after")
    @classmethod
    def _sort_unique_forks(cls, forks: tuple[Fork, ...]) -> tuple[Fork, ...]:
        """Order forks by height and reject heights claimed by two forks."""
        duplicates = duplicate_blocks(forks)
        if duplicates:
            detail = "; ".join(
                f"block {block}: {', '.join(names)}" for block, names in sorted(duplicates.items())
            )
            raise ValueError(f"fork activation heights must be unique ({detail})")
        return sort_forks(forks)

    @field_validator("bad_hashes", "forks", mode="before")
    @classmethod
    def _null_is_empty(cls, v: Any) -> Any:
        return () if v is None else v

    @field_validator("chain_id", mode="before")
    @classmethod
    def _parse_chain_id(cls, v: Any) -> int | None:
        return None if v is None else _parse_height(v)

    def with_resolver(self, resolver: OptionResolver) -> ChainConfig:
        """Return a copy that resolves options with `resolver`."""
        clone = self.model_copy()
        clone._resolver = resolver
        return clone

    @property
    def resolver(self) -> OptionResolver:
        """The option resolver in use."""
        return self._resolver

    # -------------------------------------------------------------------------
    # Fork lookups
    # -------------------------------------------------------------------------

    def fork(self, name: str) -> Fork | None:
        """Look up a fork by name, assumed to be unique."""
        return fork_by_name(self.forks, name)

    def require_fork(self, name: str) -> Fork:
        """
        Look up a fork the caller cannot do without.

        Raises:
            ForkNotFoundError: If no fork has this name.
        """
        fork = self.fork(name)
        if fork is None:
            raise ForkNotFoundError(name)
        return fork

    def lookup_fork_by_block(self, number: int) -> Fork | None:
        """The fork activating exactly at `number`, if any."""
        return fork_at_block(self.forks, number)

    def fork_for_block(self, number: int) -> Fork | None:
        """The most recent fork at or before `number`."""
        return latest_fork_at(self.forks, number)

    def forks_through_block(self, number: int) -> tuple[Fork, ...]:
        """All forks up to but not exceeding `number`."""
        return forks_through_block(self.forks, number)

    def get_options(self, number: int) -> FeatureOptions:
        """
        Options in force at block `number`, most recent settings first.

        Raises:
            MalformedOptionError: If an applicable feature has an unknown or invalid option.
        """
        return self._resolver.resolve(self.forks, number)

    # -------------------------------------------------------------------------
    # Protocol version predicates
    # -------------------------------------------------------------------------

    def _is_at_or_after(self, name: str, number: int | None) -> bool:
        fork = self.fork(name)
        if fork is None or number is None:
            return False
        return number >= fork.block

    def is_homestead(self, number: int | None) -> bool:
        """Whether `number` is at or after the Homestead block."""
        return self._is_at_or_after(HOMESTEAD, number)

    def is_etf(self, number: int | None) -> bool:
        """Whether `number` is exactly the bailout (ETF) block."""
        fork = self.fork(ETF)
        if fork is None or number is None:
            return False
        return number == fork.block

    def is_diehard(self, number: int | None) -> bool:
        """Whether `number` is at or after the Diehard block."""
        return self._is_at_or_after(DIEHARD, number)

    def is_explosion(self, number: int | None) -> bool:
        """
        Whether the difficulty bomb has exploded at `number`.

        The bomb goes off `length` blocks after the most recent fork at
        `number`, where `length` is the resolved fork length option. Without
        a length there is no explosion.

        Raises:
            MalformedOptionError: If options cannot be resolved. Difficulty
                rules depend on this answer, so the error is never swallowed.
        """
        if number is None:
            return False
        options = self.get_options(number)
        fork = self.fork_for_block(number)
        if fork is None or options.length is None:
            return False
        return number >= fork.block + options.length

    def gas_table(self, number: int | None) -> GasTable:
        """
        The gas table in force at `number`.

        Falls back to the Homestead prices when no fork configures a table.
        The returned table is immutable.
        """
        if number is None:
            return HOMESTEAD_GAS_TABLE
        options = self.get_options(number)
        if options.gas_table is not None:
            return options.gas_table
        return HOMESTEAD_GAS_TABLE

    def chain_id_at(self, number: int) -> int | None:
        """The chain id in force at `number`: a fork's override, else `chain_id`."""
        options = self.get_options(number)
        if options.chain_id is not None:
            return options.chain_id
        return self.chain_id

    # -------------------------------------------------------------------------
    # Header validation
    # -------------------------------------------------------------------------

    def header_check(self, header: Header) -> None:
        """
        Check a header against pinned checkpoints and known bad hashes.

        Both collections are scanned in full. A checkpoint mismatch is
        reported ahead of a bad hash.

        Raises:
            KnownForkHashMismatchError: If a fork at the header's height pins a different hash.
            KnownBadHashError: If the header's hash is registered as bad at its height.
        """
        number = header.number
        block_hash = header.hash()

        mismatch = False
        for fork in self.forks:
            if fork.block != number:
                continue
            if fork.required_hash is not None and fork.required_hash != block_hash:
                mismatch = True

        known_bad = False
        for bad in self.bad_hashes:
            if bad.block == number and bad.hash == block_hash:
                known_bad = True

        if mismatch:
            logger.debug("Header %d (0x%s) fails checkpoint", number, block_hash.hex()[:16])
            raise KnownForkHashMismatchError(number, block_hash)
        if known_bad:
            logger.debug("Header %d (0x%s) is a known bad block", number, block_hash.hex()[:16])
            raise KnownBadHashError(number, block_hash)


# -----------------------------------------------------------------------------
# Persistence
# -----------------------------------------------------------------------------


def read_chain_config(db: Database, genesis_hash: Bytes32) -> ChainConfig:
    """
    Load the chain configuration stored for a genesis block.

    Raises:
        ChainConfigNotFoundError: If no configuration is stored for `genesis_hash`.
    """
    config = db.get_chain_config(genesis_hash)
    if config is None:
        raise ChainConfigNotFoundError(genesis_hash)
    return config


def write_chain_config(db: Database, genesis_hash: Bytes32, config: ChainConfig) -> None:
    """Store the chain configuration of a genesis block, replacing any previous one."""
    db.put_chain_config(genesis_hash, config)
    logger.info("Stored chain config for genesis 0x%s", genesis_hash.hex()[:16])
