"""Genesis dumps and their materialization into a ledger."""

from .dump import GenesisAlloc, GenesisDump
from .exceptions import MalformedGenesisError, StorageWriteError
from .writer import (
    GenesisAccount,
    make_genesis_dump,
    write_genesis_block,
    write_test_genesis_block,
)

__all__ = [
    "GenesisAccount",
    "GenesisAlloc",
    "GenesisDump",
    "make_genesis_dump",
    "write_genesis_block",
    "write_test_genesis_block",
    # Exceptions
    "MalformedGenesisError",
    "StorageWriteError",
]
