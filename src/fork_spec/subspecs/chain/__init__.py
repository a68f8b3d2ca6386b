"""Chain configuration: fork schedule, protocol predicates and header checks."""

from .config import (
    DIEHARD,
    ETF,
    HOMESTEAD,
    BadHash,
    ChainConfig,
    read_chain_config,
    write_chain_config,
)
from .exceptions import (
    ChainConfigIOError,
    ChainConfigNotFoundError,
    ForkNotFoundError,
    HeaderCheckError,
    KnownBadHashError,
    KnownForkHashMismatchError,
)
from .external import ExternalChainConfig

__all__ = [
    "BadHash",
    "ChainConfig",
    "ExternalChainConfig",
    "DIEHARD",
    "ETF",
    "HOMESTEAD",
    "read_chain_config",
    "write_chain_config",
    # Exceptions
    "ChainConfigIOError",
    "ChainConfigNotFoundError",
    "ForkNotFoundError",
    "HeaderCheckError",
    "KnownBadHashError",
    "KnownForkHashMismatchError",
]
