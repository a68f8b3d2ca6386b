"""In-memory ledger state with committed, persistable snapshots."""

from .statedb import Account, StateBatch, StateDB, StateNotFoundError

__all__ = [
    "Account",
    "StateBatch",
    "StateDB",
    "StateNotFoundError",
]
