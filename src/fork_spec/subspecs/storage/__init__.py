"""
Storage module for persistent chain data.

Provides the database abstraction for blocks, chain pointers, state
snapshots and chain configurations. Uses SQLite for simplicity and correctness.
"""

from .database import Database
from .namespaces import BlockNamespace, ChainConfigNamespace, StateNamespace
from .sqlite import SQLiteDatabase

__all__ = [
    "Database",
    "SQLiteDatabase",
    "BlockNamespace",
    "StateNamespace",
    "ChainConfigNamespace",
]
