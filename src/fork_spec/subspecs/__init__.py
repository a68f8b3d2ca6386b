"""Subspecifications: fork schedules, option resolution, genesis and storage."""

from .chain import ChainConfig, ExternalChainConfig
from .genesis import GenesisDump, write_genesis_block
from .storage import SQLiteDatabase

__all__ = [
    "ChainConfig",
    "ExternalChainConfig",
    "GenesisDump",
    "SQLiteDatabase",
    "write_genesis_block",
]
