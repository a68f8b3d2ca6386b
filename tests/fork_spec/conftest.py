"""
Shared pytest fixtures for all fork_spec tests.

Provides an in-memory ledger and a small mainnet-like chain configuration.
"""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

import pytest

from fork_spec.subspecs.chain import ChainConfig
from fork_spec.subspecs.storage import SQLiteDatabase

DAO_HASH = "0x4985f5ca3d2afbec36529aa96f74de3cc10a2a4a6c44f2157a57d2c6059a11bb"
"""Checkpoint pinned at the bailout block."""

BAD_HASH = "0x05bef30ef572270f654746da22639a7a0c97dd97a7050b9e252391996aaeb689"
"""A block registered as known bad at height 1920001."""


def _chain_config_data() -> dict[str, Any]:
    """A chain configuration document as it appears in a file."""
    return {
        "forks": [
            {
                "name": "Diehard",
                "block": 3000000,
                "features": [
                    {"id": "eip155", "options": {"chainID": 61}},
                    {"id": "gastable", "options": {"gasTable": "eip160"}},
                    {"id": "difficulty", "options": {"difficulty": "ecip1010", "length": 2000000}},
                ],
            },
            {
                "name": "Homestead",
                "block": "1150000",
                "features": [
                    {"id": "gastable", "options": {"gasTable": "homestead"}},
                ],
            },
            {
                "name": "ETF",
                "block": "0x1d4c00",
                "requiredHash": DAO_HASH,
                "features": [],
            },
            {
                "name": "GasReprice",
                "block": 2500000,
                "features": [
                    {"id": "gastable", "options": {"gasTable": "eip150"}},
                ],
            },
        ],
        "bad_hashes": [{"Block": 1920001, "Hash": BAD_HASH}],
        "chain_id": 1,
    }


@pytest.fixture
def db() -> Generator[SQLiteDatabase, None, None]:
    """Create an in-memory SQLite database for testing."""
    database = SQLiteDatabase(":memory:")
    yield database
    database.close()


@pytest.fixture
def chain_config() -> ChainConfig:
    """Mainnet-like chain configuration with four forks."""
    return ChainConfig.model_validate(_chain_config_data())


@pytest.fixture
def chain_config_data() -> dict[str, Any]:
    """The raw document behind the `chain_config` fixture."""
    return _chain_config_data()
