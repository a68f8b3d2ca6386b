"""
Global configuration for fork-spec.

This module contains environment-specific settings read once at import time.
Invalid values fail the import.
"""

import logging
import os
from pathlib import Path

_SUPPORTED_ENVS: list[str] = ["prod", "test"]

FORK_SPEC_ENV = os.environ.get("FORK_SPEC_ENV", "prod").lower()
"""The environment flag ('prod' or 'test'). Defaults to 'prod'."""

if FORK_SPEC_ENV not in _SUPPORTED_ENVS:
    raise ValueError(
        f"Invalid FORK_SPEC_ENV environment variable: '{FORK_SPEC_ENV}'. "
        f"Supported values: {_SUPPORTED_ENVS}"
    )

_DEFAULT_DB = ":memory:" if FORK_SPEC_ENV == "test" else "chaindata.sqlite"

FORK_SPEC_DB = Path(os.environ.get("FORK_SPEC_DB", _DEFAULT_DB))
"""Default path of the SQLite ledger used by the CLI. In-memory under the test environment."""

_SUPPORTED_LOG_LEVELS: list[str] = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

FORK_SPEC_LOG_LEVEL = os.environ.get("FORK_SPEC_LOG_LEVEL", "INFO").upper()
"""Log level the CLI starts with. `--verbose` lowers it to DEBUG."""

if FORK_SPEC_LOG_LEVEL not in _SUPPORTED_LOG_LEVELS:
    raise ValueError(
        f"Invalid FORK_SPEC_LOG_LEVEL environment variable: '{FORK_SPEC_LOG_LEVEL}'. "
        f"Supported values: {_SUPPORTED_LOG_LEVELS}"
    )

LOG_LEVEL: int = logging.getLevelName(FORK_SPEC_LOG_LEVEL)
"""Numeric value of `FORK_SPEC_LOG_LEVEL`."""
