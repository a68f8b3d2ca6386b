"""
External chain configuration files.

An external chain configuration bundles everything a node needs to join a
network: an identifier, a display name, the genesis dump, the chain
configuration and a list of bootstrap nodes. The bootstrap entries are kept
as opaque JSON values.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError

from fork_spec.subspecs.genesis import GenesisDump
from fork_spec.types import ConfigModel

from .config import ChainConfig
from .exceptions import ChainConfigIOError

logger = logging.getLogger(__name__)


class ExternalChainConfig(ConfigModel):
    """A complete network definition as distributed in a JSON file."""

    id: str = ""
    name: str = ""
    genesis: GenesisDump | None = None
    chain_config: ChainConfig = Field(default_factory=ChainConfig, alias="chainConfig")
    bootstrap: list[Any] = Field(default_factory=list)

    def write_to_json_file(self, path: Path | str) -> None:
        """
        Write the configuration as indented JSON, replacing any existing file.

        Raises:
            ChainConfigIOError: If the file cannot be written.
        """
        path = Path(path)
        try:
            path.write_text(self.to_json(indent=4), encoding="utf-8")
        except OSError as e:
            raise ChainConfigIOError(
                f"failed to write external chain configuration file {path}: {e}"
            ) from e
        logger.info("Wrote chain configuration %r to %s", self.id, path)

    @classmethod
    def read_from_json_file(cls, path: Path | str) -> ExternalChainConfig:
        """
        Read a configuration from a JSON file.

        Raises:
            ChainConfigIOError: If the file cannot be read or does not hold a
                valid configuration. The message names the path and the cause.
        """
        path = Path(path)
        try:
            return cls.from_json_file(path)
        except (OSError, ValidationError) as e:
            raise ChainConfigIOError(
                f"failed to read external chain configuration file {path}: {e}"
            ) from e
