"""
Fork and feature records.

A fork is a named protocol-rule change that activates at a block height. It
optionally pins the hash of the block at that height (a checkpoint) and
carries features: bundles of untyped options that the option resolver turns
into typed settings.
"""

from __future__ import annotations

from typing import Any, TypeAlias

from pydantic import Field, StrictInt, StrictStr, field_validator

from fork_spec.types import Bytes32, ConfigModel, IntegerParseError, parse_big_int

OptionValue: TypeAlias = StrictStr | StrictInt | dict[str, Any]
"""
A raw feature option value as it appears in a configuration file.

Three shapes are possible:

- a string: plain identifiers, numeric strings, or a JSON document
- an integer: a bare JSON number
- an object: a nested structure such as an inline gas table

The resolver dispatches on the option name and then checks the shape.
"""


class ForkFeature(ConfigModel):
    """
    A named bundle of configuration options attached to a fork.

    Several features of one fork may set the same option; the last one in
    declaration order wins when options are resolved.
    """

    id: str = ""
    """Descriptive identifier, e.g. "homestead", "eip155", "gastable"."""

    options: dict[str, OptionValue] = Field(default_factory=dict)
    """Raw option values keyed by option name."""

    @field_validator("options", mode="before")
    @classmethod
    def _null_options_are_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class Fork(ConfigModel):
    """A protocol-rule change activated at a specific block height."""

    id: str = ""
    """Identifier of the fork, e.g. an EIP/ECIP number."""

    name: str
    """Unique name used by version predicates, e.g. "Homestead"."""

    block: int = Field(ge=0)
    """Block height at which the fork activates."""

    required_hash: Bytes32 | None = None
    """
    Hash the block at `block` must have, if pinned.

    Used to detect a known network split. The all-zero hash means "not pinned".
    """

    features: tuple[ForkFeature, ...] = ()
    """Configurable features in declaration order."""

    @field_validator("block", mode="before")
    @classmethod
    def _parse_block(cls, v: Any) -> int:
        """Accept JSON numbers as well as decimal, hex or octal strings."""
        try:
            return parse_big_int(v)
        except IntegerParseError as e:
            raise ValueError(e.message) from e

    @field_validator("required_hash", mode="before")
    @classmethod
    def _empty_hash_is_none(cls, v: Any) -> Any:
        if v is None or v in ("", "0x"):
            return None
        return v

    @field_validator("required_hash", mode="after")
    @classmethod
    def _zero_hash_is_none(cls, v: Bytes32 | None) -> Bytes32 | None:
        if v is not None and v.is_zero():
            return None
        return v

    @field_validator("features", mode="before")
    @classmethod
    def _null_features_are_empty(cls, v: Any) -> Any:
        return () if v is None else v
