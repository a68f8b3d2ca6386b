"""
Feature option resolution.

Resolution runs in two stages:

1. Decode: each feature's raw key/value map becomes a `FeatureOptions`.
   Keys are normalized and dispatched through a fixed table. Unknown keys are
   errors, so a typo in a configuration file fails loudly instead of being
   ignored.
2. Merge: decoded options are overlaid in chronological order (ascending
   fork height, then feature declaration order), so later forks override
   earlier ones and unset options inherit forward.

Rollback granularity is the whole resolution. The accumulator is local to
`resolve`, and a feature's options are merged only after every key of that
feature decoded. A failure therefore leaves nothing partially applied.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Callable, Mapping, Sequence

from pydantic import ValidationError

from fork_spec.subspecs.forks import Fork, ForkFeature, OptionValue, forks_through_block
from fork_spec.types import ForkSpecError, IntegerParseError, parse_big_int

from .gas_table import DEFAULT_GAS_TABLE_PRESETS, GasTable
from .options import FeatureOptions, normalize_option_key

logger = logging.getLogger(__name__)


class MalformedOptionError(ForkSpecError):
    """
    Raised when a feature option is unknown or its value has the wrong shape.

    Attributes:
        key: The option name as written in the configuration.
        value: The raw option value.
        detail: What was wrong with it.
    """

    def __init__(self, key: str, value: Any, detail: str) -> None:
        self.key = key
        self.value = value
        self.detail = detail
        super().__init__(f"invalid chain configuration option {key!r} = {value!r}: {detail}")


class OptionResolver:
    """
    Decodes and merges feature options.

    The resolver keeps a read-only copy of the named gas table presets it
    is given, so later changes to the caller's mapping have no effect. Pass a
    different table to resolve configurations against other presets (tests
    use fixtures here).
    """

    def __init__(self, gas_table_presets: Mapping[str, GasTable] = DEFAULT_GAS_TABLE_PRESETS):
        self._gas_table_presets: Mapping[str, GasTable] = MappingProxyType(
            dict(gas_table_presets)
        )

        # Normalized option name -> (FeatureOptions field, decoder).
        self._decoders: dict[str, tuple[str, Callable[[str, OptionValue], Any]]] = {
            "gastable": ("gas_table", self._decode_gas_table),
            "length": ("length", self._decode_integer),
            "chainid": ("chain_id", self._decode_integer),
            "difficulty": ("difficulty", self._decode_difficulty),
        }

    @property
    def gas_table_presets(self) -> Mapping[str, GasTable]:
        """Named gas tables this resolver can look up."""
        return self._gas_table_presets

    def __eq__(self, other: object) -> bool:
        """Resolvers with the same presets resolve every configuration alike."""
        if not isinstance(other, OptionResolver):
            return NotImplemented
        return dict(self._gas_table_presets) == dict(other._gas_table_presets)

    __hash__ = None  # type: ignore[assignment]

    def decode(self, feature: ForkFeature) -> FeatureOptions:
        """
        Decode one feature's raw options.

        Raises:
            MalformedOptionError: If any key is unrecognized or any value fails to decode.
        """
        fields: dict[str, Any] = {}
        for key, value in feature.options.items():
            entry = self._decoders.get(normalize_option_key(key))
            if entry is None:
                raise MalformedOptionError(key, value, "unrecognized option")
            field_name, decoder = entry
            fields[field_name] = decoder(key, value)
        return FeatureOptions(**fields)

    def resolve(self, forks: Sequence[Fork], number: int) -> FeatureOptions:
        """
        Options in force at block `number`.

        Returns an all-unset record when no fork has activated yet.

        Raises:
            MalformedOptionError: If any feature of an applicable fork fails to decode.
        """
        resolved = FeatureOptions()
        for fork in forks_through_block(forks, number):
            for feature in fork.features:
                try:
                    decoded = self.decode(feature)
                except MalformedOptionError:
                    logger.debug(
                        "Failed to decode feature %r of fork %s (block %d)",
                        feature.id,
                        fork.name,
                        fork.block,
                    )
                    raise
                resolved = resolved.merge(decoded)
        return resolved

    # -------------------------------------------------------------------------
    # Value decoders
    # -------------------------------------------------------------------------

    def _decode_gas_table(self, key: str, value: OptionValue) -> GasTable:
        """
        Decode an inline gas table or a preset name.

        Objects and strings holding a JSON object are validated as a table. A
        table with no cost set falls back to a preset lookup by the raw value,
        as does any other string.
        """
        if isinstance(value, dict):
            table = self._validate_gas_table(key, value, GasTable.model_validate)
        elif isinstance(value, str):
            table = None
            if value.lstrip().startswith("{"):
                table = self._validate_gas_table(key, value, GasTable.model_validate_json)
        else:
            raise MalformedOptionError(key, value, "gas table must be an object or a string")

        if table is not None and not table.is_empty():
            return table

        preset = self._gas_table_presets.get(value) if isinstance(value, str) else None
        if preset is None:
            known = ", ".join(sorted(self._gas_table_presets)) or "none"
            raise MalformedOptionError(key, value, f"unknown gas table (presets: {known})")
        return preset

    @staticmethod
    def _validate_gas_table(
        key: str, value: OptionValue, validate: Callable[[Any], GasTable]
    ) -> GasTable:
        try:
            return validate(value)
        except ValidationError as e:
            raise MalformedOptionError(key, value, f"invalid gas table: {e}") from e

    @staticmethod
    def _decode_integer(key: str, value: OptionValue) -> int:
        try:
            return parse_big_int(value)
        except IntegerParseError as e:
            raise MalformedOptionError(key, value, "not an integer") from e

    @staticmethod
    def _decode_difficulty(key: str, value: OptionValue) -> str:
        if not isinstance(value, str):
            raise MalformedOptionError(key, value, "difficulty must be a string")
        return value
