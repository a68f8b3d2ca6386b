"""Typed feature options and their precedence merge."""

from __future__ import annotations

import re

from fork_spec.types import ConfigModel

from .gas_table import GasTable

_NON_ALPHA = re.compile(r"[^a-zA-Z]")


def normalize_option_key(key: str) -> str:
    """
    Reduce an option name to lower-case letters only.

    "gasTable", "gas_table" and "GAS-TABLE" all become "gastable".
    """
    return _NON_ALPHA.sub("", key).lower()


class FeatureOptions(ConfigModel):
    """
    The typed options in effect at some block height.

    Every field is None until a feature sets it. Unset is distinct from any
    value, so a merge can tell "not specified" from "explicitly set".
    """

    gas_table: GasTable | None = None
    """Gas price table."""

    length: int | None = None
    """Length of the fork in blocks, for forks that only last a while (difficulty bomb delays)."""

    chain_id: int | None = None
    """Chain identifier override."""

    difficulty: str | None = None
    """Identifier of the difficulty adjustment algorithm, e.g. "ecip1010"."""

    def merge(self, incoming: FeatureOptions) -> FeatureOptions:
        """
        Overlay `incoming` onto these options.

        Each field set in `incoming` replaces the value here; unset fields in
        `incoming` keep the current value. The merge is not commutative:
        `incoming` must be chronologically later (belong to a fork at the same
        or a greater height) for the result to mean "options now in force".
        """
        update = {
            name: getattr(incoming, name)
            for name in type(self).model_fields
            if getattr(incoming, name) is not None
        }
        if not update:
            return self
        return self.model_copy(update=update)

    def is_unset(self) -> bool:
        """Whether no option is set."""
        return all(getattr(self, name) is None for name in type(self).model_fields)
