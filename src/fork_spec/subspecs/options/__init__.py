"""Typed feature options: decoding, gas table presets and chronological merge."""

from .gas_table import (
    DEFAULT_GAS_TABLE_PRESETS,
    EIP150_GAS_TABLE,
    EIP160_GAS_TABLE,
    HOMESTEAD_GAS_TABLE,
    GasTable,
)
from .options import FeatureOptions, normalize_option_key
from .resolver import MalformedOptionError, OptionResolver

__all__ = [
    "DEFAULT_GAS_TABLE_PRESETS",
    "EIP150_GAS_TABLE",
    "EIP160_GAS_TABLE",
    "HOMESTEAD_GAS_TABLE",
    "FeatureOptions",
    "GasTable",
    "MalformedOptionError",
    "OptionResolver",
    "normalize_option_key",
]
