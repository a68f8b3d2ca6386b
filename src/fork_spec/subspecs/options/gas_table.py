"""
Gas cost tables.

A gas table holds the prices of the state-access operations that forks have
repriced over time. Only the table's shape matters here; the virtual machine
that charges these costs lives elsewhere.

Named presets let a configuration refer to a well-known table by name
(`"gasTable": "eip150"`) instead of inlining every cost.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Final, Mapping

from pydantic import field_validator

from fork_spec.types import ConfigModel, IntegerParseError, parse_big_int


class GasTable(ConfigModel):
    """Prices of repriceable operations. Every cost is optional."""

    extcode_size: int | None = None
    extcode_copy: int | None = None
    balance: int | None = None
    s_load: int | None = None
    calls: int | None = None
    suicide: int | None = None
    exp_byte: int | None = None

    create_by_suicide: int | None = None
    """
    Extra cost when SUICIDE sends value to a new account.

    Unset means the surcharge does not apply (pre-EIP150 behavior).
    """

    @field_validator("*", mode="before")
    @classmethod
    def _parse_cost(cls, v: Any) -> Any:
        if v is None:
            return None
        try:
            return parse_big_int(v)
        except IntegerParseError as e:
            raise ValueError(e.message) from e

    def is_empty(self) -> bool:
        """Whether no cost is set at all."""
        return all(value is None for value in self.model_dump().values())


HOMESTEAD_GAS_TABLE: Final = GasTable(
    extcode_size=20,
    extcode_copy=20,
    balance=20,
    s_load=50,
    calls=40,
    suicide=0,
    exp_byte=10,
)
"""Frontier/Homestead prices. Also the fallback when no fork sets a table."""

EIP150_GAS_TABLE: Final = GasTable(
    extcode_size=700,
    extcode_copy=700,
    balance=400,
    s_load=200,
    calls=700,
    suicide=5000,
    exp_byte=10,
    create_by_suicide=25000,
)
"""Gas reprice of EIP-150 (IO-heavy operations)."""

EIP160_GAS_TABLE: Final = EIP150_GAS_TABLE.model_copy(update={"exp_byte": 50})
"""EIP-160 raises the per-byte cost of EXP on top of EIP-150."""

DEFAULT_GAS_TABLE_PRESETS: Final[Mapping[str, GasTable]] = MappingProxyType(
    {
        "homestead": HOMESTEAD_GAS_TABLE,
        "eip150": EIP150_GAS_TABLE,
        "eip160": EIP160_GAS_TABLE,
    }
)
"""Built-in named gas tables. Read-only."""
