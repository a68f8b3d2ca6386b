"""Tests for feature option decoding, merging and resolution."""

from __future__ import annotations

from types import MappingProxyType

import pytest

from fork_spec.subspecs.forks import Fork, ForkFeature
from fork_spec.subspecs.options import (
    DEFAULT_GAS_TABLE_PRESETS,
    EIP150_GAS_TABLE,
    EIP160_GAS_TABLE,
    HOMESTEAD_GAS_TABLE,
    FeatureOptions,
    GasTable,
    MalformedOptionError,
    OptionResolver,
    normalize_option_key,
)


@pytest.fixture
def resolver() -> OptionResolver:
    """Resolver with the built-in presets."""
    return OptionResolver()


def feature(**options: object) -> ForkFeature:
    """Build a feature from keyword options."""
    return ForkFeature.model_validate({"id": "test", "options": options})


class TestNormalizeOptionKey:
    """Tests for option key normalization."""

    @pytest.mark.parametrize("key", ["gasTable", "gas_table", "GAS-TABLE", "gas table 2"])
    def test_variants(self, key: str) -> None:
        """Only letters survive, lower-cased."""
        assert normalize_option_key(key) == "gastable"


class TestDecode:
    """Tests for decoding one feature's options."""

    def test_empty_feature(self, resolver: OptionResolver) -> None:
        assert resolver.decode(feature()).is_unset()

    def test_integers(self, resolver: OptionResolver) -> None:
        """Length and chain id accept numbers and numeric strings."""
        options = resolver.decode(feature(length=2000000, chainID="0x3d"))
        assert options.length == 2000000
        assert options.chain_id == 61

    def test_difficulty(self, resolver: OptionResolver) -> None:
        assert resolver.decode(feature(difficulty="ecip1010")).difficulty == "ecip1010"

    def test_difficulty_must_be_string(self, resolver: OptionResolver) -> None:
        with pytest.raises(MalformedOptionError, match="difficulty must be a string"):
            resolver.decode(feature(difficulty=5))

    def test_unknown_key_fails(self, resolver: OptionResolver) -> None:
        """An unrecognized key fails even next to valid keys."""
        with pytest.raises(MalformedOptionError) as exc_info:
            resolver.decode(feature(length=5, gasLimitX="1"))

        assert exc_info.value.key == "gasLimitX"
        assert "unrecognized option" in str(exc_info.value)

    def test_malformed_integer(self, resolver: OptionResolver) -> None:
        with pytest.raises(MalformedOptionError, match="not an integer"):
            resolver.decode(feature(length="soon"))

    def test_key_spelling_is_free(self, resolver: OptionResolver) -> None:
        assert resolver.decode(feature(chain_id=2)).chain_id == 2


class TestGasTableOption:
    """Tests for the gas table option shapes."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("homestead", HOMESTEAD_GAS_TABLE),
            ("eip150", EIP150_GAS_TABLE),
            ("eip160", EIP160_GAS_TABLE),
        ],
    )
    def test_preset_name(self, resolver: OptionResolver, name: str, expected: GasTable) -> None:
        assert resolver.decode(feature(gasTable=name)).gas_table == expected

    def test_inline_object(self, resolver: OptionResolver) -> None:
        options = resolver.decode(feature(gasTable={"calls": 700, "expByte": "50"}))
        assert options.gas_table == GasTable(calls=700, exp_byte=50)

    def test_json_string(self, resolver: OptionResolver) -> None:
        options = resolver.decode(feature(gasTable='{"sLoad": 200}'))
        assert options.gas_table == GasTable(s_load=200)

    def test_unknown_preset(self, resolver: OptionResolver) -> None:
        with pytest.raises(MalformedOptionError, match="unknown gas table"):
            resolver.decode(feature(gasTable="eip999"))

    def test_empty_object_is_not_a_table(self, resolver: OptionResolver) -> None:
        with pytest.raises(MalformedOptionError, match="unknown gas table"):
            resolver.decode(feature(gasTable={}))

    def test_invalid_cost(self, resolver: OptionResolver) -> None:
        with pytest.raises(MalformedOptionError, match="invalid gas table"):
            resolver.decode(feature(gasTable={"calls": "lots"}))

    def test_integer_is_not_a_table(self, resolver: OptionResolver) -> None:
        with pytest.raises(MalformedOptionError, match="object or a string"):
            resolver.decode(feature(gasTable=150))

    def test_substituted_presets(self) -> None:
        """Presets are owned by the resolver, so tests can swap them."""
        custom = GasTable(calls=1)
        resolver = OptionResolver(MappingProxyType({"fixture": custom}))

        assert resolver.decode(feature(gasTable="fixture")).gas_table == custom
        with pytest.raises(MalformedOptionError):
            resolver.decode(feature(gasTable="eip150"))

    def test_default_presets_are_read_only(self) -> None:
        with pytest.raises(TypeError):
            DEFAULT_GAS_TABLE_PRESETS["mine"] = GasTable()  # type: ignore[index]

    def test_caller_mapping_is_copied(self) -> None:
        """Changing the mapping after construction does not reach the resolver."""
        presets = {"fixture": GasTable(calls=1)}
        resolver = OptionResolver(presets)

        presets["fixture"] = GasTable(calls=2)
        presets["late"] = GasTable(calls=3)

        assert resolver.decode(feature(gasTable="fixture")).gas_table == GasTable(calls=1)
        with pytest.raises(MalformedOptionError):
            resolver.decode(feature(gasTable="late"))
        with pytest.raises(TypeError):
            resolver.gas_table_presets["late"] = GasTable()  # type: ignore[index]


class TestMerge:
    """Tests for the right-biased merge."""

    def test_incoming_wins(self) -> None:
        base = FeatureOptions(length=3, chain_id=7)
        merged = base.merge(FeatureOptions(length=5))

        assert merged == FeatureOptions(length=5, chain_id=7)

    def test_unset_incoming_returns_base(self) -> None:
        base = FeatureOptions(length=3, difficulty="ecip1010")
        assert base.merge(FeatureOptions()) is base

    def test_inputs_unchanged(self) -> None:
        base = FeatureOptions(length=3)
        incoming = FeatureOptions(chain_id=1)
        base.merge(incoming)

        assert base == FeatureOptions(length=3)
        assert incoming == FeatureOptions(chain_id=1)


class TestResolve:
    """Tests for chronological resolution over forks."""

    @pytest.fixture
    def forks(self) -> list[Fork]:
        return [
            Fork.model_validate(
                {
                    "name": "Later",
                    "block": 200,
                    "features": [
                        {"id": "a", "options": {"length": 10}},
                        {"id": "b", "options": {"length": 20, "difficulty": "x"}},
                    ],
                }
            ),
            Fork.model_validate(
                {
                    "name": "Early",
                    "block": 100,
                    "features": [{"id": "c", "options": {"length": 1, "chainID": 7}}],
                }
            ),
        ]

    def test_below_every_fork(self, resolver: OptionResolver, forks: list[Fork]) -> None:
        """No fork active yet is an all-unset result, not an error."""
        assert resolver.resolve(forks, 99).is_unset()

    def test_single_fork(self, resolver: OptionResolver, forks: list[Fork]) -> None:
        assert resolver.resolve(forks, 150) == FeatureOptions(length=1, chain_id=7)

    def test_later_settings_win(self, resolver: OptionResolver, forks: list[Fork]) -> None:
        """Later forks override, and the last feature of a fork wins."""
        assert resolver.resolve(forks, 200) == FeatureOptions(
            length=20, chain_id=7, difficulty="x"
        )

    def test_failure_applies_nothing(self, resolver: OptionResolver, forks: list[Fork]) -> None:
        """A bad feature fails the whole resolution."""
        broken = Fork.model_validate(
            {"name": "Broken", "block": 300, "features": [{"options": {"bogus": 1}}]}
        )
        with pytest.raises(MalformedOptionError):
            resolver.resolve([*forks, broken], 300)

        # Heights before the broken fork still resolve.
        assert resolver.resolve([*forks, broken], 299).length == 20
