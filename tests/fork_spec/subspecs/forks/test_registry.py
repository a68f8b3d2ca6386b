"""Tests for fork records and the registry queries."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import ValidationError

from fork_spec.subspecs.forks import (
    Fork,
    ForkFeature,
    duplicate_blocks,
    fork_at_block,
    fork_by_name,
    forks_through_block,
    latest_fork_at,
    sort_forks,
)


def make_fork(name: str, block: int) -> Fork:
    """Build a fork without features."""
    return Fork(name=name, block=block)


@pytest.fixture
def forks() -> list[Fork]:
    """Forks deliberately out of height order."""
    return [
        make_fork("Diehard", 3000000),
        make_fork("Homestead", 1150000),
        make_fork("ETF", 1920000),
    ]


class TestForkRecord:
    """Tests for loading a fork from configuration data."""

    @pytest.mark.parametrize("block", [1920000, "1920000", "0x1d4c00", "07246000"])
    def test_block_forms(self, block: int | str) -> None:
        """Heights load from integers and numeric strings in any base."""
        assert Fork(name="ETF", block=block).block == 1920000

    def test_negative_block_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Fork(name="Broken", block=-1)

    def test_malformed_block_rejected(self) -> None:
        with pytest.raises(ValidationError, match="invalid integer"):
            Fork(name="Broken", block="one million")

    def test_zero_required_hash_means_unpinned(self) -> None:
        """The all-zero hash is normalized away."""
        fork = Fork.model_validate({"name": "ETF", "block": 1, "requiredHash": "0x" + "00" * 32})
        assert fork.required_hash is None

    @pytest.mark.parametrize("value", ["", "0x", None])
    def test_empty_required_hash(self, value: str | None) -> None:
        fork = Fork.model_validate({"name": "ETF", "block": 1, "requiredHash": value})
        assert fork.required_hash is None

    def test_null_features_and_options(self) -> None:
        """JSON nulls load as empty collections."""
        fork = Fork.model_validate(
            {"name": "Homestead", "block": 1, "features": [{"id": "x", "options": None}]}
        )
        assert fork.features == (ForkFeature(id="x"),)
        assert Fork.model_validate({"name": "A", "block": 1, "features": None}).features == ()

    def test_option_values_are_tagged(self) -> None:
        """Strings, integers and objects are the only option shapes."""
        feature = ForkFeature(options={"a": "x", "b": 1, "c": {"calls": 700}})
        assert feature.options == {"a": "x", "b": 1, "c": {"calls": 700}}

        with pytest.raises(ValidationError):
            ForkFeature(options={"a": 1.5})


class TestLookups:
    """Tests for the lookup queries."""

    def test_fork_by_name(self, forks: list[Fork]) -> None:
        fork = fork_by_name(forks, "ETF")
        assert fork is not None
        assert fork.block == 1920000

    def test_fork_by_name_is_exact(self, forks: list[Fork]) -> None:
        """Names are case sensitive; a miss is None, not an error."""
        assert fork_by_name(forks, "homestead") is None

    def test_fork_at_block(self, forks: list[Fork]) -> None:
        fork = fork_at_block(forks, 1150000)
        assert fork is not None and fork.name == "Homestead"
        assert fork_at_block(forks, 1150001) is None

    def test_forks_through_block_sorted(self, forks: list[Fork]) -> None:
        names = [fork.name for fork in forks_through_block(forks, 3000000)]
        assert names == ["Homestead", "ETF", "Diehard"]

    def test_forks_through_block_before_first(self, forks: list[Fork]) -> None:
        assert forks_through_block(forks, 0) == ()

    def test_latest_fork_at(self, forks: list[Fork]) -> None:
        fork = latest_fork_at(forks, 2999999)
        assert fork is not None and fork.name == "ETF"
        assert latest_fork_at(forks, 1149999) is None

    def test_queries_do_not_reorder_input(self, forks: list[Fork]) -> None:
        """Sorting happens on a copy."""
        before = list(forks)
        forks_through_block(forks, 10**9)
        fork_at_block(forks, 1920000)
        assert forks == before


class TestDuplicateHeights:
    """Hand-built collections may contain duplicate heights."""

    def test_last_in_sorted_order_wins(self) -> None:
        forks = [make_fork("First", 5), make_fork("Second", 5)]

        at = fork_at_block(forks, 5)
        latest = latest_fork_at(forks, 7)
        assert at is not None and at.name == "Second"
        assert latest is not None and latest.name == "Second"

    def test_duplicate_blocks(self) -> None:
        forks = [make_fork("A", 5), make_fork("B", 6), make_fork("C", 5)]
        assert duplicate_blocks(forks) == {5: ["A", "C"]}

    def test_sort_is_stable(self) -> None:
        forks = [make_fork("B", 9), make_fork("A", 5), make_fork("C", 5)]
        assert [fork.name for fork in sort_forks(forks)] == ["A", "C", "B"]


class TestPrefixProperty:
    """Forks through a lower height are a prefix of forks through a higher one."""

    @given(
        heights=st.lists(st.integers(min_value=0, max_value=10_000), max_size=12, unique=True),
        n1=st.integers(min_value=0, max_value=10_000),
        n2=st.integers(min_value=0, max_value=10_000),
    )
    def test_prefix(self, heights: list[int], n1: int, n2: int) -> None:
        low, high = sorted((n1, n2))
        forks = [make_fork(f"F{height}", height) for height in heights]

        through_low = forks_through_block(forks, low)
        through_high = forks_through_block(forks, high)

        assert through_high[: len(through_low)] == through_low
        assert all(fork.block <= low for fork in through_low)
        assert [fork.block for fork in through_high] == sorted(fork.block for fork in through_high)
