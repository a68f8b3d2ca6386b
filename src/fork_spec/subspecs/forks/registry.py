"""
Fork registry queries.

All queries take a sequence of forks and never reorder it. Height-ordered
queries work on a stable-sorted copy, so the caller's collection keeps its
order and concurrent readers of the same collection cannot race on a sort.

Lookups that miss return None. A missing fork is a normal answer ("never
active"), not an error; callers that need a fork use
`ChainConfig.require_fork`.

Activation heights are expected to be unique. Should a collection contain
duplicates anyway, the last fork in sorted order wins every tie.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from .fork import Fork


def sort_forks(forks: Iterable[Fork]) -> tuple[Fork, ...]:
    """Return the forks ordered by ascending activation height (stable)."""
    return tuple(sorted(forks, key=lambda fork: fork.block))


def duplicate_blocks(forks: Iterable[Fork]) -> dict[int, list[str]]:
    """Map every activation height claimed by more than one fork to those forks' names."""
    by_block: dict[int, list[str]] = {}
    for fork in forks:
        by_block.setdefault(fork.block, []).append(fork.name)
    return {block: names for block, names in by_block.items() if len(names) > 1}


def fork_by_name(forks: Sequence[Fork], name: str) -> Fork | None:
    """Find the first fork whose name matches exactly."""
    for fork in forks:
        if fork.name == name:
            return fork
    return None


def fork_at_block(forks: Sequence[Fork], number: int) -> Fork | None:
    """Find the fork activating exactly at `number`."""
    found: Fork | None = None
    for fork in sort_forks(forks):
        if fork.block == number:
            found = fork
    return found


def forks_through_block(forks: Sequence[Fork], number: int) -> tuple[Fork, ...]:
    """All forks activating at or before `number`, ascending by height."""
    return tuple(fork for fork in sort_forks(forks) if fork.block <= number)


def latest_fork_at(forks: Sequence[Fork], number: int) -> Fork | None:
    """The fork with the greatest activation height not above `number`."""
    applicable = forks_through_block(forks, number)
    return applicable[-1] if applicable else None
