"""Fork records and the height-ordered registry queries over them."""

from .fork import Fork, ForkFeature, OptionValue
from .registry import (
    duplicate_blocks,
    fork_at_block,
    fork_by_name,
    forks_through_block,
    latest_fork_at,
    sort_forks,
)

__all__ = [
    "Fork",
    "ForkFeature",
    "OptionValue",
    "duplicate_blocks",
    "fork_at_block",
    "fork_by_name",
    "forks_through_block",
    "latest_fork_at",
    "sort_forks",
]
