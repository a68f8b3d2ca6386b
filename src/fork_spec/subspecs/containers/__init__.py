"""Block and header containers."""

from .block import Block, Header

__all__ = [
    "Block",
    "Header",
]
