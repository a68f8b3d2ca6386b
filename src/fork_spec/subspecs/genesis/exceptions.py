"""Errors raised while materializing a genesis block."""

from __future__ import annotations

from fork_spec.types import ForkSpecError


class MalformedGenesisError(ForkSpecError):
    """
    A genesis dump holds a value that cannot be decoded.

    Attributes:
        field: Name of the offending field, e.g. "nonce" or "balance".
        address: Allocation the field belongs to, if any.
    """

    def __init__(self, field: str, detail: str, *, address: str | None = None) -> None:
        self.field = field
        self.address = address
        if address is None:
            msg = f"malformed {field}: {detail}"
        else:
            msg = f"malformed account {address!r} {field}: {detail}"
        super().__init__(msg)


class StorageWriteError(ForkSpecError):
    """
    Persisting part of the genesis block failed.

    Records written by earlier steps stay in storage.

    Attributes:
        step: The write that failed, e.g. "state" or "canonical hash".
    """

    def __init__(self, step: str, cause: BaseException) -> None:
        self.step = step
        super().__init__(f"cannot write {step}: {cause}")
