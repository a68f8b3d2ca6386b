"""
Ledger state view.

`StateDB` holds the accounts of one state in memory. It is opened at a root:
the zero root gives an empty state, any other root loads the snapshot stored
under it. Mutations stay in memory until `commit_batch` computes the new root
and hands back a `StateBatch`; nothing is durable before `StateBatch.write`.

The root is a keccak-256 commitment over the RLP encoding of the accounts
sorted by address. Each account contributes its nonce, balance, storage root
and code hash, the same four values an Ethereum account record holds. This
commitment is deterministic and sensitive to every account field, but it is
not a Merkle-Patricia trie root, so it does not match other clients' roots.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator

from fork_spec.types import (
    EMPTY_CODE_HASH,
    EMPTY_ROOT,
    Address,
    Bytes32,
    ForkSpecError,
    big_endian_to_int,
    int_to_big_endian,
    keccak256,
    rlp_hash,
)
from fork_spec.types.rlp import RLPDecodingError, RLPItem, decode_rlp_list, encode_rlp

if TYPE_CHECKING:
    from fork_spec.subspecs.storage import Database

logger = logging.getLogger(__name__)


class StateNotFoundError(ForkSpecError):
    """No state snapshot is stored under the requested root."""

    def __init__(self, root: Bytes32) -> None:
        self.root = root
        super().__init__(f"missing state snapshot for root 0x{root.hex()}")


@dataclass(slots=True)
class Account:
    """A single account in the ledger state."""

    nonce: int = 0
    balance: int = 0
    code: bytes = b""
    storage: dict[Bytes32, Bytes32] = field(default_factory=dict)

    def storage_root(self) -> Bytes32:
        """Commitment over the non-zero storage slots, sorted by key."""
        slots = sorted((key, value) for key, value in self.storage.items() if not value.is_zero())
        if not slots:
            return EMPTY_ROOT
        return rlp_hash([[bytes(key), bytes(value).lstrip(b"\x00")] for key, value in slots])

    def code_hash(self) -> Bytes32:
        """Hash of the account's code."""
        return keccak256(self.code) if self.code else EMPTY_CODE_HASH



@dataclass(frozen=True, slots=True)
class StateBatch:
    """A committed state waiting to be written to storage."""

    db: Database
    root: Bytes32
    data: bytes

    def write(self) -> None:
        """Persist the snapshot under its root."""
        self.db.put_state(self.root, self.data)


class StateDB:
    """In-memory view over the accounts of one state."""

    def __init__(self, db: Database, root: Bytes32 | None = None) -> None:
        """
        Open the state at `root`.

        Args:
            db: Storage holding state snapshots.
            root: Root to open. None or the zero hash opens an empty state.

        Raises:
            StateNotFoundError: If a non-zero root has no stored snapshot.
        """
        self._db = db
        self._accounts: dict[Address, Account] = {}

        if root is not None and not root.is_zero():
            data = db.get_state(root)
            if data is None:
                raise StateNotFoundError(root)
            self._accounts = _decode_snapshot(data)

    def _account(self, address: Address) -> Account:
        account = self._accounts.get(address)
        if account is None:
            account = self._accounts[address] = Account()
        return account

    def add_balance(self, address: Address, amount: int) -> None:
        """Credit `amount` to the account, creating it if needed."""
        self._account(address).balance += amount

    def set_code(self, address: Address, code: bytes) -> None:
        self._account(address).code = bytes(code)

    def set_state(self, address: Address, key: Bytes32, value: Bytes32) -> None:
        """Set one storage slot."""
        self._account(address).storage[key] = value

    def get_balance(self, address: Address) -> int:
        account = self._accounts.get(address)
        return account.balance if account is not None else 0

    def get_code(self, address: Address) -> bytes:
        account = self._accounts.get(address)
        return account.code if account is not None else b""

    def get_state(self, address: Address, key: Bytes32) -> Bytes32 | None:
        """Value of a storage slot, or None if it was never set."""
        account = self._accounts.get(address)
        return account.storage.get(key) if account is not None else None

    def accounts(self) -> Iterator[tuple[Address, Account]]:
        """
        Every touched account, ordered by address.

        Accounts that hold nothing are kept: an allocation of zero still
        creates its account.
        """
        for address in sorted(self._accounts):
            yield address, self._accounts[address]

    def root(self) -> Bytes32:
        """Commitment over the current accounts."""
        entries = [
            [
                bytes(address),
                [
                    int_to_big_endian(account.nonce),
                    int_to_big_endian(account.balance),
                    bytes(account.storage_root()),
                    bytes(account.code_hash()),
                ],
            ]
            for address, account in self.accounts()
        ]
        if not entries:
            return EMPTY_ROOT
        return rlp_hash(entries)

    def commit_batch(self) -> tuple[Bytes32, StateBatch]:
        """
        Compute the root and prepare the snapshot for writing.

        Nothing is written until the returned batch's `write` is called.
        """
        root = self.root()
        data = _encode_snapshot(self.accounts())
        logger.debug("Committed state root 0x%s", root.hex())
        return root, StateBatch(db=self._db, root=root, data=data)


# -----------------------------------------------------------------------------
# Snapshot encoding
# -----------------------------------------------------------------------------
#
# A snapshot is an RLP list of accounts:
#   [address, nonce, balance, code, [[slot, value], ...]]


def _encode_snapshot(accounts: Iterator[tuple[Address, Account]]) -> bytes:
    items: list[RLPItem] = []
    for address, account in accounts:
        slots: list[RLPItem] = [
            [bytes(key), bytes(value)]
            for key, value in sorted(account.storage.items())
            if not value.is_zero()
        ]
        items.append(
            [
                bytes(address),
                int_to_big_endian(account.nonce),
                int_to_big_endian(account.balance),
                account.code,
                slots,
            ]
        )
    return encode_rlp(items)


def _as_bytes(item: RLPItem) -> bytes:
    if not isinstance(item, bytes):
        raise RLPDecodingError("Malformed state snapshot: expected a byte string")
    return item


def _as_list(item: RLPItem, size: int | None = None) -> list[RLPItem]:
    if not isinstance(item, list) or (size is not None and len(item) != size):
        raise RLPDecodingError("Malformed state snapshot: unexpected list shape")
    return item


def _decode_snapshot(data: bytes) -> dict[Address, Account]:
    accounts: dict[Address, Account] = {}
    try:
        for entry in decode_rlp_list(data):
            address, nonce, balance, code, slots = _as_list(entry, 5)
            storage: dict[Bytes32, Bytes32] = {}
            for slot in _as_list(slots):
                key, value = _as_list(slot, 2)
                storage[Bytes32(_as_bytes(key))] = Bytes32(_as_bytes(value))

            accounts[Address(_as_bytes(address))] = Account(
                nonce=big_endian_to_int(_as_bytes(nonce)),
                balance=big_endian_to_int(_as_bytes(balance)),
                code=_as_bytes(code),
                storage=storage,
            )
    except ValueError as e:
        raise RLPDecodingError(f"Malformed state snapshot: {e}") from e
    return accounts
