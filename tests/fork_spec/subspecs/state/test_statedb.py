"""Tests for the in-memory ledger state and its snapshots."""

from __future__ import annotations

import pytest

from fork_spec.subspecs.state import Account, StateDB, StateNotFoundError
from fork_spec.subspecs.storage import SQLiteDatabase
from fork_spec.types import EMPTY_CODE_HASH, EMPTY_ROOT, ZERO_HASH, Address, Bytes32
from fork_spec.types.rlp import RLPDecodingError

ALICE = Address(b"\xaa" * 20)
BOB = Address(b"\xbb" * 20)
SLOT = Bytes32(b"\x00" * 31 + b"\x01")


class TestAccount:
    """Tests for the per-account commitments."""

    def test_empty_account(self) -> None:
        account = Account()
        assert account.storage_root() == EMPTY_ROOT
        assert account.code_hash() == EMPTY_CODE_HASH

    def test_zero_slots_are_ignored(self) -> None:
        """Writing zero to a slot is the same as never writing it."""
        account = Account(storage={SLOT: ZERO_HASH})
        assert account.storage_root() == EMPTY_ROOT

    def test_storage_changes_root(self) -> None:
        account = Account(storage={SLOT: Bytes32(b"\x00" * 31 + b"\x05")})
        assert account.storage_root() != EMPTY_ROOT


class TestStateDB:
    """Tests for the mutable state view."""

    def test_empty_state_root(self, db: SQLiteDatabase) -> None:
        assert StateDB(db).root() == EMPTY_ROOT
        assert StateDB(db, ZERO_HASH).root() == EMPTY_ROOT

    def test_balances_accumulate(self, db: SQLiteDatabase) -> None:
        state = StateDB(db)
        state.add_balance(ALICE, 10)
        state.add_balance(ALICE, 5)

        assert state.get_balance(ALICE) == 15
        assert state.get_balance(BOB) == 0

    def test_code_and_storage(self, db: SQLiteDatabase) -> None:
        state = StateDB(db)
        state.set_code(ALICE, b"\x60\x01")
        state.set_state(ALICE, SLOT, Bytes32(b"\x11" * 32))

        assert state.get_code(ALICE) == b"\x60\x01"
        assert state.get_state(ALICE, SLOT) == Bytes32(b"\x11" * 32)
        assert state.get_state(BOB, SLOT) is None

    def test_zero_balance_account_counts(self, db: SQLiteDatabase) -> None:
        """Touching an account creates it, even with nothing in it."""
        state = StateDB(db)
        state.add_balance(ALICE, 0)

        assert [address for address, _ in state.accounts()] == [ALICE]
        assert state.root() != EMPTY_ROOT

    def test_root_is_order_independent(self, db: SQLiteDatabase) -> None:
        first = StateDB(db)
        first.add_balance(ALICE, 1)
        first.add_balance(BOB, 2)

        second = StateDB(db)
        second.add_balance(BOB, 2)
        second.add_balance(ALICE, 1)

        assert first.root() == second.root()

    def test_root_tracks_every_field(self, db: SQLiteDatabase) -> None:
        state = StateDB(db)
        state.add_balance(ALICE, 1)
        roots = {state.root()}

        state.set_code(ALICE, b"\x00")
        roots.add(state.root())
        state.set_state(ALICE, SLOT, Bytes32(b"\x01" * 32))
        roots.add(state.root())

        assert len(roots) == 3


class TestCommit:
    """Tests for committing and reopening snapshots."""

    def test_nothing_written_before_batch(self, db: SQLiteDatabase) -> None:
        state = StateDB(db)
        state.add_balance(ALICE, 1)
        root, _batch = state.commit_batch()

        assert db.get_state(root) is None

    def test_reopen_at_root(self, db: SQLiteDatabase) -> None:
        state = StateDB(db)
        state.add_balance(ALICE, 1337)
        state.set_code(BOB, b"\x60\x00")
        state.set_state(BOB, SLOT, Bytes32(b"\x22" * 32))
        root, batch = state.commit_batch()
        batch.write()

        reopened = StateDB(db, root)
        assert reopened.root() == root
        assert reopened.get_balance(ALICE) == 1337
        assert reopened.get_code(BOB) == b"\x60\x00"
        assert reopened.get_state(BOB, SLOT) == Bytes32(b"\x22" * 32)

    def test_batch_carries_root(self, db: SQLiteDatabase) -> None:
        state = StateDB(db)
        state.add_balance(ALICE, 1)
        root, batch = state.commit_batch()

        assert batch.root == root == state.root()

    def test_missing_snapshot(self, db: SQLiteDatabase) -> None:
        root = Bytes32(b"\x33" * 32)
        with pytest.raises(StateNotFoundError) as exc_info:
            StateDB(db, root)

        assert exc_info.value.root == root

    def test_corrupt_snapshot(self, db: SQLiteDatabase) -> None:
        root = Bytes32(b"\x44" * 32)
        db.put_state(root, b"\xc1\x80")

        with pytest.raises(RLPDecodingError, match="Malformed state snapshot"):
            StateDB(db, root)
