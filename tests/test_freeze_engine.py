"""
Freeze Engine & Vote Ledger Test Suite

Coverage:
  - UintDomain         : range checks, checked add / sub / mul / square
  - VoteLedger         : bounded insertion order, removal, highest-id query
  - binding_record     : max cost with larger-id tie-break
  - FreezeEngine       : raise-only apply, exact recompute, release
  - ProposalStore      : copies, tallies, close gate
  - Host fakes         : origins, manual clock, in-memory balances
"""

import os
import sys
from unittest.mock import MagicMock, patch

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from qvote.exceptions import (
    ArithmeticOverflowError,
    ArithmeticUnderflowError,
    BadOriginError,
    InvalidAmountError,
    ProposalNotFoundError,
    TooManyVotesError,
    VoteAlreadyEndedError,
    VotingPeriodNotOverError,
)
from qvote.governance import (
    EventLog,
    FreezeEngine,
    Proposal,
    ProposalCreated,
    ProposalResult,
    ProposalStore,
    UintDomain,
    VoteDirection,
    VoteLedger,
    VoteOutcome,
    VoteRecord,
    binding_record,
    max_by_proposal_id,
)
from qvote.host import BalanceLedger, InMemoryBalances, ManualClock, Origin


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

U128 = UintDomain(128, "balance")
U8 = UintDomain(8, "u8")
REASON = "AccountDeposit"


def aye(pid, votes):
    return VoteRecord(proposal_id=pid, direction=VoteDirection.AYE, votes=votes)


def nay(pid, votes):
    return VoteRecord(proposal_id=pid, direction=VoteDirection.NAY, votes=votes)


def mock_ledger(held=0):
    """BalanceLedger spy reporting *held* as the current freeze."""
    ledger = MagicMock(spec=BalanceLedger)
    ledger.reserved.return_value = held
    return ledger


# ══════════════════════════════════════════════════════════════════════
#  ARITHMETIC
# ══════════════════════════════════════════════════════════════════════


class TestUintDomain:

    def test_bounds(self):
        assert U8.max_value == 255
        assert U128.max_value == 2 ** 128 - 1
        assert U8.check(255) == 255

    def test_check_rejects_out_of_range(self):
        with pytest.raises(ArithmeticOverflowError):
            U8.check(256)
        with pytest.raises(InvalidAmountError):
            U8.check(-1)

    def test_check_rejects_non_integers(self):
        for bad in (True, 1.5, "3", None):
            with pytest.raises(InvalidAmountError):
                U8.check(bad)

    def test_checked_operations(self):
        assert U8.add(200, 55) == 255
        with pytest.raises(ArithmeticOverflowError):
            U8.add(200, 56)
        assert U8.sub(5, 5) == 0
        with pytest.raises(ArithmeticUnderflowError):
            U8.sub(4, 5)
        assert U8.square(15) == 225
        with pytest.raises(ArithmeticOverflowError):
            U8.square(16)

    def test_overflow_is_an_arithmetic_error(self):
        from qvote.exceptions import VotingArithmeticError, VotingError
        with pytest.raises(VotingArithmeticError):
            U8.mul(16, 16)
        assert issubclass(ArithmeticOverflowError, VotingError)


# ══════════════════════════════════════════════════════════════════════
#  VOTE LEDGER
# ══════════════════════════════════════════════════════════════════════


class TestVoteLedger:

    def test_insertion_order_kept(self):
        ledger = VoteLedger(max_votes=5)
        for pid in (3, 1, 2):
            ledger.upsert("alice", aye(pid, 1))
        assert [r.proposal_id for r in ledger.entries("alice")] == [3, 1, 2]

    def test_entries_are_copies(self):
        ledger = VoteLedger(max_votes=5)
        ledger.upsert("alice", aye(0, 1))
        ledger.entries("alice").clear()
        assert ledger.count("alice") == 1

    def test_find(self):
        ledger = VoteLedger(max_votes=5)
        ledger.upsert("alice", aye(4, 1))
        ledger.upsert("alice", nay(7, 2))
        index, records = ledger.find("alice", 7)
        assert index == 1
        assert records[index] == nay(7, 2)
        assert ledger.find("alice", 9) is None
        assert ledger.find("bob", 4) is None

    def test_capacity(self):
        ledger = VoteLedger(max_votes=2)
        ledger.upsert("alice", aye(0, 1))
        ledger.upsert("alice", aye(1, 1))
        assert not ledger.can_insert("alice")
        with pytest.raises(TooManyVotesError):
            ledger.upsert("alice", aye(2, 1))
        assert ledger.count("alice") == 2

    def test_duplicate_proposal_rejected(self):
        ledger = VoteLedger(max_votes=5)
        ledger.upsert("alice", aye(0, 1))
        with pytest.raises(ValueError):
            ledger.upsert("alice", nay(0, 3))

    def test_remove_leaves_empty_entry(self):
        ledger = VoteLedger(max_votes=5)
        ledger.upsert("alice", aye(0, 4))
        assert ledger.remove_at("alice", 0) == aye(0, 4)
        assert ledger.entries("alice") == []
        assert ledger.has_entry("alice")
        assert not ledger.has_entry("bob")

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            VoteLedger(max_votes=0)

    def test_max_by_proposal_id_ignores_insertion_order(self):
        records = [aye(5, 1), aye(9, 1), aye(2, 8)]
        index, record = max_by_proposal_id(records)
        assert (index, record.proposal_id) == (1, 9)
        assert max_by_proposal_id([]) is None

    def test_record_serialization(self):
        record = nay(3, 12)
        assert record.to_dict() == {"proposalId": 3, "direction": "nay", "votes": "12"}
        assert VoteRecord.from_dict(record.to_dict()) == record
        assert not record.aye
        assert record.cost(U128) == 144


# ══════════════════════════════════════════════════════════════════════
#  FREEZE ENGINE
# ══════════════════════════════════════════════════════════════════════


class TestBindingRecord:

    def test_highest_cost_wins(self):
        assert binding_record([aye(0, 5), nay(1, 6), aye(2, 3)], U128) == nay(1, 6)

    def test_tie_goes_to_larger_proposal_id(self):
        assert binding_record([aye(7, 4), nay(2, 4)], U128) == aye(7, 4)
        assert binding_record([nay(2, 4), aye(7, 4)], U128) == aye(7, 4)

    def test_empty(self):
        assert binding_record([], U128) is None


class TestFreezeEngine:

    def test_first_vote_acquires(self):
        ledger = mock_ledger(held=0)
        engine = FreezeEngine(ledger, U128, REASON)
        assert engine.apply_new_vote("alice", aye(0, 5), 25) == 25
        ledger.reserve.assert_called_once_with(REASON, "alice", 25)

    def test_apply_never_lowers(self):
        ledger = mock_ledger(held=25)
        engine = FreezeEngine(ledger, U128, REASON)
        assert engine.apply_new_vote("alice", aye(1, 3), 9) == 25
        ledger.reserve.assert_not_called()
        ledger.release.assert_not_called()

    def test_apply_raises(self):
        ledger = mock_ledger(held=25)
        engine = FreezeEngine(ledger, U128, REASON)
        assert engine.apply_new_vote("alice", nay(1, 6), 36) == 36
        ledger.reserve.assert_called_once_with(REASON, "alice", 36)

    def test_recompute_sets_exact_binding_cost(self):
        ledger = mock_ledger(held=36)
        engine = FreezeEngine(ledger, U128, REASON)
        assert engine.recompute_after_removal("alice", [aye(0, 2), nay(3, 3)]) == 9
        ledger.reserve.assert_called_once_with(REASON, "alice", 9)

    def test_recompute_releases_when_empty(self):
        ledger = mock_ledger(held=36)
        engine = FreezeEngine(ledger, U128, REASON)
        assert engine.recompute_after_removal("alice", []) == 0
        ledger.release.assert_called_once_with(REASON, "alice")
        ledger.reserve.assert_not_called()

    def test_replacement_sequence_on_real_ledger(self):
        balances = InMemoryBalances({"alice": 100})
        engine = FreezeEngine(balances, U128, REASON)
        engine.apply_new_vote("alice", aye(0, 6), 36)
        # replace 6 votes with 3: remove, recompute, insert, apply
        engine.recompute_after_removal("alice", [])
        engine.apply_new_vote("alice", aye(0, 3), 9)
        assert engine.frozen("alice") == 9
        assert engine.required_for([aye(0, 3), nay(1, 5)]) == 25
        assert engine.required_for([]) == 0


# ══════════════════════════════════════════════════════════════════════
#  PROPOSAL STORE
# ══════════════════════════════════════════════════════════════════════


class TestProposalStore:

    def _store(self):
        return ProposalStore(UintDomain(32, "proposal id"), U128)

    def test_tallies_only_persist_on_save(self):
        store = self._store()
        pid = store.create(b"\x00" * 32, current_time=1)
        copy = store.get(pid)
        store.add_votes(copy, VoteDirection.AYE, 4)
        store.add_votes(copy, VoteDirection.NAY, 2)
        assert store.get(pid).ayes == 0
        store.save(copy)
        p = store.get(pid)
        assert (p.ayes, p.nays) == (4, 2)
        assert p.tally(VoteDirection.NAY) == 2

    def test_remove_votes_underflow(self):
        store = self._store()
        pid = store.create(b"\x00" * 32, current_time=1)
        copy = store.get(pid)
        with pytest.raises(ArithmeticUnderflowError):
            store.remove_votes(copy, VoteDirection.AYE, 1)

    def test_close_gate(self):
        store = self._store()
        pid = store.create(b"\x00" * 32, current_time=5)
        with pytest.raises(VotingPeriodNotOverError):
            store.close(pid, current_time=14, duration=10)
        assert store.close(pid, current_time=15, duration=10) == VoteOutcome.TIE
        with pytest.raises(VoteAlreadyEndedError):
            store.close(pid, current_time=99, duration=10)

    def test_missing(self):
        store = self._store()
        with pytest.raises(ProposalNotFoundError):
            store.get(0)
        with pytest.raises(ProposalNotFoundError):
            store.close(0, current_time=50, duration=10)

    def test_to_dict(self):
        store = self._store()
        store.create(b"\xab" * 32, current_time=3)
        snapshot = store.to_dict()
        assert snapshot["nextId"] == 1
        assert snapshot["proposals"][0]["description"] == "ab" * 32
        assert snapshot["proposals"][0]["startTime"] == 3

    def test_proposal_restored_from_snapshot(self):
        store = self._store()
        pid = store.create(b"\xcd" * 32, current_time=2)
        copy = store.get(pid)
        store.add_votes(copy, VoteDirection.NAY, 2 ** 100)
        store.save(copy)
        store.close(pid, current_time=12, duration=10)

        restored = Proposal.from_dict(store.to_dict()["proposals"][0])
        assert restored == store.get(pid)
        assert restored.nays == 2 ** 100
        assert not restored.is_votable
        assert restored.outcome == VoteOutcome.NAY

    def test_overflow_warning_names_domain_limit(self):
        store = ProposalStore(UintDomain(32, "proposal id"), U8)
        pid = store.create(b"\x00" * 32, current_time=1)
        copy = store.get(pid)
        store.add_votes(copy, VoteDirection.AYE, 255)
        with patch("qvote.governance.proposals.logger") as log:
            with pytest.raises(ArithmeticOverflowError):
                store.add_votes(copy, VoteDirection.AYE, 1)
        message = log.warning.call_args[0][0]
        assert "maximum 255" in message
        assert "inconsistent" not in message

    def test_underflow_warning_flags_inconsistency(self):
        store = self._store()
        pid = store.create(b"\x00" * 32, current_time=1)
        with patch("qvote.governance.proposals.logger") as log:
            with pytest.raises(ArithmeticUnderflowError):
                store.remove_votes(store.get(pid), VoteDirection.NAY, 1)
        assert "inconsistent" in log.warning.call_args[0][0]


# ══════════════════════════════════════════════════════════════════════
#  HOST FAKES & EVENTS
# ══════════════════════════════════════════════════════════════════════


class TestHostFakes:

    def test_origins(self):
        Origin.root().ensure_root()
        assert Origin.signed("alice").ensure_signed() == "alice"
        with pytest.raises(BadOriginError):
            Origin.signed("alice").ensure_root()
        with pytest.raises(BadOriginError):
            Origin.none().ensure_signed()
        with pytest.raises(ValueError):
            Origin.signed("")

    def test_manual_clock(self):
        clock = ManualClock(3)
        assert clock.advance() == 4
        assert clock.advance(6) == 10
        clock.set_block(10)
        with pytest.raises(ValueError):
            clock.set_block(9)

    def test_in_memory_balances(self):
        balances = InMemoryBalances({"alice": 100})
        balances.reserve(REASON, "alice", 40)
        balances.reserve("Other", "alice", 10)
        assert balances.reserved(REASON, "alice") == 40
        assert balances.frozen("alice") == 40
        assert balances.spendable("alice") == 60
        assert balances.total_balance("alice") == 100
        balances.release(REASON, "alice")
        assert balances.reserved(REASON, "alice") == 0
        assert balances.frozen("alice") == 10


class TestEventLog:

    def test_emit_and_query(self):
        log = EventLog()
        log.emit(ProposalCreated(proposal_id=0))
        log.emit(ProposalResult(proposal_id=0, outcome=VoteOutcome.NAY))
        assert len(log) == 2
        assert log.of_type(ProposalCreated) == [ProposalCreated(proposal_id=0)]
        assert log.last.to_dict() == {
            "event": "ProposalResult", "proposal_id": 0, "outcome": "NAY",
        }
        log.clear()
        assert log.last is None
