"""
Vote Ledger

Per-account, bounded, insertion-ordered list of active votes. An account
holds at most one record per proposal. Records stay in the order they were
first cast; "maximum proposal id" is a separate query and never reorders
the list.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..exceptions import TooManyVotesError
from ..logger import get_logger
from .arithmetic import UintDomain
from .proposals import VoteDirection

logger = get_logger(__name__)


@dataclass(frozen=True)
class VoteRecord:
    """An account's active vote on one proposal."""
    proposal_id: int
    direction: VoteDirection
    votes: int

    @property
    def aye(self) -> bool:
        return self.direction is VoteDirection.AYE

    def cost(self, domain: UintDomain) -> int:
        """Tokens this vote requires frozen (votes squared)."""
        return domain.square(self.votes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "proposalId": self.proposal_id,
            "direction": self.direction.value,
            "votes": str(self.votes),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VoteRecord":
        return cls(
            proposal_id=data["proposalId"],
            direction=VoteDirection(data["direction"]),
            votes=int(data["votes"]),
        )


def max_by_proposal_id(records: List[VoteRecord]) -> Optional[Tuple[int, VoteRecord]]:
    """Position and record with the highest proposal id, or None if empty."""
    best: Optional[Tuple[int, VoteRecord]] = None
    for index, record in enumerate(records):
        if best is None or record.proposal_id >= best[1].proposal_id:
            best = (index, record)
    return best


class VoteLedger:
    """Active votes of every account, capped at *max_votes* per account."""

    def __init__(self, max_votes: int):
        if max_votes < 1:
            raise ValueError("max_votes must be at least 1")
        self.max_votes = max_votes
        self._history: Dict[str, List[VoteRecord]] = {}

    # ── Queries ───────────────────────────────────────────────────────

    def entries(self, account: str) -> List[VoteRecord]:
        """Copy of the account's records in insertion order."""
        return list(self._history.get(account, []))

    def has_entry(self, account: str) -> bool:
        """True once the account has cast a vote, even if all were removed since."""
        return account in self._history

    def find(self, account: str, proposal_id: int) -> Optional[Tuple[int, List[VoteRecord]]]:
        """Position of the account's vote on *proposal_id* and the full list, or None."""
        records = self._history.get(account)
        if records is None:
            return None
        for index, record in enumerate(records):
            if record.proposal_id == proposal_id:
                return index, list(records)
        return None

    def count(self, account: str) -> int:
        return len(self._history.get(account, []))

    def can_insert(self, account: str) -> bool:
        return self.count(account) < self.max_votes

    def accounts(self) -> Iterator[str]:
        return iter(list(self._history))

    # ── Mutations ─────────────────────────────────────────────────────

    def upsert(self, account: str, record: VoteRecord) -> List[VoteRecord]:
        """
        Append *record* to the account's list, creating the list if needed.

        Callers remove any existing record for the same proposal first.

        Raises TooManyVotesError if the list is already full.
        """
        records = self._history.get(account, [])
        if len(records) >= self.max_votes:
            raise TooManyVotesError(
                f"{account} already has {len(records)} active votes (max {self.max_votes})"
            )
        if any(r.proposal_id == record.proposal_id for r in records):
            raise ValueError(
                f"{account} already has a vote on proposal #{record.proposal_id}"
            )
        self._history[account] = records + [record]
        return list(self._history[account])

    def remove_at(self, account: str, position: int) -> VoteRecord:
        """Remove and return the record at *position*; the list may become empty."""
        records = list(self._history.get(account, []))
        removed = records.pop(position)
        self._history[account] = records
        return removed

    def to_dict(self) -> Dict[str, Any]:
        return {
            account: [r.to_dict() for r in records]
            for account, records in self._history.items()
        }

    def __repr__(self) -> str:
        return f"<VoteLedger accounts={len(self._history)} max_votes={self.max_votes}>"
