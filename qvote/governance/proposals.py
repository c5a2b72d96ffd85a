"""
Proposal Store

Defines the Proposal record, vote directions and outcomes, and the store that
allocates proposal ids, keeps aye/nay tallies and closes proposals once their
voting period has elapsed.

Lifecycle:
    OPEN    tallies mutable, accepts votes
    CLOSED  terminal; tallies frozen, only claims act on it
"""

import hashlib
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, Iterator, Optional

from ..constants import DESCRIPTION_HASH_SIZE
from ..exceptions import (
    IdOverflowError,
    InvalidDirectionError,
    ProposalNotFoundError,
    VoteAlreadyEndedError,
    VotingArithmeticError,
    VotingPeriodNotOverError,
)
from ..logger import get_logger
from .arithmetic import UintDomain

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  ENUMS
# ══════════════════════════════════════════════════════════════════════

class VoteDirection(Enum):
    """Direction of a vote."""
    AYE = "aye"    # Approve the proposal
    NAY = "nay"    # Keep the status quo

    @classmethod
    def from_bool(cls, aye: bool) -> "VoteDirection":
        return cls.AYE if aye else cls.NAY

    @classmethod
    def parse(cls, value) -> "VoteDirection":
        """Accept a VoteDirection, a bool (True = aye) or 'aye'/'nay'."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return cls.from_bool(value)
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidDirectionError(f"Invalid vote direction: {value!r}") from None


class VoteOutcome(Enum):
    """Result reported when a proposal is closed."""
    AYE = "AYE"
    NAY = "NAY"
    TIE = "TIE"


# ══════════════════════════════════════════════════════════════════════
#  PROPOSAL
# ══════════════════════════════════════════════════════════════════════

def hash_description(description: bytes) -> bytes:
    """BLAKE2b-256 digest stored in place of the proposal text."""
    if isinstance(description, str):
        description = description.encode()
    return hashlib.blake2b(bytes(description), digest_size=DESCRIPTION_HASH_SIZE).digest()


@dataclass
class Proposal:
    """
    A proposal in the pool.

    Fields:
        id:           Monotonically assigned identifier
        description:  BLAKE2b-256 digest of the proposal text
        start_time:   Block number at creation
        ayes:         Sum of active aye vote counts
        nays:         Sum of active nay vote counts
        closed:       One-way flag set by close()
    """
    id: int
    description: bytes
    start_time: int
    ayes: int = 0
    nays: int = 0
    closed: bool = False

    @property
    def is_votable(self) -> bool:
        return not self.closed

    @property
    def outcome(self) -> VoteOutcome:
        """Compare tallies; never mutates them."""
        if self.ayes > self.nays:
            return VoteOutcome.AYE
        if self.ayes < self.nays:
            return VoteOutcome.NAY
        return VoteOutcome.TIE

    def tally(self, direction: VoteDirection) -> int:
        return self.ayes if direction is VoteDirection.AYE else self.nays

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description.hex(),
            "startTime": self.start_time,
            "ayes": str(self.ayes),
            "nays": str(self.nays),
            "closed": self.closed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Proposal":
        return cls(
            id=data["id"],
            description=bytes.fromhex(data["description"]),
            start_time=data["startTime"],
            ayes=int(data.get("ayes", 0)),
            nays=int(data.get("nays", 0)),
            closed=data.get("closed", False),
        )

    def __repr__(self) -> str:
        state = "CLOSED" if self.closed else "OPEN"
        return f"<Proposal #{self.id} {state} ayes={self.ayes} nays={self.nays}>"


# ══════════════════════════════════════════════════════════════════════
#  STORE
# ══════════════════════════════════════════════════════════════════════

class ProposalStore:
    """
    Owns every proposal, keyed by id, and the next-id counter.

    `get()` hands out copies. Callers mutate a copy with add_votes/remove_votes
    and persist it with save(), so a failure part-way through an operation
    leaves the stored record untouched.
    """

    def __init__(
        self,
        id_domain: UintDomain,
        balance_domain: UintDomain,
        block_to_balance: Optional[Callable[[int], int]] = None,
    ):
        self._id_domain = id_domain
        self._balance = balance_domain
        self._block_to_balance = block_to_balance or (lambda block: block)
        self._proposals: Dict[int, Proposal] = {}
        self._next_id = 0

    @property
    def next_id(self) -> int:
        return self._next_id

    # ── Id allocation ─────────────────────────────────────────────────

    def _reserve_next_id(self) -> int:
        """Return the id to assign, checking the counter can still advance."""
        proposal_id = self._next_id
        if proposal_id >= self._id_domain.max_value:
            raise IdOverflowError(
                f"Proposal id counter exhausted at {proposal_id}"
            )
        return proposal_id

    def create(self, description_hash: bytes, current_time: int) -> int:
        """Store a new open proposal and return its id."""
        proposal_id = self._reserve_next_id()
        self._proposals[proposal_id] = Proposal(
            id=proposal_id,
            description=bytes(description_hash),
            start_time=current_time,
        )
        self._next_id = proposal_id + 1
        logger.info(f"ProposalCreated Proposal #{proposal_id} at block {current_time}")
        return proposal_id

    # ── Lookup ────────────────────────────────────────────────────────

    def get(self, proposal_id: int) -> Proposal:
        """Return a copy of the proposal or raise ProposalNotFoundError."""
        proposal = self._proposals.get(proposal_id)
        if proposal is None:
            raise ProposalNotFoundError(f"Proposal #{proposal_id} does not exist")
        return replace(proposal)

    def exists(self, proposal_id: int) -> bool:
        return proposal_id in self._proposals

    def save(self, proposal: Proposal) -> None:
        if proposal.id not in self._proposals:
            raise ProposalNotFoundError(f"Proposal #{proposal.id} does not exist")
        self._proposals[proposal.id] = replace(proposal)

    def __iter__(self) -> Iterator[Proposal]:
        for proposal_id in sorted(self._proposals):
            yield replace(self._proposals[proposal_id])

    def __len__(self) -> int:
        return len(self._proposals)

    # ── Tallies ───────────────────────────────────────────────────────

    def add_votes(self, proposal: Proposal, direction: VoteDirection, amount: int) -> None:
        """Add *amount* to the aye or nay tally of *proposal* (a copy)."""
        try:
            if direction is VoteDirection.AYE:
                proposal.ayes = self._balance.add(proposal.ayes, amount)
            else:
                proposal.nays = self._balance.add(proposal.nays, amount)
        except VotingArithmeticError:
            logger.warning(
                f"Tally overflow on Proposal #{proposal.id} ({direction.name} += {amount}); "
                f"{direction.name} tally would exceed the {self._balance.name} maximum "
                f"{self._balance.max_value}"
            )
            raise

    def remove_votes(self, proposal: Proposal, direction: VoteDirection, amount: int) -> None:
        """Subtract *amount* from the aye or nay tally of *proposal* (a copy)."""
        try:
            if direction is VoteDirection.AYE:
                proposal.ayes = self._balance.sub(proposal.ayes, amount)
            else:
                proposal.nays = self._balance.sub(proposal.nays, amount)
        except VotingArithmeticError:
            logger.warning(
                f"Tally underflow on Proposal #{proposal.id} ({direction.name} -= {amount}); "
                f"vote ledger and tallies are inconsistent"
            )
            raise

    # ── Closing ───────────────────────────────────────────────────────

    def close(self, proposal_id: int, current_time: int, duration: int) -> VoteOutcome:
        """
        Close the proposal once `start_time + duration` has been reached.

        Block numbers are converted into the balance domain before they are
        compared.

        Raises:
            ProposalNotFoundError, VoteAlreadyEndedError,
            ArithmeticOverflowError, VotingPeriodNotOverError
        """
        proposal = self.get(proposal_id)
        if proposal.closed:
            raise VoteAlreadyEndedError(f"Proposal #{proposal_id} is already closed")

        start = self._to_balance(proposal.start_time)
        now = self._to_balance(current_time)
        deadline = self._balance.add(start, self._to_balance(duration))
        if deadline > now:
            raise VotingPeriodNotOverError(
                f"Proposal #{proposal_id} can be closed at block {deadline}, now {now}"
            )

        proposal.closed = True
        self.save(proposal)
        outcome = proposal.outcome
        logger.info(
            f"ProposalResult Proposal #{proposal_id} {outcome.value} "
            f"(ayes={proposal.ayes} nays={proposal.nays})"
        )
        return outcome

    def _to_balance(self, block: int) -> int:
        return self._balance.check(self._block_to_balance(block), "block number")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nextId": self._next_id,
            "proposals": [p.to_dict() for p in self],
        }

    def __repr__(self) -> str:
        return f"<ProposalStore proposals={len(self._proposals)} next_id={self._next_id}>"
