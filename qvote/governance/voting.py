"""
Quadratic Voting Engine

Implements:
  - Registered voters propose and vote on a single pool of proposals
  - n votes cost n² tokens, frozen on the voter's account
  - One freeze per account equal to its largest single-vote cost
  - Re-voting replaces the previous vote; a zero vote cancels it
  - Proposals close once their duration has elapsed (Aye / Nay / Tie)
  - After close, the vote with the highest proposal id can be claimed back

Every operation checks all of its failure conditions before it mutates any
state, so a raised VotingError leaves the engine unchanged.
"""

import threading
from typing import Any, Callable, Dict, List, Optional

from ..config import EngineConfig
from ..constants import (
    BALANCE_BITS,
    FREEZE_REASON,
    MAX_VOTES,
    PROPOSAL_DURATION,
    PROPOSAL_ID_BITS,
)
from ..exceptions import (
    InsufficientFundsError,
    NoVotesError,
    TooManyVotesError,
    VoteAlreadyEndedError,
    VotingPeriodNotOverError,
)
from ..host.balances import BalanceLedger
from ..host.clock import BlockClock
from ..host.origin import Origin
from ..logger import get_logger
from .arithmetic import UintDomain
from .events import (
    Event,
    EventLog,
    NoTokensUnlocked,
    ProposalCreated,
    ProposalResult,
    TokensUnlocked,
    VoteAdded,
    VoteRemovedOrCancelled,
    VoterRegistered,
)
from .freeze import FreezeEngine
from .ledger import VoteLedger, VoteRecord, max_by_proposal_id
from .proposals import (
    Proposal,
    ProposalStore,
    VoteDirection,
    VoteOutcome,
    hash_description,
)
from .registry import VoterRegistry

logger = get_logger(__name__)


class QuadraticVotingEngine:
    """
    Orchestrates registry, proposal store, vote ledger and freeze engine.

    Responsibilities:
        - Gate calls on origin and registration
        - Replace or cancel prior votes before recording new ones
        - Keep tallies equal to the sum of active vote counts
        - Keep each account's freeze equal to its largest vote cost
    """

    def __init__(
        self,
        balances: BalanceLedger,
        clock: BlockClock,
        max_votes: int = MAX_VOTES,
        proposal_duration: int = PROPOSAL_DURATION,
        proposal_id_bits: int = PROPOSAL_ID_BITS,
        balance_bits: int = BALANCE_BITS,
        freeze_reason: str = FREEZE_REASON,
        block_to_balance: Optional[Callable[[int], int]] = None,
    ):
        """
        Args:
            balances:          Host ledger holding balances and freezes
            clock:             Source of the current block number
            max_votes:         Active votes allowed per account
            proposal_duration: Blocks before a proposal can be closed
            proposal_id_bits:  Width of the proposal id type
            balance_bits:      Width of balances, tallies and vote counts
            freeze_reason:     Tag under which deposits are frozen
            block_to_balance:  Converts block numbers into the balance domain
        """
        self._balances = balances
        self._clock = clock
        self.proposal_duration = proposal_duration
        self.balance_domain = UintDomain(balance_bits, "balance")
        self.id_domain = UintDomain(proposal_id_bits, "proposal id")

        self.registry = VoterRegistry()
        self.proposals = ProposalStore(self.id_domain, self.balance_domain, block_to_balance)
        self.ledger = VoteLedger(max_votes)
        self.freezer = FreezeEngine(balances, self.balance_domain, freeze_reason)
        self.events = EventLog()

        self._lock = threading.RLock()

    @classmethod
    def from_config(
        cls,
        config: EngineConfig,
        balances: BalanceLedger,
        clock: BlockClock,
        block_to_balance: Optional[Callable[[int], int]] = None,
    ) -> "QuadraticVotingEngine":
        config.validate()
        voting = config.voting
        return cls(
            balances,
            clock,
            max_votes=voting.max_votes,
            proposal_duration=voting.proposal_duration,
            proposal_id_bits=voting.proposal_id_bits,
            balance_bits=voting.balance_bits,
            freeze_reason=voting.freeze_reason,
            block_to_balance=block_to_balance,
        )

    def _emit(self, event: Event) -> Event:
        return self.events.emit(event)

    # ── Register ──────────────────────────────────────────────────────

    def register(self, origin: Origin, account: str) -> VoterRegistered:
        """
        Add *account* to the voter pool.

        Requires a root origin.
        """
        with self._lock:
            origin.ensure_root()
            self.registry.register(account)
            return self._emit(VoterRegistered(voter=account))

    # ── Propose ───────────────────────────────────────────────────────

    def propose(self, origin: Origin, description: bytes) -> int:
        """Create a proposal from its description and return the new id."""
        with self._lock:
            who = origin.ensure_signed()
            self.registry.ensure_registered(who)

            proposal_id = self.proposals.create(
                hash_description(description),
                self._clock.current_time(),
            )
            self._emit(ProposalCreated(proposal_id=proposal_id))
            return proposal_id

    # ── Vote ──────────────────────────────────────────────────────────

    def vote(self, origin: Origin, amount: int, direction, proposal_id: int) -> Event:
        """
        Cast, replace or cancel a vote.

        Args:
            origin:      Signed origin of a registered voter
            amount:      Number of votes; costs amount² frozen tokens.
                         Zero cancels an existing vote.
            direction:   VoteDirection, bool (True = aye) or 'aye'/'nay'
            proposal_id: Target proposal

        Returns:
            VoteAdded, or VoteRemovedOrCancelled for a zero amount.
        """
        with self._lock:
            who = origin.ensure_signed()
            self.registry.ensure_registered(who)

            proposal = self.proposals.get(proposal_id)
            if not proposal.is_votable:
                raise VoteAlreadyEndedError(f"Proposal #{proposal_id} is already closed")
            direction = VoteDirection.parse(direction)

            amount = self.balance_domain.check(amount, "votes")
            required_tokens = self.balance_domain.square(amount)
            balance = self._balances.total_balance(who)
            if balance < required_tokens:
                raise InsufficientFundsError(
                    f"{who} needs {required_tokens} tokens for {amount} votes, has {balance}"
                )

            # Stage every check on the proposal copy before touching the ledger
            existing = self.ledger.find(who, proposal_id)
            if existing is not None:
                index, records = existing
                previous = records[index]
                self.proposals.remove_votes(proposal, previous.direction, previous.votes)
                remaining = records[:index] + records[index + 1:]
            else:
                remaining = self.ledger.entries(who)

            if amount > 0:
                if len(remaining) >= self.ledger.max_votes:
                    raise TooManyVotesError(
                        f"{who} already has {len(remaining)} active votes "
                        f"(max {self.ledger.max_votes})"
                    )
                self.proposals.add_votes(proposal, direction, amount)

            if existing is not None:
                self.ledger.remove_at(who, existing[0])
                self.freezer.recompute_after_removal(who, remaining)

            if amount == 0:
                self.proposals.save(proposal)
                logger.info(f"VoteRemovedOrCancelled Proposal #{proposal_id} account={who}")
                return self._emit(VoteRemovedOrCancelled(proposal_id=proposal_id))

            record = VoteRecord(proposal_id=proposal_id, direction=direction, votes=amount)
            self.ledger.upsert(who, record)
            self.freezer.apply_new_vote(who, record, required_tokens)
            self.proposals.save(proposal)

            logger.info(
                f"VoteAdded Proposal #{proposal_id} account={who} "
                f"{direction.name} x{amount} (cost={required_tokens})"
            )
            return self._emit(VoteAdded(proposal_id=proposal_id, votes=amount))

    # ── Close ─────────────────────────────────────────────────────────

    def close(self, origin: Origin, proposal_id: int) -> VoteOutcome:
        """
        End voting on a proposal whose duration has elapsed.

        Any signed origin may close; registration is not required.
        """
        with self._lock:
            origin.ensure_signed()
            outcome = self.proposals.close(
                proposal_id,
                self._clock.current_time(),
                self.proposal_duration,
            )
            self._emit(ProposalResult(proposal_id=proposal_id, outcome=outcome))
            return outcome

    # ── Claim ─────────────────────────────────────────────────────────

    def claim(self, origin: Origin, proposal_id: int) -> bool:
        """
        Release the deposit of a vote on a closed proposal.

        Only the account's vote with the highest proposal id is eligible;
        claiming any other proposal is a no-op that emits NoTokensUnlocked.

        Returns:
            True if the vote was removed and the freeze recomputed.
        """
        with self._lock:
            who = origin.ensure_signed()
            self.registry.ensure_registered(who)

            proposal = self.proposals.get(proposal_id)
            if not proposal.closed:
                raise VotingPeriodNotOverError(
                    f"Proposal #{proposal_id} is still open"
                )

            records = self.ledger.entries(who)
            top = max_by_proposal_id(records)
            if top is None:
                raise NoVotesError(f"{who} has no active votes")

            index, record = top
            if record.proposal_id != proposal_id:
                logger.info(
                    f"NoTokensUnlocked Proposal #{proposal_id} account={who} "
                    f"(highest vote is on Proposal #{record.proposal_id})"
                )
                self._emit(NoTokensUnlocked(account=who, proposal_id=proposal_id))
                return False

            remaining = records[:index] + records[index + 1:]
            self.ledger.remove_at(who, index)
            frozen = self.freezer.recompute_after_removal(who, remaining)

            logger.info(f"TokensUnlocked Proposal #{proposal_id} account={who} (frozen={frozen})")
            self._emit(TokensUnlocked(account=who, proposal_id=proposal_id))
            return True

    # ── Queries ───────────────────────────────────────────────────────

    def get_proposal(self, proposal_id: int) -> Proposal:
        return self.proposals.get(proposal_id)

    def votes_of(self, account: str) -> List[VoteRecord]:
        return self.ledger.entries(account)

    def frozen(self, account: str) -> int:
        return self.freezer.frozen(account)

    def is_registered(self, account: str) -> bool:
        return self.registry.is_registered(account)

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            accounts = set(self.registry.accounts()) | set(self.ledger.accounts())
            return {
                "voters": sorted(self.registry.accounts()),
                "proposalDuration": self.proposal_duration,
                "maxVotes": self.ledger.max_votes,
                **self.proposals.to_dict(),
                "votes": self.ledger.to_dict(),
                "frozen": {acc: str(self.frozen(acc)) for acc in sorted(accounts)},
            }

    def __repr__(self) -> str:
        return (
            f"<QuadraticVotingEngine voters={len(self.registry)} "
            f"proposals={len(self.proposals)}>"
        )
