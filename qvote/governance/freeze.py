"""
Freeze Accounting Engine

Keeps each voter's frozen deposit equal to the largest quadratic cost among
its active votes. Freezes are not summed across proposals: one deposit of
`max(votes²)` backs every vote the account holds.

Two separate steps are exposed:

    apply_new_vote()          raise-only; acquires or grows the freeze
    recompute_after_removal() sets the freeze to the remaining maximum,
                              or releases it when no votes remain

A vote replacement runs remove → recompute → insert → apply, ending at
`max(remaining maximum, new cost)`.

The engine trusts its caller to have checked that the account's balance
covers the cost.
"""

from typing import List, Optional

from ..constants import FREEZE_REASON
from ..host.balances import BalanceLedger
from ..logger import get_logger
from .arithmetic import UintDomain
from .ledger import VoteRecord

logger = get_logger(__name__)


def binding_record(records: List[VoteRecord], domain: UintDomain) -> Optional[VoteRecord]:
    """
    Record whose cost sets the freeze.

    Highest votes² wins; equal costs resolve to the larger proposal id.
    """
    best: Optional[VoteRecord] = None
    best_cost = -1
    for record in records:
        cost = record.cost(domain)
        if cost > best_cost or (cost == best_cost and record.proposal_id > best.proposal_id):
            best, best_cost = record, cost
    return best


class FreezeEngine:
    """Drives the host freeze for vote deposits."""

    def __init__(
        self,
        balances: BalanceLedger,
        domain: UintDomain,
        reason: str = FREEZE_REASON,
    ):
        self._balances = balances
        self._domain = domain
        self.reason = reason

    def frozen(self, account: str) -> int:
        return self._balances.reserved(self.reason, account)

    def required_for(self, records: List[VoteRecord]) -> int:
        """Freeze the given set of active votes requires."""
        record = binding_record(records, self._domain)
        return 0 if record is None else record.cost(self._domain)

    def apply_new_vote(self, account: str, record: VoteRecord, required_tokens: int) -> int:
        """
        Acquire or raise the freeze for a newly inserted *record*.

        Never lowers an existing freeze. Returns the resulting frozen amount.
        """
        held = self.frozen(account)
        if held == 0:
            self._balances.reserve(self.reason, account, required_tokens)
            logger.debug(
                f"Freeze acquired account={account} amount={required_tokens} "
                f"(Proposal #{record.proposal_id})"
            )
            return required_tokens
        if required_tokens > held:
            self._balances.reserve(self.reason, account, required_tokens)
            logger.debug(
                f"Freeze raised account={account} {held} -> {required_tokens} "
                f"(Proposal #{record.proposal_id})"
            )
            return required_tokens
        return held

    def recompute_after_removal(self, account: str, remaining: List[VoteRecord]) -> int:
        """
        Set the freeze to exactly what *remaining* requires.

        Releases the freeze entirely when no records remain. Returns the
        resulting frozen amount.
        """
        record = binding_record(remaining, self._domain)
        if record is None:
            self._balances.release(self.reason, account)
            logger.debug(f"Freeze released account={account}")
            return 0
        amount = record.cost(self._domain)
        self._balances.reserve(self.reason, account, amount)
        logger.debug(
            f"Freeze recomputed account={account} amount={amount} "
            f"(binding Proposal #{record.proposal_id})"
        )
        return amount

    def __repr__(self) -> str:
        return f"<FreezeEngine reason={self.reason}>"
