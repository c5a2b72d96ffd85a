"""
Host balance ledger.

The voting engine never owns balances. It reads total balances and sets or
clears a single named freeze per account through `BalanceLedger`.
`InMemoryBalances` tracks one freeze amount per (reason, account) and is used
by tests and the replay CLI.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple

from ..logger import get_logger

logger = get_logger(__name__)


class BalanceLedger(ABC):
    """Balance-reservation primitive consumed by the freeze engine."""

    @abstractmethod
    def total_balance(self, account: str) -> int:
        """Total balance of *account*, frozen funds included."""

    @abstractmethod
    def reserved(self, reason: str, account: str) -> int:
        """Amount currently frozen under *reason* (0 if none)."""

    @abstractmethod
    def reserve(self, reason: str, account: str, amount: int) -> None:
        """Set the freeze under *reason* to exactly *amount*."""

    @abstractmethod
    def release(self, reason: str, account: str) -> None:
        """Clear the freeze under *reason*."""


class InMemoryBalances(BalanceLedger):
    """Dictionary-backed ledger."""

    def __init__(self, balances: Dict[str, int] = None):
        self._balances: Dict[str, int] = {}
        self._freezes: Dict[Tuple[str, str], int] = {}
        for account, amount in (balances or {}).items():
            self.mint(account, amount)

    def mint(self, account: str, amount: int) -> int:
        """Credit *amount* to *account* and return the new balance."""
        if amount < 0:
            raise ValueError("Cannot mint a negative amount")
        self._balances[account] = self._balances.get(account, 0) + amount
        return self._balances[account]

    def total_balance(self, account: str) -> int:
        return self._balances.get(account, 0)

    def reserved(self, reason: str, account: str) -> int:
        return self._freezes.get((reason, account), 0)

    def reserve(self, reason: str, account: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("Cannot freeze a negative amount")
        self._freezes[(reason, account)] = amount
        logger.debug(f"freeze set reason={reason} account={account} amount={amount}")

    def release(self, reason: str, account: str) -> None:
        self._freezes.pop((reason, account), None)
        logger.debug(f"freeze released reason={reason} account={account}")

    def frozen(self, account: str) -> int:
        """Largest freeze on *account* across all reasons (freezes overlap)."""
        return max(
            (amount for (_, acc), amount in self._freezes.items() if acc == account),
            default=0,
        )

    def spendable(self, account: str) -> int:
        return max(self.total_balance(account) - self.frozen(account), 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "balances": dict(self._balances),
            "freezes": [
                {"reason": reason, "account": account, "amount": amount}
                for (reason, account), amount in self._freezes.items()
            ],
        }

    def __repr__(self) -> str:
        return f"<InMemoryBalances accounts={len(self._balances)} freezes={len(self._freezes)}>"
