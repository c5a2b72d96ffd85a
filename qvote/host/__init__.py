"""
Host collaborators

Provides:
  - Origin / OriginKind                    (origin.py)
  - BlockClock / ManualClock               (clock.py)
  - BalanceLedger / InMemoryBalances       (balances.py)
"""

from .origin import Origin, OriginKind
from .clock import BlockClock, ManualClock
from .balances import BalanceLedger, InMemoryBalances

__all__ = [
    "Origin",
    "OriginKind",
    "BlockClock",
    "ManualClock",
    "BalanceLedger",
    "InMemoryBalances",
]
