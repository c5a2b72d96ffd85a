"""
QVote: quadratic voting over a token ledger.

Voters lock the square of the votes they cast; an account's lock is the
largest single-vote cost among its active votes.
"""

__version__ = "0.1.0"

from .governance import QuadraticVotingEngine, VoteDirection, VoteOutcome
from .host import InMemoryBalances, ManualClock, Origin

__all__ = [
    "QuadraticVotingEngine",
    "VoteDirection",
    "VoteOutcome",
    "InMemoryBalances",
    "ManualClock",
    "Origin",
]
