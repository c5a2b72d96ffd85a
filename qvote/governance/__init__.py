"""
Quadratic Voting Governance

Provides:
  - UintDomain                                         (arithmetic.py)
  - VoterRegistry                                      (registry.py)
  - Proposal / ProposalStore / VoteDirection / VoteOutcome (proposals.py)
  - VoteRecord / VoteLedger                            (ledger.py)
  - FreezeEngine                                       (freeze.py)
  - Event types / EventLog                             (events.py)
  - QuadraticVotingEngine                              (voting.py)
"""

from .arithmetic import UintDomain
from .registry import VoterRegistry
from .proposals import (
    Proposal,
    ProposalStore,
    VoteDirection,
    VoteOutcome,
    hash_description,
)
from .ledger import VoteLedger, VoteRecord, max_by_proposal_id
from .freeze import FreezeEngine, binding_record
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
from .voting import QuadraticVotingEngine

__all__ = [
    "UintDomain",
    # Registry
    "VoterRegistry",
    # Proposals
    "Proposal",
    "ProposalStore",
    "VoteDirection",
    "VoteOutcome",
    "hash_description",
    # Ledger
    "VoteLedger",
    "VoteRecord",
    "max_by_proposal_id",
    # Freeze
    "FreezeEngine",
    "binding_record",
    # Events
    "Event",
    "EventLog",
    "NoTokensUnlocked",
    "ProposalCreated",
    "ProposalResult",
    "TokensUnlocked",
    "VoteAdded",
    "VoteRemovedOrCancelled",
    "VoterRegistered",
    # Engine
    "QuadraticVotingEngine",
]
