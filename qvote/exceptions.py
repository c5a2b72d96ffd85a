"""
QVote Exceptions

Custom exception classes for the quadratic voting engine.

Every operational failure derives from VotingError and is raised before the
failing operation mutates any state.
"""


class QVoteException(Exception):
    """Base exception for QVote."""
    pass


class ConfigurationError(QVoteException):
    """Configuration error."""
    pass


class VotingError(QVoteException):
    """Base voting error."""
    pass


# ── Authorization ─────────────────────────────────────────────────────

class AuthorizationError(VotingError):
    """Caller lacks the required role or registration."""
    pass


class BadOriginError(AuthorizationError):
    """Call dispatched from the wrong kind of origin."""
    pass


class NotRegisteredError(AuthorizationError):
    """Account is not in the voter registry."""
    pass


class AlreadyRegisteredError(AuthorizationError):
    """Account is already in the voter registry."""
    pass


# ── Not found ─────────────────────────────────────────────────────────

class NotFoundError(VotingError):
    """Referenced entity does not exist."""
    pass


class ProposalNotFoundError(NotFoundError):
    """No proposal with the provided id exists."""
    pass


class NoVotesError(NotFoundError):
    """Account has no active votes."""
    pass


# ── Arithmetic ────────────────────────────────────────────────────────

class VotingArithmeticError(VotingError):
    """Checked arithmetic failed."""
    pass


class ArithmeticOverflowError(VotingArithmeticError):
    """Operation overflowed the numeric domain."""
    pass


class IdOverflowError(ArithmeticOverflowError):
    """No proposal id is left to allocate."""
    pass


class ArithmeticUnderflowError(VotingArithmeticError):
    """Operation underflowed below zero."""
    pass


class InvalidAmountError(VotingArithmeticError):
    """Amount is not a non-negative integer."""
    pass


# ── Arguments ─────────────────────────────────────────────────────────

class InvalidDirectionError(VotingError):
    """Vote direction is neither aye nor nay."""
    pass


# ── Capacity ──────────────────────────────────────────────────────────

class TooManyVotesError(VotingError):
    """Account already holds the maximum number of active votes."""
    pass


# ── Temporal ──────────────────────────────────────────────────────────

class TemporalError(VotingError):
    """Operation attempted outside its valid time window."""
    pass


class VotingPeriodNotOverError(TemporalError):
    """Voting is still in progress."""
    pass


class VoteAlreadyEndedError(TemporalError):
    """Proposal has already been closed."""
    pass


# ── Funds ─────────────────────────────────────────────────────────────

class InsufficientFundsError(VotingError):
    """Balance does not cover the quadratic cost of the vote."""
    pass
