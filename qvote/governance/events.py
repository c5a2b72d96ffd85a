"""
Engine events.

Every successful operation records one event. The engine keeps them in an
EventLog so hosts and tests can observe what happened without parsing logs.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Type

from .proposals import VoteOutcome


@dataclass(frozen=True)
class Event:
    """Base event."""

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        data = {"event": self.name}
        for key, value in self.__dict__.items():
            data[key] = value.value if isinstance(value, VoteOutcome) else value
        return data


@dataclass(frozen=True)
class VoterRegistered(Event):
    voter: str


@dataclass(frozen=True)
class ProposalCreated(Event):
    proposal_id: int


@dataclass(frozen=True)
class VoteAdded(Event):
    proposal_id: int
    votes: int


@dataclass(frozen=True)
class VoteRemovedOrCancelled(Event):
    proposal_id: int


@dataclass(frozen=True)
class ProposalResult(Event):
    proposal_id: int
    outcome: VoteOutcome


@dataclass(frozen=True)
class TokensUnlocked(Event):
    account: str
    proposal_id: int


@dataclass(frozen=True)
class NoTokensUnlocked(Event):
    """The claimed proposal does not hold the account's highest-id vote."""
    account: str
    proposal_id: int


class EventLog:
    """Append-only record of emitted events."""

    def __init__(self):
        self._events: List[Event] = []

    def emit(self, event: Event) -> Event:
        self._events.append(event)
        return event

    @property
    def last(self) -> Optional[Event]:
        return self._events[-1] if self._events else None

    def of_type(self, event_type: Type[Event]) -> List[Event]:
        return [e for e in self._events if isinstance(e, event_type)]

    def clear(self) -> None:
        self._events.clear()

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)
