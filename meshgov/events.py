"""Notifications emitted by the governance engine for off-line observers."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Type, Union

from meshgov.types import Identity


class EventType(Enum):
    """Types of notifications produced by the engine."""

    CANDIDATE_VOTED = "candidate_voted"
    MEMBER_ADDED = "member_added"
    REMOVAL_VOTED = "removal_voted"
    MEMBER_REMOVED = "member_removed"


@dataclass(frozen=True)
class CandidateVoted:
    """A member voted to admit *candidate*."""

    candidate: Identity
    voter: Identity
    timestamp: float = field(default_factory=time.time, compare=False)

    event_type = EventType.CANDIDATE_VOTED


@dataclass(frozen=True)
class MemberAdded:
    """*member* joined the council; *epoch* is the epoch after the change."""

    member: Identity
    epoch: int
    timestamp: float = field(default_factory=time.time, compare=False)

    event_type = EventType.MEMBER_ADDED


@dataclass(frozen=True)
class RemovalVoted:
    """A member voted to expel *member*."""

    member: Identity
    voter: Identity
    timestamp: float = field(default_factory=time.time, compare=False)

    event_type = EventType.REMOVAL_VOTED


@dataclass(frozen=True)
class MemberRemoved:
    """*member* was expelled from the council."""

    member: Identity
    timestamp: float = field(default_factory=time.time, compare=False)

    event_type = EventType.MEMBER_REMOVED


GovernanceEvent = Union[CandidateVoted, MemberAdded, RemovalVoted, MemberRemoved]

_EVENT_CLASSES: Dict[EventType, Type[Any]] = {
    EventType.CANDIDATE_VOTED: CandidateVoted,
    EventType.MEMBER_ADDED: MemberAdded,
    EventType.REMOVAL_VOTED: RemovalVoted,
    EventType.MEMBER_REMOVED: MemberRemoved,
}


def to_payload(event: GovernanceEvent) -> Dict[str, Any]:
    """Convert *event* to a JSON-safe payload tagged with its type."""
    data = asdict(event)
    data["event"] = event.event_type.value
    return data


def event_from_payload(payload: Dict[str, Any]) -> GovernanceEvent:
    """Recreate an event from a payload produced by :func:`to_payload`."""
    data = dict(payload)
    event_type = EventType(data.pop("event"))
    return _EVENT_CLASSES[event_type](**data)


__all__ = [
    "EventType",
    "CandidateVoted",
    "MemberAdded",
    "RemovalVoted",
    "MemberRemoved",
    "GovernanceEvent",
    "to_payload",
    "event_from_payload",
]
