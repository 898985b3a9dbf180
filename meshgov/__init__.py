"""meshgov – majority-vote governance for a dynamic council of authorities.

Members vote to admit candidates and to expel members; a strict majority of the
current council commits the change, advances the epoch and rescales the threshold.

  - meshgov.engine      VotingEngine (the state-transition core)
  - meshgov.ledger      ProposalLedger
  - meshgov.threshold   strict-majority helpers
  - meshgov.replay      anti-replay keys
  - meshgov.events      notifications, meshgov.notifier for delivery
  - meshgov.store       JSON persistence
"""

from __future__ import annotations

from .types import (  # noqa: F401
    Identity,
    ZERO_IDENTITY,
    MIN_MEMBERS,
    VoteKind,
    Proposal,
    to_identity,
)
from .errors import (  # noqa: F401
    GovernanceError,
    InsufficientMembers,
    ZeroIdentity,
    InvalidIdentity,
    DuplicateMember,
    NotMember,
    AlreadyMember,
    NotAMember,
    DuplicateVote,
    BelowMinimumMembers,
    InvalidSnapshot,
)
from .threshold import required_votes  # noqa: F401
from .replay import anti_replay_key  # noqa: F401
from .identity import IdentitySet  # noqa: F401
from .ledger import ProposalLedger  # noqa: F401
from .state import MembershipState  # noqa: F401
from .events import (  # noqa: F401
    CandidateVoted,
    MemberAdded,
    RemovalVoted,
    MemberRemoved,
    EventType,
)
from .notifier import AuditLog, EventBus  # noqa: F401
from .engine import VotingEngine  # noqa: F401
from .store import load_state, save_state  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    # core
    "Identity",
    "ZERO_IDENTITY",
    "MIN_MEMBERS",
    "VoteKind",
    "Proposal",
    "to_identity",
    "required_votes",
    "anti_replay_key",
    "IdentitySet",
    "ProposalLedger",
    "MembershipState",
    "VotingEngine",
    # errors
    "GovernanceError",
    "InsufficientMembers",
    "ZeroIdentity",
    "InvalidIdentity",
    "DuplicateMember",
    "NotMember",
    "AlreadyMember",
    "NotAMember",
    "DuplicateVote",
    "BelowMinimumMembers",
    "InvalidSnapshot",
    # notifications
    "CandidateVoted",
    "MemberAdded",
    "RemovalVoted",
    "MemberRemoved",
    "EventType",
    "EventBus",
    "AuditLog",
    # persistence
    "save_state",
    "load_state",
]
