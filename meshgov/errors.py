"""Error taxonomy for the governance engine.

Every error aborts the operation that raised it and leaves the engine state exactly
as it was before the call.
"""

from __future__ import annotations

from typing import Optional


class GovernanceError(Exception):
    """Base error for rejected governance operations."""

    code: str = "governance_error"

    def __init__(self, message: str, *, subject: Optional[str] = None, voter: Optional[str] = None) -> None:
        super().__init__(message)
        self.subject = subject
        self.voter = voter


class InsufficientMembers(GovernanceError):
    """Fewer identities than the membership floor were supplied to init."""

    code = "insufficient_members"


class ZeroIdentity(GovernanceError):
    """The null identity was used as a member, candidate or expulsion target."""

    code = "zero_identity"


class InvalidIdentity(GovernanceError, ValueError):
    """A value that cannot be interpreted as an identity at all."""

    code = "invalid_identity"


class DuplicateMember(GovernanceError):
    """An identity appears more than once in the initial member list."""

    code = "duplicate_member"


class NotMember(GovernanceError):
    """The voter is not a current member."""

    code = "not_member"


class AlreadyMember(GovernanceError):
    """The admission candidate is already a member."""

    code = "already_member"


class NotAMember(GovernanceError):
    """The expulsion target is not a current member."""

    code = "not_a_member"


class DuplicateVote(GovernanceError):
    """The voter already voted for this subject within the proposal's epoch."""

    code = "duplicate_vote"


class BelowMinimumMembers(GovernanceError):
    """Committing this expulsion would shrink membership below the floor."""

    code = "below_minimum_members"


class InvalidSnapshot(GovernanceError):
    """A persisted state does not satisfy the membership invariants."""

    code = "invalid_snapshot"


__all__ = [
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
]
