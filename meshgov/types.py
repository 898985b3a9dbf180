"""Base types and data structures for the authority governance engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Set, Union

from web3 import Web3

from meshgov.errors import InvalidIdentity

Identity = str
AntiReplayKey = str
IdentityLike = Union[str, bytes, None]

ZERO_IDENTITY: Identity = "0x0000000000000000000000000000000000000000"
MIN_MEMBERS = 3


class VoteKind(Enum):
    """Kind of membership change a proposal asks for."""

    ADMIT = "admit"
    EXPEL = "expel"


def to_identity(value: IdentityLike) -> Identity:
    """Normalise *value* into a checksummed identity.

    ``None`` and the zero address both map to :data:`ZERO_IDENTITY`; callers decide
    whether the null identity is acceptable where they use it.

    Raises:
        InvalidIdentity: when *value* is not a 20-byte address.
    """
    if value is None:
        return ZERO_IDENTITY
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 20:
            raise InvalidIdentity(f"Identity must be 20 bytes, got {len(value)}")
        return Web3.to_checksum_address(bytes(value))
    if not isinstance(value, str) or not Web3.is_address(value):
        raise InvalidIdentity(f"Not a valid identity: {value!r}")
    return Web3.to_checksum_address(value)


def is_zero_identity(value: Identity) -> bool:
    """Return True for the null identity."""
    return value == ZERO_IDENTITY


@dataclass
class Proposal:
    """In-progress tally for admitting or expelling one subject."""

    kind: VoteKind
    subject: Identity
    opened_at_epoch: int
    vote_count: int = 0
    voted_keys: Set[AntiReplayKey] = field(default_factory=set)

    def has_consumed(self, key: AntiReplayKey) -> bool:
        """Return True if *key* already contributed a vote."""
        return key in self.voted_keys

    def copy(self) -> "Proposal":
        """Return an independent copy of this proposal."""
        return Proposal(
            kind=self.kind,
            subject=self.subject,
            opened_at_epoch=self.opened_at_epoch,
            vote_count=self.vote_count,
            voted_keys=set(self.voted_keys),
        )

    def to_payload(self) -> Dict[str, Any]:
        """Convert the proposal to a JSON-safe payload."""
        return {
            "kind": self.kind.value,
            "subject": self.subject,
            "opened_at_epoch": self.opened_at_epoch,
            "vote_count": self.vote_count,
            "voted_keys": sorted(self.voted_keys),
        }

    @staticmethod
    def from_payload(payload: Dict[str, Any], kind: Optional[VoteKind] = None) -> "Proposal":
        """Recreate a proposal from a payload produced by ``to_payload``."""
        return Proposal(
            kind=kind or VoteKind(payload["kind"]),
            subject=to_identity(payload["subject"]),
            opened_at_epoch=int(payload["opened_at_epoch"]),
            vote_count=int(payload["vote_count"]),
            voted_keys={str(k) for k in payload.get("voted_keys", [])},
        )


__all__ = [
    "Identity",
    "AntiReplayKey",
    "IdentityLike",
    "ZERO_IDENTITY",
    "MIN_MEMBERS",
    "VoteKind",
    "Proposal",
    "to_identity",
    "is_zero_identity",
]
