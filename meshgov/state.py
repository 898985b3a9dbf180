"""The membership aggregate and its invariants."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from meshgov.errors import GovernanceError, InvalidSnapshot
from meshgov.identity import IdentitySet
from meshgov.ledger import ProposalLedger
from meshgov.threshold import required_votes
from meshgov.types import MIN_MEMBERS, Proposal, VoteKind

STATE_FORMAT_VERSION = 1


@dataclass
class MembershipState:
    """Members, epoch, threshold and open proposals of one council."""

    members: IdentitySet = field(default_factory=IdentitySet)
    epoch: int = 1
    threshold: int = 0
    proposals: ProposalLedger = field(default_factory=ProposalLedger)

    @property
    def member_count(self) -> int:
        return len(self.members)

    def recompute_threshold(self) -> int:
        """Derive the threshold from the current member count and store it."""
        self.threshold = required_votes(self.member_count)
        return self.threshold

    def copy(self) -> "MembershipState":
        return MembershipState(
            members=self.members.copy(),
            epoch=self.epoch,
            threshold=self.threshold,
            proposals=self.proposals.copy(),
        )

    def violations(self) -> List[str]:
        """Return a description of every invariant the state breaks."""
        problems: List[str] = []
        if self.member_count < MIN_MEMBERS:
            problems.append(f"member count {self.member_count} below minimum {MIN_MEMBERS}")
        if self.threshold != required_votes(self.member_count):
            problems.append(f"threshold {self.threshold} inconsistent with {self.member_count} members")
        if self.epoch < 1:
            problems.append(f"epoch {self.epoch} must be at least 1")
        for proposal in self.proposals.proposals(VoteKind.ADMIT):
            if proposal.subject in self.members:
                problems.append(f"admit proposal for existing member {proposal.subject}")
        for proposal in self.proposals.proposals(VoteKind.EXPEL):
            if proposal.subject not in self.members:
                problems.append(f"expel proposal for non-member {proposal.subject}")
        for kind in VoteKind:
            for proposal in self.proposals.proposals(kind):
                if not 1 <= proposal.opened_at_epoch <= self.epoch:
                    problems.append(
                        f"{kind.value} proposal for {proposal.subject} opened at invalid epoch {proposal.opened_at_epoch}"
                    )
                if proposal.vote_count != len(proposal.voted_keys):
                    problems.append(f"{kind.value} proposal for {proposal.subject} tally does not match its keys")
        return problems

    def to_payload(self) -> Dict[str, Any]:
        """Convert the state to a JSON-safe payload."""
        return {
            "version": STATE_FORMAT_VERSION,
            "members": list(self.members),
            "epoch": self.epoch,
            "threshold": self.threshold,
            "admit_proposals": [p.to_payload() for p in self.proposals.proposals(VoteKind.ADMIT)],
            "expel_proposals": [p.to_payload() for p in self.proposals.proposals(VoteKind.EXPEL)],
        }

    @staticmethod
    def from_payload(payload: Dict[str, Any]) -> "MembershipState":
        """Rebuild a state from ``to_payload`` output, validating every invariant.

        Raises:
            InvalidSnapshot: when the payload is malformed or breaks an invariant.
        """
        try:
            version = int(payload.get("version", STATE_FORMAT_VERSION))
            if version != STATE_FORMAT_VERSION:
                raise InvalidSnapshot(f"Unsupported state format version {version}")
            state = MembershipState(
                members=IdentitySet(payload["members"]),
                epoch=int(payload["epoch"]),
                threshold=int(payload["threshold"]),
            )
            for kind, key in ((VoteKind.ADMIT, "admit_proposals"), (VoteKind.EXPEL, "expel_proposals")):
                for raw in payload.get(key, []):
                    proposal = Proposal.from_payload(raw, kind=kind)
                    restored, opened = state.proposals.get_or_open(kind, proposal.subject, proposal.opened_at_epoch)
                    if not opened:
                        raise InvalidSnapshot(f"Duplicate {kind.value} proposal for {proposal.subject}")
                    restored.vote_count = proposal.vote_count
                    restored.voted_keys = proposal.voted_keys
        except InvalidSnapshot:
            raise
        except (GovernanceError, KeyError, TypeError, ValueError) as exc:
            raise InvalidSnapshot(f"Malformed state payload: {exc}") from exc

        problems = state.violations()
        if problems:
            raise InvalidSnapshot("; ".join(problems))
        return state


__all__ = ["MembershipState", "STATE_FORMAT_VERSION"]
