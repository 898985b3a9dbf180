"""In-memory bookkeeping of open admission and expulsion proposals."""

from __future__ import annotations

import logging
from typing import Dict, Iterator, Optional, Tuple

from meshgov.types import AntiReplayKey, Identity, Proposal, VoteKind

LOGGER = logging.getLogger(__name__)


class ProposalLedger:
    """Track at most one open proposal per subject for each vote kind."""

    def __init__(self) -> None:
        self._proposals: Dict[VoteKind, Dict[Identity, Proposal]] = {kind: {} for kind in VoteKind}

    def get(self, kind: VoteKind, subject: Identity) -> Optional[Proposal]:
        """Return the open proposal for *subject*, if any."""
        return self._proposals[kind].get(subject)

    def get_or_open(self, kind: VoteKind, subject: Identity, epoch: int) -> Tuple[Proposal, bool]:
        """Return the proposal for *subject*, opening one at *epoch* when absent.

        An existing proposal keeps the epoch it was opened at, however many epochs
        have passed since.

        Returns:
            Pair of (proposal, opened) where *opened* is True for a new proposal.
        """
        proposal = self._proposals[kind].get(subject)
        if proposal is not None:
            return proposal, False
        proposal = Proposal(kind=kind, subject=subject, opened_at_epoch=epoch)
        self._proposals[kind][subject] = proposal
        LOGGER.debug("Opened %s proposal for %s at epoch %s", kind.value, subject, epoch)
        return proposal, True

    def record_vote(self, proposal: Proposal, key: AntiReplayKey) -> int:
        """Consume *key* on *proposal* and return the updated tally.

        The caller rejects an already consumed key with :meth:`Proposal.has_consumed`.
        """
        proposal.voted_keys.add(key)
        proposal.vote_count += 1
        return proposal.vote_count

    def remove(self, kind: VoteKind, subject: Identity) -> Proposal:
        """Delete and return the proposal for *subject*."""
        try:
            return self._proposals[kind].pop(subject)
        except KeyError:
            raise KeyError(f"No open {kind.value} proposal for {subject}") from None

    def vote_count(self, kind: VoteKind, subject: Identity) -> int:
        """Return the tally for *subject* (0 when no proposal is open)."""
        proposal = self.get(kind, subject)
        return proposal.vote_count if proposal else 0

    def opened_at_epoch(self, kind: VoteKind, subject: Identity) -> int:
        """Return the opening epoch for *subject* (0 when no proposal is open)."""
        proposal = self.get(kind, subject)
        return proposal.opened_at_epoch if proposal else 0

    def proposals(self, kind: VoteKind) -> Iterator[Proposal]:
        """Iterate over the open proposals of *kind* in opening order."""
        return iter(list(self._proposals[kind].values()))

    def copy(self) -> "ProposalLedger":
        """Return a deep copy, independent of this ledger."""
        clone = ProposalLedger()
        for kind, by_subject in self._proposals.items():
            clone._proposals[kind] = {subject: p.copy() for subject, p in by_subject.items()}
        return clone


__all__ = ["ProposalLedger"]
