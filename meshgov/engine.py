"""Majority-vote admission and expulsion of council members.

The :class:`VotingEngine` is the only component allowed to mutate a
:class:`~meshgov.state.MembershipState`. Every mutating call runs as a single
transaction: it works on a private copy of the state which is swapped in only when
the whole call succeeds, so a rejected vote leaves no trace. Notifications raised
during the call are held back until the new state is in place and are then handed
to the :class:`~meshgov.notifier.EventBus`.

Key rules
---------
1. **Strict majority** – a proposal commits once its tally reaches
   ``member_count // 2 + 1``; the threshold is recomputed after each change.
2. **Epoch-scoped dedupe** – a vote is keyed by ``(voter, subject, epoch)`` where
   the epoch is the one the proposal was opened at.
3. **Membership floor** – an expulsion vote that would commit below
   :data:`~meshgov.types.MIN_MEMBERS` members is rejected outright.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from contextlib import contextmanager
from typing import Deque, Iterable, Iterator, List, Optional, Tuple

from meshgov.errors import (
    AlreadyMember,
    BelowMinimumMembers,
    DuplicateVote,
    GovernanceError,
    InsufficientMembers,
    InvalidSnapshot,
    NotAMember,
    NotMember,
    ZeroIdentity,
)
from meshgov.events import CandidateVoted, GovernanceEvent, MemberAdded, MemberRemoved, RemovalVoted
from meshgov.identity import IdentitySet
from meshgov.notifier import EventBus
from meshgov.replay import anti_replay_key
from meshgov.state import MembershipState
from meshgov.threshold import has_majority
from meshgov.types import (
    MIN_MEMBERS,
    AntiReplayKey,
    Identity,
    IdentityLike,
    Proposal,
    VoteKind,
    is_zero_identity,
    to_identity,
)

LOGGER = logging.getLogger(__name__)


class VotingEngine:
    """Council of members voting on admissions and expulsions."""

    # ----------------------------------------------------------------------------------
    # Construction helpers
    # ----------------------------------------------------------------------------------

    def __init__(
        self,
        initial_members: Iterable[IdentityLike],
        *,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        """Create a council from *initial_members*.

        Args:
            initial_members: Ordered founding members; at least ``MIN_MEMBERS``
                distinct, non-null identities.
            event_bus: Channel receiving notifications. A private bus is created
                when omitted.

        Raises:
            InsufficientMembers: fewer than ``MIN_MEMBERS`` identities.
            ZeroIdentity: an entry is the null identity.
            DuplicateMember: an entry is repeated.
        """
        candidates = [to_identity(member) for member in initial_members]
        if len(candidates) < MIN_MEMBERS:
            raise InsufficientMembers(
                f"At least {MIN_MEMBERS} initial members required, got {len(candidates)}"
            )
        for identity in candidates:
            if is_zero_identity(identity):
                raise ZeroIdentity("Null identity cannot be an initial member", subject=identity)

        state = MembershipState(members=IdentitySet(candidates), epoch=1)
        state.recompute_threshold()

        self._setup(state, event_bus)
        LOGGER.info(
            "Council initialised with %s members (threshold %s)", state.member_count, state.threshold
        )
        with self._lock:
            self._dispatch([MemberAdded(member=m, epoch=state.epoch) for m in state.members])

    @classmethod
    def from_state(cls, state: MembershipState, *, event_bus: Optional[EventBus] = None) -> "VotingEngine":
        """Resume a council from a previously captured *state*.

        No notifications are emitted.

        Raises:
            InvalidSnapshot: when *state* violates an invariant.
        """
        problems = state.violations()
        if problems:
            raise InvalidSnapshot("; ".join(problems))
        engine = cls.__new__(cls)
        engine._setup(state.copy(), event_bus)
        LOGGER.info("Council restored at epoch %s with %s members", state.epoch, state.member_count)
        return engine

    def _setup(self, state: MembershipState, event_bus: Optional[EventBus]) -> None:
        self._lock = threading.RLock()
        self._state = state
        self._event_bus = event_bus if event_bus is not None else EventBus()
        self._outbox: Deque[GovernanceEvent] = deque()
        self._dispatching = False

    # ----------------------------------------------------------------------------------
    # Voting
    # ----------------------------------------------------------------------------------

    def vote_to_admit(self, voter: IdentityLike, candidate: IdentityLike) -> bool:
        """Record *voter*'s vote to admit *candidate*.

        Returns:
            True when this vote reached the threshold and *candidate* joined.

        Raises:
            NotMember: *voter* is not a member.
            ZeroIdentity: *candidate* is the null identity.
            AlreadyMember: *candidate* is already a member.
            DuplicateVote: *voter* already voted for *candidate* in this proposal.
        """
        voter_id = to_identity(voter)
        candidate_id = to_identity(candidate)
        with self._transaction() as (state, pending):
            self._require_member(state, voter_id)
            if is_zero_identity(candidate_id):
                raise ZeroIdentity("Cannot admit the null identity", subject=candidate_id, voter=voter_id)
            if candidate_id in state.members:
                raise AlreadyMember(f"{candidate_id} is already a member", subject=candidate_id, voter=voter_id)

            proposal, key = self._check_vote(state, VoteKind.ADMIT, voter_id, candidate_id)
            self._record_vote(state, proposal, voter_id, key)
            pending.append(CandidateVoted(candidate=candidate_id, voter=voter_id))

            if not has_majority(proposal.vote_count, member_count=state.member_count):
                return False

            state.members.add(candidate_id)
            state.epoch += 1
            state.proposals.remove(VoteKind.ADMIT, candidate_id)
            state.recompute_threshold()
            pending.append(MemberAdded(member=candidate_id, epoch=state.epoch))
            LOGGER.info(
                "Admitted %s: %s members, threshold %s, epoch %s",
                candidate_id,
                state.member_count,
                state.threshold,
                state.epoch,
            )
            return True

    def vote_to_expel(self, voter: IdentityLike, member: IdentityLike) -> bool:
        """Record *voter*'s vote to expel *member*.

        The membership floor is checked before the vote is counted: when this vote
        would commit an expulsion leaving fewer than ``MIN_MEMBERS`` members, the
        vote itself is rejected and the proposal keeps its previous tally.

        Returns:
            True when this vote reached the threshold and *member* was removed.

        Raises:
            NotMember: *voter* is not a member.
            ZeroIdentity: *member* is the null identity.
            NotAMember: *member* is not a member.
            DuplicateVote: *voter* already voted for *member* in this proposal.
            BelowMinimumMembers: committing would break the membership floor.
        """
        voter_id = to_identity(voter)
        member_id = to_identity(member)
        with self._transaction() as (state, pending):
            self._require_member(state, voter_id)
            if is_zero_identity(member_id):
                raise ZeroIdentity("Cannot expel the null identity", subject=member_id, voter=voter_id)
            if member_id not in state.members:
                raise NotAMember(f"{member_id} is not a member", subject=member_id, voter=voter_id)

            proposal, key = self._check_vote(state, VoteKind.EXPEL, voter_id, member_id)
            reaches_threshold = has_majority(proposal.vote_count + 1, member_count=state.member_count)
            if reaches_threshold and state.member_count - 1 < MIN_MEMBERS:
                raise BelowMinimumMembers(
                    f"Expelling {member_id} would leave {state.member_count - 1} members (minimum {MIN_MEMBERS})",
                    subject=member_id,
                    voter=voter_id,
                )

            self._record_vote(state, proposal, voter_id, key)
            pending.append(RemovalVoted(member=member_id, voter=voter_id))

            if not reaches_threshold:
                return False

            state.members.discard(member_id)
            state.epoch += 1
            state.proposals.remove(VoteKind.EXPEL, member_id)
            state.recompute_threshold()
            pending.append(MemberRemoved(member=member_id))
            LOGGER.info(
                "Expelled %s: %s members, threshold %s, epoch %s",
                member_id,
                state.member_count,
                state.threshold,
                state.epoch,
            )
            return True

    # ----------------------------------------------------------------------------------
    # Queries
    # ----------------------------------------------------------------------------------

    def is_member(self, identity: IdentityLike) -> bool:
        with self._lock:
            return identity in self._state.members

    @property
    def member_count(self) -> int:
        with self._lock:
            return self._state.member_count

    @property
    def threshold(self) -> int:
        with self._lock:
            return self._state.threshold

    @property
    def epoch(self) -> int:
        with self._lock:
            return self._state.epoch

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    def members(self) -> Tuple[Identity, ...]:
        """Return the current members in admission order."""
        with self._lock:
            return self._state.members.as_tuple()

    def admit_votes(self, candidate: IdentityLike) -> int:
        with self._lock:
            return self._state.proposals.vote_count(VoteKind.ADMIT, to_identity(candidate))

    def expel_votes(self, member: IdentityLike) -> int:
        with self._lock:
            return self._state.proposals.vote_count(VoteKind.EXPEL, to_identity(member))

    def admit_opened_at_epoch(self, candidate: IdentityLike) -> int:
        """Return the epoch the admit proposal was opened at, 0 if none is open."""
        with self._lock:
            return self._state.proposals.opened_at_epoch(VoteKind.ADMIT, to_identity(candidate))

    def expel_opened_at_epoch(self, member: IdentityLike) -> int:
        """Return the epoch the expel proposal was opened at, 0 if none is open."""
        with self._lock:
            return self._state.proposals.opened_at_epoch(VoteKind.EXPEL, to_identity(member))

    def open_proposals(self, kind: VoteKind) -> Tuple[Proposal, ...]:
        """Return copies of the open proposals of *kind*."""
        with self._lock:
            return tuple(p.copy() for p in self._state.proposals.proposals(kind))

    def snapshot(self) -> MembershipState:
        """Return an independent copy of the current state."""
        with self._lock:
            return self._state.copy()

    # ----------------------------------------------------------------------------------
    # Internal helpers
    # ----------------------------------------------------------------------------------

    @contextmanager
    def _transaction(self) -> Iterator[Tuple[MembershipState, List[GovernanceEvent]]]:
        """Run a mutation against a working copy and publish it on success."""
        with self._lock:
            working = self._state.copy()
            pending: List[GovernanceEvent] = []
            try:
                yield working, pending
            except GovernanceError as exc:
                LOGGER.debug("Rejected %s: %s", type(exc).__name__, exc)
                raise
            self._state = working
            self._dispatch(pending)

    @staticmethod
    def _check_vote(
        state: MembershipState, kind: VoteKind, voter: Identity, subject: Identity
    ) -> Tuple[Proposal, AntiReplayKey]:
        """Return the *kind* proposal for *subject* and *voter*'s unused key on it."""
        proposal, _ = state.proposals.get_or_open(kind, subject, state.epoch)
        key = anti_replay_key(voter, subject, proposal.opened_at_epoch)
        if proposal.has_consumed(key):
            raise DuplicateVote(
                f"{voter} already voted to {kind.value} {subject}", subject=subject, voter=voter
            )
        return proposal, key

    @staticmethod
    def _record_vote(state: MembershipState, proposal: Proposal, voter: Identity, key: AntiReplayKey) -> None:
        state.proposals.record_vote(proposal, key)
        LOGGER.debug(
            "%s voted to %s %s (%s/%s)",
            voter,
            proposal.kind.value,
            proposal.subject,
            proposal.vote_count,
            state.threshold,
        )

    @staticmethod
    def _require_member(state: MembershipState, voter: Identity) -> None:
        if voter not in state.members:
            raise NotMember(f"{voter} is not a member", voter=voter)

    def _dispatch(self, events: List[GovernanceEvent]) -> None:
        """Queue *events* and deliver the queue in commit order.

        A subscriber voting from inside its callback commits a nested transaction;
        its events join the queue behind the ones still being delivered.
        """
        self._outbox.extend(events)
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._outbox:
                self._event_bus.publish(self._outbox.popleft())
        finally:
            self._dispatching = False


__all__ = ["VotingEngine"]
