"""Tests for the membership aggregate and its payload form."""

from __future__ import annotations

import pytest

from meshgov.engine import VotingEngine
from meshgov.errors import InvalidSnapshot
from meshgov.state import MembershipState
from meshgov.types import VoteKind
from tests.conftest import M1, M2, M3, M4, M5, OUTSIDER


def test_payload_round_trip_keeps_proposals(engine4: VotingEngine) -> None:
    engine4.vote_to_admit(M1, M5)
    engine4.vote_to_expel(M2, M3)
    state = engine4.snapshot()

    restored = MembershipState.from_payload(state.to_payload())

    assert restored.members == state.members
    assert restored.epoch == state.epoch == 2
    assert restored.threshold == 3
    assert restored.proposals.get(VoteKind.ADMIT, M5) == state.proposals.get(VoteKind.ADMIT, M5)
    assert restored.proposals.get(VoteKind.EXPEL, M3) == state.proposals.get(VoteKind.EXPEL, M3)
    assert restored.violations() == []


def _payload(**overrides: object) -> dict:
    payload = {
        "version": 1,
        "members": [M1, M2, M3],
        "epoch": 1,
        "threshold": 2,
        "admit_proposals": [],
        "expel_proposals": [],
    }
    payload.update(overrides)
    return payload


@pytest.mark.parametrize(
    "overrides",
    [
        {"members": [M1, M2]},
        {"threshold": 3},
        {"epoch": 0},
        {"version": 99},
        {"members": [M1, M2, M2]},
        {"members": [M1, M2, "nope"]},
        {"admit_proposals": [{"subject": M2, "opened_at_epoch": 1, "vote_count": 0, "voted_keys": []}]},
        {"expel_proposals": [{"subject": OUTSIDER, "opened_at_epoch": 1, "vote_count": 0, "voted_keys": []}]},
        {"admit_proposals": [{"subject": M4, "opened_at_epoch": 5, "vote_count": 0, "voted_keys": []}]},
        {"admit_proposals": [{"subject": M4, "opened_at_epoch": 1, "vote_count": 2, "voted_keys": ["0x01"]}]},
        {"epoch": "x"},
    ],
)
def test_from_payload_rejects_invalid_state(overrides: dict) -> None:
    with pytest.raises(InvalidSnapshot):
        MembershipState.from_payload(_payload(**overrides))


def test_from_payload_rejects_missing_fields() -> None:
    with pytest.raises(InvalidSnapshot):
        MembershipState.from_payload({"members": [M1, M2, M3]})
