"""Tests for notification payloads, the event bus and the audit log."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, List

from meshgov.engine import VotingEngine
from meshgov.events import (
    CandidateVoted,
    EventType,
    GovernanceEvent,
    MemberAdded,
    MemberRemoved,
    RemovalVoted,
    event_from_payload,
    to_payload,
)
from meshgov.notifier import AuditLog, EventBus, read_audit_log
from tests.conftest import M1, M2, M3, M4

if TYPE_CHECKING:
    from pytest_mock.plugin import MockerFixture


def test_payload_is_tagged_with_event_type() -> None:
    payload = to_payload(MemberAdded(M4, 2, timestamp=10.0))

    assert payload == {"event": "member_added", "member": M4, "epoch": 2, "timestamp": 10.0}
    assert json.loads(json.dumps(payload)) == payload


def test_payload_restores_each_event_type() -> None:
    originals = [CandidateVoted(M4, M1), MemberAdded(M4, 2), RemovalVoted(M3, M2), MemberRemoved(M3)]
    restored = [event_from_payload(to_payload(e)) for e in originals]

    assert restored == originals
    assert [e.event_type for e in restored] == [
        EventType.CANDIDATE_VOTED,
        EventType.MEMBER_ADDED,
        EventType.REMOVAL_VOTED,
        EventType.MEMBER_REMOVED,
    ]


def test_bus_delivers_in_subscription_order(mocker: "MockerFixture") -> None:
    bus = EventBus()
    first = mocker.Mock()
    second = mocker.Mock()
    bus.subscribe(first)
    bus.subscribe(second)
    event = MemberRemoved(M3)

    assert bus.publish(event) == 2
    first.assert_called_once_with(event)
    second.assert_called_once_with(event)


def test_bus_isolates_failing_subscriber(mocker: "MockerFixture") -> None:
    bus = EventBus()
    bus.subscribe(mocker.Mock(side_effect=RuntimeError("boom")))
    healthy = mocker.Mock()
    bus.subscribe(healthy)

    assert bus.publish(MemberRemoved(M3)) == 1
    healthy.assert_called_once()


def test_unsubscribe_stops_delivery() -> None:
    bus = EventBus()
    received: List[GovernanceEvent] = []
    unsubscribe = bus.subscribe(received.append)

    unsubscribe()
    unsubscribe()
    bus.publish(MemberRemoved(M3))

    assert received == []
    assert len(bus) == 0


def test_audit_log_records_engine_history(tmp_path: Path) -> None:
    bus = EventBus()
    log = AuditLog(tmp_path / "audit" / "events.jsonl")
    log.attach(bus)

    engine = VotingEngine([M1, M2, M3], event_bus=bus)
    engine.vote_to_admit(M1, M4)
    engine.vote_to_admit(M2, M4)

    history = list(read_audit_log(log.path))
    assert history == [
        MemberAdded(M1, 1),
        MemberAdded(M2, 1),
        MemberAdded(M3, 1),
        CandidateVoted(M4, M1),
        CandidateVoted(M4, M2),
        MemberAdded(M4, 2),
    ]
    assert list(log) == history


def test_read_missing_audit_log_is_empty(tmp_path: Path) -> None:
    assert list(read_audit_log(tmp_path / "missing.jsonl")) == []
