"""Shared fixtures for the governance test-suite."""

from __future__ import annotations

from typing import List

import pytest
from web3 import Web3

from meshgov.engine import VotingEngine
from meshgov.events import GovernanceEvent
from meshgov.notifier import EventBus


def make_identity(n: int) -> str:
    """Return a deterministic checksummed identity for test principal *n*."""
    return Web3.to_checksum_address(f"0x{n:040x}")


M1, M2, M3, M4, M5, M6 = (make_identity(i) for i in range(1, 7))
OUTSIDER = make_identity(0xBEEF)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def events(bus: EventBus) -> List[GovernanceEvent]:
    """Collect every event published on ``bus``."""
    received: List[GovernanceEvent] = []
    bus.subscribe(received.append)
    return received


@pytest.fixture
def engine(bus: EventBus, events: List[GovernanceEvent]) -> VotingEngine:
    """Three-member council wired to ``bus``."""
    return VotingEngine([M1, M2, M3], event_bus=bus)


@pytest.fixture
def engine4(engine: VotingEngine) -> VotingEngine:
    """Four-member council obtained by admitting M4 (scenario B)."""
    engine.vote_to_admit(M1, M4)
    engine.vote_to_admit(M2, M4)
    return engine
