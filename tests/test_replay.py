"""Tests for anti-replay key derivation."""

from __future__ import annotations

import pytest
from web3 import Web3

from meshgov.errors import InvalidIdentity
from meshgov.replay import anti_replay_key
from tests.conftest import M1, M2, M3


def _packed_keccak(voter: str, subject: str, epoch: int) -> str:
    packed = bytes.fromhex(voter[2:]) + bytes.fromhex(subject[2:]) + epoch.to_bytes(32, "big")
    return Web3.to_hex(Web3.keccak(packed))


def test_key_matches_packed_solidity_encoding() -> None:
    """The key equals keccak256(abi.encodePacked(voter, subject, epoch))."""
    assert anti_replay_key(M1, M2, 7) == _packed_keccak(M1, M2, 7)


def test_key_is_deterministic_and_case_insensitive() -> None:
    assert anti_replay_key(M1, M2, 1) == anti_replay_key(M1.lower(), M2.lower(), 1)


def test_key_changes_with_each_component() -> None:
    base = anti_replay_key(M1, M2, 1)
    assert anti_replay_key(M3, M2, 1) != base
    assert anti_replay_key(M1, M3, 1) != base
    assert anti_replay_key(M1, M2, 2) != base
    assert anti_replay_key(M2, M1, 1) != base


def test_key_is_hex_string() -> None:
    key = anti_replay_key(M1, M2, 1)
    assert key.startswith("0x")
    assert len(key) == 66


def test_key_rejects_bad_input() -> None:
    with pytest.raises(ValueError):
        anti_replay_key(M1, M2, -1)
    with pytest.raises(InvalidIdentity):
        anti_replay_key("not-an-address", M2, 1)
