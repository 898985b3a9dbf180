"""Tests for identity normalisation and the ordered identity set."""

from __future__ import annotations

import pytest

from meshgov.errors import DuplicateMember, InvalidIdentity, ZeroIdentity
from meshgov.identity import IdentitySet
from meshgov.types import ZERO_IDENTITY, to_identity
from tests.conftest import M1, M2, M3


def test_to_identity_normalises_to_checksum() -> None:
    assert to_identity(M1.lower()) == M1
    assert to_identity(bytes.fromhex(M1[2:])) == M1


def test_to_identity_maps_none_to_zero() -> None:
    assert to_identity(None) == ZERO_IDENTITY


@pytest.mark.parametrize("value", ["", "0x1234", "hello", 42, b"\x01\x02"])
def test_to_identity_rejects_malformed_values(value: object) -> None:
    with pytest.raises(InvalidIdentity):
        to_identity(value)  # type: ignore[arg-type]


def test_identity_set_preserves_order_and_membership() -> None:
    members = IdentitySet([M3, M1, M2])

    assert members.as_tuple() == (M3, M1, M2)
    assert len(members) == 3
    assert M1.lower() in members
    assert "garbage" not in members
    assert None not in members


def test_identity_set_rejects_zero_and_duplicates() -> None:
    members = IdentitySet([M1])
    with pytest.raises(ZeroIdentity):
        members.add(ZERO_IDENTITY)
    with pytest.raises(DuplicateMember):
        members.add(M1.lower())
    assert members.as_tuple() == (M1,)


def test_identity_set_discard_and_copy() -> None:
    members = IdentitySet([M1, M2])
    clone = members.copy()

    assert members.discard(M1) is True
    assert members.discard(M1) is False
    assert members.as_tuple() == (M2,)
    assert clone.as_tuple() == (M1, M2)
