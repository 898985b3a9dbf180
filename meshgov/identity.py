"""Ordered set of member identities."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, Tuple

from meshgov.errors import DuplicateMember, ZeroIdentity
from meshgov.types import Identity, IdentityLike, is_zero_identity, to_identity


class IdentitySet:
    """Unique, insertion-ordered collection of non-null identities."""

    def __init__(self, identities: Iterable[IdentityLike] = ()) -> None:
        self._items: Dict[Identity, None] = {}
        for identity in identities:
            self.add(identity)

    def add(self, identity: IdentityLike) -> Identity:
        """Insert *identity* and return its normalised form.

        Raises:
            ZeroIdentity: for the null identity.
            DuplicateMember: when the identity is already present.
        """
        normalised = to_identity(identity)
        if is_zero_identity(normalised):
            raise ZeroIdentity("Null identity cannot be a member", subject=normalised)
        if normalised in self._items:
            raise DuplicateMember(f"Identity {normalised} is already present", subject=normalised)
        self._items[normalised] = None
        return normalised

    def discard(self, identity: IdentityLike) -> bool:
        """Remove *identity* if present and return whether it was."""
        normalised = to_identity(identity)
        if normalised not in self._items:
            return False
        del self._items[normalised]
        return True

    def __contains__(self, identity: object) -> bool:
        if not isinstance(identity, (str, bytes, bytearray)):
            return False
        try:
            return to_identity(identity) in self._items
        except ValueError:
            return False

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Identity]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IdentitySet):
            return NotImplemented
        return list(self._items) == list(other._items)

    def __repr__(self) -> str:
        return f"IdentitySet({list(self._items)!r})"

    def as_tuple(self) -> Tuple[Identity, ...]:
        """Return the identities in insertion order."""
        return tuple(self._items)

    def copy(self) -> "IdentitySet":
        clone = IdentitySet()
        clone._items = dict(self._items)
        return clone


__all__ = ["IdentitySet"]
