from __future__ import annotations

"""Strict-majority threshold helpers.

Small, pure functions deciding how many votes a proposal needs under the current
membership size. The engine recomputes the threshold from scratch after every
membership change rather than adjusting it incrementally.
"""


def required_votes(member_count: int) -> int:
    """Return the strict-majority vote count for *member_count* members.

    Args:
        member_count: Current membership size.

    Returns:
        ``member_count // 2 + 1`` (e.g. 2 of 3, 3 of 4, 3 of 5).

    Raises:
        ValueError: for a negative membership size.
    """
    if member_count < 0:
        raise ValueError("member_count must be non-negative")
    return member_count // 2 + 1


def has_majority(vote_count: int, *, member_count: int) -> bool:
    """Return True when *vote_count* reaches the threshold for *member_count*."""
    return vote_count >= required_votes(member_count)


__all__ = [
    "required_votes",
    "has_majority",
]
