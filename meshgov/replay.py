"""Anti-replay keys for governance votes.

A key binds a voter, a subject and an epoch. Within one epoch a member can therefore
vote for a given subject only once, while a proposal opened in a later epoch lives in
a fresh key space. The encoding mirrors Solidity's
``keccak256(abi.encodePacked(voter, subject, epoch))`` so keys can be compared with
on-chain records.
"""

from __future__ import annotations

from web3 import Web3

from meshgov.types import AntiReplayKey, IdentityLike, to_identity


def anti_replay_key(voter: IdentityLike, subject: IdentityLike, epoch: int) -> AntiReplayKey:
    """Return the ``0x``-prefixed keccak-256 key for ``(voter, subject, epoch)``.

    Raises:
        ValueError: when *epoch* is negative.
        InvalidIdentity: when either identity is malformed.
    """
    if epoch < 0:
        raise ValueError("epoch must be non-negative")
    digest = Web3.solidity_keccak(
        ["address", "address", "uint256"],
        [to_identity(voter), to_identity(subject), int(epoch)],
    )
    return Web3.to_hex(digest)


__all__ = ["anti_replay_key"]
