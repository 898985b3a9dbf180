from __future__ import annotations

"""Randomised governance runs for exploring council dynamics.

A simulation drives a real :class:`~meshgov.engine.VotingEngine` with a stream of
admit and expel votes drawn from a seeded NumPy generator. Identities are derived
from ``eth_account`` keys so that they are realistic, checksummed addresses. The
per-round trajectories are returned as NumPy arrays for plotting and analysis.
"""

from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Tuple

import numpy as np
from eth_account import Account

from meshgov.engine import VotingEngine
from meshgov.errors import GovernanceError
from meshgov.types import MIN_MEMBERS, Identity


@dataclass(frozen=True)
class SimulationParams:
    """Parameters of a simulated governance run.

    Attributes:
        initial_members: Founding council size (at least 3).
        rounds: Number of votes to cast.
        admit_probability: Chance that a round is an admission vote.
        candidate_pool: Number of outside identities that can be proposed.
        seed: Seed for the NumPy generator.
    """

    initial_members: int = 5
    rounds: int = 200
    admit_probability: float = 0.5
    candidate_pool: int = 10
    seed: int = 1337

    def __post_init__(self) -> None:
        if self.initial_members < MIN_MEMBERS:
            raise ValueError(f"initial_members must be at least {MIN_MEMBERS}")
        if self.rounds < 0:
            raise ValueError("rounds must be non-negative")
        if not 0.0 <= self.admit_probability <= 1.0:
            raise ValueError("admit_probability must lie in [0, 1]")
        if self.candidate_pool < 1:
            raise ValueError("candidate_pool must be positive")


@dataclass
class SimulationReport:
    """Trajectories and outcome counts of a simulated run."""

    params: SimulationParams
    member_counts: np.ndarray
    thresholds: np.ndarray
    epochs: np.ndarray
    outcomes: Dict[str, int] = field(default_factory=dict)
    final_members: Tuple[Identity, ...] = ()

    @property
    def admissions(self) -> int:
        return self.outcomes.get("admitted", 0)

    @property
    def expulsions(self) -> int:
        return self.outcomes.get("expelled", 0)

    def to_payload(self) -> Dict[str, Any]:
        """Convert the report to a JSON-safe payload."""
        return {
            "params": asdict(self.params),
            "member_counts": self.member_counts.tolist(),
            "thresholds": self.thresholds.tolist(),
            "epochs": self.epochs.tolist(),
            "outcomes": dict(self.outcomes),
            "final_members": list(self.final_members),
        }


def derive_identity(rng: np.random.Generator) -> Identity:
    """Return the address of a fresh ``eth_account`` key drawn from *rng*."""
    while True:
        try:
            return Account.from_key(rng.bytes(32)).address
        except ValueError:
            continue


def run_simulation(params: SimulationParams) -> SimulationReport:
    """Run *params.rounds* random votes and return the resulting trajectories."""
    rng = np.random.default_rng(params.seed)
    founders = [derive_identity(rng) for _ in range(params.initial_members)]
    outsiders: List[Identity] = [derive_identity(rng) for _ in range(params.candidate_pool)]

    engine = VotingEngine(founders)
    outcomes: Counter[str] = Counter()
    member_counts = np.empty(params.rounds + 1, dtype=int)
    thresholds = np.empty(params.rounds + 1, dtype=int)
    epochs = np.empty(params.rounds + 1, dtype=int)
    member_counts[0], thresholds[0], epochs[0] = engine.member_count, engine.threshold, engine.epoch

    for i in range(1, params.rounds + 1):
        members = engine.members()
        voter = members[int(rng.integers(len(members)))]
        try:
            if rng.random() < params.admit_probability and outsiders:
                candidate = outsiders[int(rng.integers(len(outsiders)))]
                if engine.vote_to_admit(voter, candidate):
                    outsiders.remove(candidate)
                    outcomes["admitted"] += 1
                else:
                    outcomes["admit_vote"] += 1
            else:
                target = members[int(rng.integers(len(members)))]
                if engine.vote_to_expel(voter, target):
                    outsiders.append(target)
                    outcomes["expelled"] += 1
                else:
                    outcomes["expel_vote"] += 1
        except GovernanceError as exc:
            outcomes[exc.code] += 1
        member_counts[i], thresholds[i], epochs[i] = engine.member_count, engine.threshold, engine.epoch

    return SimulationReport(
        params=params,
        member_counts=member_counts,
        thresholds=thresholds,
        epochs=epochs,
        outcomes=dict(outcomes),
        final_members=engine.members(),
    )


__all__ = ["SimulationParams", "SimulationReport", "derive_identity", "run_simulation"]
