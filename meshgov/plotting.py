from __future__ import annotations

"""Plotting utilities for simulated governance runs.

Figures are saved to files for downstream reporting.
"""

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402

from meshgov.simulation import SimulationReport  # noqa: E402
from meshgov.types import MIN_MEMBERS  # noqa: E402


def save_trajectory_plot(report: SimulationReport, *, output_path: Path) -> Path:
    """Save member count, threshold and epoch per round and return the path.

    Args:
        report: Result of :func:`meshgov.simulation.run_simulation`.
        output_path: Destination file path (parent directories will be created).

    Returns:
        The path to the saved figure file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    rounds = np.arange(len(report.member_counts))
    fig, (ax_members, ax_epoch) = plt.subplots(2, 1, figsize=(8, 6), sharex=True, constrained_layout=True)

    ax_members.step(rounds, report.member_counts, where="post", color="#1f77b4", linewidth=2.0, label="members")
    ax_members.step(rounds, report.thresholds, where="post", color="#ff7f0e", linewidth=1.5, label="threshold")
    ax_members.axhline(MIN_MEMBERS, color="red", linestyle=":", linewidth=0.8, label="minimum")
    ax_members.set_ylabel("Count")
    ax_members.set_title("Council size and majority threshold")
    ax_members.legend(loc="upper left", fontsize=9)
    ax_members.grid(True, linestyle=":", linewidth=0.8, alpha=0.8)

    ax_epoch.step(rounds, report.epochs, where="post", color="#2ca02c", linewidth=2.0)
    ax_epoch.set_xlabel("Round")
    ax_epoch.set_ylabel("Epoch")
    ax_epoch.grid(True, linestyle=":", linewidth=0.8, alpha=0.8)

    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    return output_path


__all__ = ["save_trajectory_plot"]
