from __future__ import annotations

from pathlib import Path

import numpy as np
import matplotlib.pyplot as plt

from spring_sim.trajectory import SpringTrajectory


def _component_labels(name: str, values: np.ndarray) -> list[str]:
    if values.ndim == 1:
        return [name]
    return [f"{name}[{j}]" for j in range(values.shape[1])]


def _as_columns(values: np.ndarray) -> np.ndarray:
    return values[:, np.newaxis] if values.ndim == 1 else values


def plot_trajectory(
    traj: SpringTrajectory,
    out_path: Path,
    *,
    title: str = "Spring Trajectory",
    envelope: np.ndarray | None = None,
) -> None:
    """Plot position + goal (top) with velocity below.

    `envelope` is an optional |offset| bound per sample, drawn as a band around the goal.
    """
    pos = _as_columns(traj.position)
    goal = _as_columns(traj.goal)
    vel = _as_columns(traj.velocity)
    labels = _component_labels("position", traj.position)

    fig, (ax1, ax2) = plt.subplots(
        2, 1, figsize=(12, 8), sharex=True, gridspec_kw={"height_ratios": [3, 1]}
    )

    colors = plt.cm.viridis(np.linspace(0, 0.9, pos.shape[1]))

    for j in range(pos.shape[1]):
        if envelope is not None:
            ax1.fill_between(
                traj.time_s,
                goal[:, j] - envelope,
                goal[:, j] + envelope,
                color=colors[j],
                alpha=0.12,
                linewidth=0.0,
            )
        ax1.plot(traj.time_s, goal[:, j], color=colors[j], linewidth=1.0, linestyle="--")
        ax1.plot(traj.time_s, pos[:, j], label=labels[j], linewidth=1.6, color=colors[j])
        ax2.plot(traj.time_s, vel[:, j], linewidth=1.2, color=colors[j])

    ax1.set_ylabel("Position")
    ax1.set_title(title)
    ax1.grid(True, alpha=0.3)
    ax1.legend(fontsize=8)

    ax2.axhline(y=0, color="gray", linewidth=0.8, linestyle="--")
    ax2.set_xlabel("Time (s)")
    ax2.set_ylabel("Velocity")
    ax2.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(out_path, dpi=160, bbox_inches="tight")
    plt.close(fig)


def plot_presets(trajectories: dict[str, SpringTrajectory], out_path: Path) -> None:
    """Overlay the (first component of the) position of several presets."""
    fig, ax = plt.subplots(figsize=(12, 6))

    for name, traj in trajectories.items():
        pos = _as_columns(traj.position)
        ax.plot(traj.time_s, pos[:, 0], label=name, linewidth=1.4)

    if trajectories:
        first = next(iter(trajectories.values()))
        ax.plot(first.time_s, _as_columns(first.goal)[:, 0], color="black", linewidth=1.0, linestyle="--", label="goal")

    ax.set_xlabel("Time (s)")
    ax.set_ylabel("Position")
    ax.set_title("Preset Comparison")
    ax.grid(True, alpha=0.3)
    ax.legend(fontsize=8)

    plt.tight_layout()
    plt.savefig(out_path, dpi=160)
    plt.close(fig)
