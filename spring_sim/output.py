"""Output utilities for spring trajectories."""

from __future__ import annotations

import csv
from pathlib import Path

import numpy as np

from spring_sim.trajectory import SpringTrajectory


def _columns(name: str, values: np.ndarray) -> tuple[list[str], np.ndarray]:
    if values.ndim == 1:
        return [name], values[:, np.newaxis]
    return [f'{name}_{j}' for j in range(values.shape[1])], values


def write_trajectory_csv(path: Path, traj: SpringTrajectory) -> None:
    """Write a trajectory to CSV.

    Scalar springs get goal/position/velocity columns; vector springs get one
    column per component, e.g. position_0, position_1.
    """
    goal_h, goal = _columns('goal', traj.goal)
    pos_h, pos = _columns('position', traj.position)
    vel_h, vel = _columns('velocity', traj.velocity)

    headers = ['time_s'] + goal_h + pos_h + vel_h

    with path.open('w', newline='', encoding='utf-8') as f:
        w = csv.writer(f)
        w.writerow(headers)
        for i in range(traj.time_s.size):
            row = [f'{traj.time_s[i]:.6f}']
            row += [f'{goal[i, j]:.6f}' for j in range(goal.shape[1])]
            row += [f'{pos[i, j]:.6f}' for j in range(pos.shape[1])]
            row += [f'{vel[i, j]:.6f}' for j in range(vel.shape[1])]
            w.writerow(row)
