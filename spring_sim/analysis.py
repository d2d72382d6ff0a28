from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from spring_sim.spring import TWO_PI
from spring_sim.trajectory import SpringTrajectory


UNDERDAMPED = 'underdamped'
CRITICAL = 'critical'
OVERDAMPED = 'overdamped'

DEFAULT_SETTLE_TOLERANCE = 0.01


@dataclass
class Overshoot:
    idx: int
    time_s: float
    amount: float  # distance past the goal, always > 0


def classify_damping(damping_ratio: float) -> str:
    # Same exact comparison with 1 as the step function.
    if damping_ratio == 1:
        return CRITICAL
    if damping_ratio < 1:
        return UNDERDAMPED
    return OVERDAMPED


def offset_magnitude(traj: SpringTrajectory) -> np.ndarray:
    """|position - goal| per sample (Euclidean norm for vector springs)."""
    offset = traj.position - traj.goal
    if offset.ndim > 1:
        return np.linalg.norm(offset, axis=-1)
    return np.abs(offset)


def decay_envelope(
    offset0: float,
    damping_ratio: float,
    frequency: float,
    time_s: np.ndarray,
) -> np.ndarray:
    """
    |offset0| * exp(-d*f*t), with f = 2*pi*frequency.

    Underdamped motion with zero initial velocity stays within this envelope
    times 1/sqrt(1 - d^2).
    """
    t = np.asarray(time_s, dtype=float)
    return abs(float(offset0)) * np.exp(-damping_ratio * TWO_PI * frequency * t)


def find_overshoot(traj: SpringTrajectory) -> Overshoot | None:
    """
    Largest excursion past the goal on the far side from the start.

    Scalar trajectories only. The goal is taken per sample, so a goal change
    restarts the comparison from the side the position is on at that moment.
    """
    if traj.is_vector():
        raise ValueError('find_overshoot() needs a scalar trajectory.')

    n = traj.size()
    if n < 2:
        return None

    best: Overshoot | None = None
    side = np.sign(traj.position[0] - traj.goal[0])

    for i in range(1, n):
        if traj.goal[i] != traj.goal[i - 1]:
            side = np.sign(traj.position[i] - traj.goal[i])
            continue
        if side == 0.0:
            side = np.sign(traj.position[i] - traj.goal[i])
            continue

        past = -side * (traj.position[i] - traj.goal[i])
        if past > 0.0 and (best is None or past > best.amount):
            best = Overshoot(idx=i, time_s=float(traj.time_s[i]), amount=float(past))

    return best


def settle_time(traj: SpringTrajectory, tolerance: float = DEFAULT_SETTLE_TOLERANCE) -> float | None:
    """First time after which |position - goal| stays within tolerance; None if it never does."""
    dist = offset_magnitude(traj)
    # Non-finite distances count as outside the tolerance.
    outside = np.nonzero(~(dist <= tolerance))[0]
    if outside.size == 0:
        return float(traj.time_s[0])
    last = int(outside[-1])
    if last == dist.size - 1:
        return None
    return float(traj.time_s[last + 1])


def is_monotonic_approach(traj: SpringTrajectory, atol: float = 1e-12) -> bool:
    """True when the distance to the goal never grows from one sample to the next."""
    dist = offset_magnitude(traj)
    if not np.all(np.isfinite(dist)):
        return False
    if dist.size < 2:
        return True
    return bool(np.all(np.diff(dist) <= atol))
