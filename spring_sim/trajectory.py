from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from spring_sim.spring import Spring


@dataclass
class GoalChange:
    time_s: float
    goal: object


@dataclass
class SpringTrajectory:
    time_s: np.ndarray  # shape (T,)
    goal: np.ndarray  # shape (T,) or (T, D)
    position: np.ndarray  # shape (T,) or (T, D)
    velocity: np.ndarray  # shape (T,) or (T, D)

    def size(self) -> int:
        return int(self.time_s.size)

    def is_vector(self) -> bool:
        return self.position.ndim > 1


def uniform_time_grid(duration_s: float, dt_s: float) -> np.ndarray:
    """0, dt, 2*dt, ... up to duration_s (the last sample lands on duration_s within rounding)."""
    if dt_s <= 0.0:
        raise ValueError(f'dt_s must be > 0, got {dt_s}')
    if duration_s < 0.0:
        raise ValueError(f'duration_s must be >= 0, got {duration_s}')
    n = int(round(duration_s / dt_s)) + 1
    return np.arange(n, dtype=float) * dt_s


def _as_array(values: list) -> np.ndarray:
    return np.asarray([np.asarray(v, dtype=float) for v in values], dtype=float)


def run_spring(
    spring: Spring,
    time_s: np.ndarray | list[float],
    goal_schedule: list[GoalChange] | None = None,
) -> SpringTrajectory:
    """
    Step `spring` across an increasing time grid and record every sample.

    Sample 0 is the state at time_s[0] before any step. The grid does not need
    to be uniform: each step is an exact evaluation over its own dt.

    Goal changes apply to every step that starts at or after their time. The
    recorded goal at sample i is the goal in effect from time_s[i] onward.
    """
    t = np.asarray(time_s, dtype=float)
    if t.ndim != 1 or t.size == 0:
        raise ValueError('time_s must be a non-empty 1-D sequence.')
    if t.size > 1 and np.any(np.diff(t) < 0.0):
        raise ValueError('time_s must be non-decreasing.')

    pending = sorted(goal_schedule or [], key=lambda c: c.time_s)
    k = 0

    def _apply_goal_changes(now: float) -> None:
        nonlocal k
        while k < len(pending) and pending[k].time_s <= now:
            spring.set_goal(pending[k].goal)
            k += 1

    _apply_goal_changes(float(t[0]))

    goals = [spring.goal]
    positions = [spring.get_position()]
    velocities = [spring.get_velocity()]

    for i in range(1, t.size):
        dt = float(t[i] - t[i - 1])
        spring.step(dt)
        _apply_goal_changes(float(t[i]))
        goals.append(spring.goal)
        positions.append(spring.get_position())
        velocities.append(spring.get_velocity())

    return SpringTrajectory(
        time_s=t,
        goal=_as_array(goals),
        position=_as_array(positions),
        velocity=_as_array(velocities),
    )


def simulate_preset(
    damping_ratio: float,
    frequency: float,
    initial_position,
    goal,
    *,
    duration_s: float,
    dt_s: float,
) -> SpringTrajectory:
    """Spring at rest at `initial_position`, goal set at t=0, sampled on a uniform grid."""
    spring = Spring(damping_ratio, frequency, initial_position)
    return run_spring(
        spring,
        uniform_time_grid(duration_s, dt_s),
        goal_schedule=[GoalChange(time_s=0.0, goal=goal)],
    )
