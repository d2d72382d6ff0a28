from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy.optimize import least_squares

from spring_sim.spring import spring_step


PARAM_KEYS = ('damping_ratio', 'frequency')

DEFAULT_INIT = {'damping_ratio': 1.0, 'frequency': 1.0}
DEFAULT_BOUNDS = {'damping_ratio': (0.0, 5.0), 'frequency': (0.01, 20.0)}


@dataclass
class FitResult:
    params: dict
    success: bool
    cost: float
    residual_norm: float


def predict_positions(
    time_s: np.ndarray,
    goal,
    initial_position,
    initial_velocity,
    damping_ratio: float,
    frequency: float,
) -> np.ndarray:
    """Positions of a spring started at (initial_position, initial_velocity) on the given grid."""
    t = np.asarray(time_s, dtype=float)
    p = initial_position
    v = initial_velocity
    out = [p]
    for dt in np.diff(t):
        p, v = spring_step(damping_ratio, frequency, goal, p, v, float(dt))
        out.append(p)
    return np.asarray(out, dtype=float)


def _validate_bounds(bounds: dict[str, tuple[float, float]]) -> None:
    for k in PARAM_KEYS:
        if k not in bounds:
            raise ValueError(f"Missing bounds for param '{k}'.")
        lo, hi = bounds[k]
        if lo > hi:
            raise ValueError(f"Bounds for '{k}' are inverted: [{lo}, {hi}].")
    if bounds['damping_ratio'][0] < 0.0:
        raise ValueError('damping_ratio lower bound must be >= 0 (spring must converge).')
    if bounds['frequency'][0] <= 0.0:
        raise ValueError('frequency lower bound must be > 0.')


def fit_spring(
    time_s: np.ndarray | list[float],
    position: np.ndarray | list[float],
    goal,
    *,
    init: dict | None = None,
    bounds: dict[str, tuple[float, float]] | None = None,
    initial_velocity=0.0,
    max_nfev: int = 200,
    echo=None,
) -> FitResult:
    """
    Fit damping ratio and frequency to a recorded trajectory.

    The model spring starts at position[0] with `initial_velocity` and pulls
    toward a fixed `goal`. Residuals are predicted minus recorded positions.

    Fixed rule:
      Any bound [lo, hi] with lo == hi is held fixed and removed from optimization.
    """
    t = np.asarray(time_s, dtype=float)
    x = np.asarray(position, dtype=float)
    if t.size == 0:
        raise ValueError('No samples to fit.')
    if t.shape[0] != x.shape[0]:
        raise ValueError(f'time_s and position lengths differ: {t.shape[0]} vs {x.shape[0]}')

    init = dict(DEFAULT_INIT if init is None else init)
    bounds = dict(DEFAULT_BOUNDS if bounds is None else bounds)
    _validate_bounds(bounds)
    for k in PARAM_KEYS:
        if k not in init:
            raise ValueError(f"Missing init param '{k}'.")

    free = [k for k in PARAM_KEYS if bounds[k][0] != bounds[k][1]]
    fixed = {k: float(bounds[k][0]) for k in PARAM_KEYS if k not in free}

    p0 = x[0]

    def _params_from_vec(vec: np.ndarray) -> dict:
        params = dict(fixed)
        for i, k in enumerate(free):
            params[k] = float(vec[i])
        return params

    def residuals(vec: np.ndarray) -> np.ndarray:
        params = _params_from_vec(vec)
        pred = predict_positions(
            t, goal, p0, initial_velocity, params['damping_ratio'], params['frequency']
        )
        return (pred - x).ravel()

    if not free:
        res = residuals(np.zeros(0))
        cost = 0.5 * float(np.dot(res, res))
        return FitResult(params=fixed, success=True, cost=cost, residual_norm=float(np.linalg.norm(res)))

    lb = np.asarray([bounds[k][0] for k in free], dtype=float)
    ub = np.asarray([bounds[k][1] for k in free], dtype=float)
    x0 = np.clip(np.asarray([float(init[k]) for k in free], dtype=float), lb, ub)

    out = least_squares(residuals, x0, bounds=(lb, ub), max_nfev=max_nfev)

    params = _params_from_vec(out.x)
    if echo is not None:
        echo(f'Fit: status={out.status} nfev={out.nfev} cost={out.cost:.6g}')
        for k in PARAM_KEYS:
            echo(f'  {k} = {params[k]:.6g}' + (' (fixed)' if k in fixed else ''))

    return FitResult(
        params=params,
        success=bool(out.success),
        cost=float(out.cost),
        residual_norm=float(np.linalg.norm(out.fun)),
    )
