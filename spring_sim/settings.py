"""Single source of truth for config + repo paths (no env overrides).

Policy:
- No fallback/default config values in code.
- If required config keys are missing, terminate with a clear error.
"""

from __future__ import annotations

import json
import numbers
from pathlib import Path
from typing import Any

import numpy as np

from spring_sim.spring import InvalidArgument, Spring


REPO_ROOT = Path(__file__).parent.parent
DEFAULT_CONFIG_PATH = REPO_ROOT / 'config.json'


def resolve_path(p: str) -> Path:
    path = Path(p)
    return path if path.is_absolute() else (REPO_ROOT / path)


def load_json(path: Path) -> dict:
    return json.loads(path.read_text(encoding='utf-8'))


def _require_path(cfg: dict, keys: list[str]) -> Any:
    cur: Any = cfg
    prefix: list[str] = []
    for k in keys:
        prefix.append(k)
        if not isinstance(cur, dict) or k not in cur:
            raise KeyError(f'Missing required config key: {".".join(prefix)}')
        cur = cur[k]
    return cur


def req_str(cfg: dict, keys: list[str]) -> str:
    v = _require_path(cfg, keys)
    if not isinstance(v, str) or not v.strip():
        raise ValueError(f'Config key {".".join(keys)} must be a non-empty string.')
    return v


def req_float(cfg: dict, keys: list[str]) -> float:
    v = _require_path(cfg, keys)
    if isinstance(v, bool):
        raise ValueError(f'Config key {".".join(keys)} must be a float-like value.')
    try:
        return float(v)
    except Exception as e:
        raise ValueError(f'Config key {".".join(keys)} must be a float-like value.') from e


def req_dict(cfg: dict, keys: list[str]) -> dict:
    v = _require_path(cfg, keys)
    if not isinstance(v, dict):
        raise ValueError(f'Config key {".".join(keys)} must be an object/dict.')
    return v


def req_value(cfg: dict, keys: list[str]) -> float | np.ndarray:
    """A spring value: a number, or a list of numbers for a vector spring."""
    v = _require_path(cfg, keys)
    if isinstance(v, list):
        if not v or not all(isinstance(x, numbers.Real) and not isinstance(x, bool) for x in v):
            raise ValueError(f'Config key {".".join(keys)} must be a non-empty list of numbers.')
        return np.asarray(v, dtype=float)
    return req_float(cfg, keys)


def req_bounds(cfg: dict, keys: list[str]) -> tuple[float, float]:
    v = _require_path(cfg, keys)
    if not isinstance(v, list) or len(v) != 2:
        raise ValueError(f'Config key {".".join(keys)} must be a [lo, hi] pair.')
    try:
        lo, hi = float(v[0]), float(v[1])
    except Exception as e:
        raise ValueError(f'Config key {".".join(keys)} must be a [lo, hi] pair of numbers.') from e
    if lo > hi:
        raise ValueError(f'Config key {".".join(keys)} has lo > hi: [{lo}, {hi}].')
    return lo, hi


def read_config(path: Path | None = None) -> dict:
    cfg = load_json(DEFAULT_CONFIG_PATH if path is None else path)
    validate_config(cfg)
    return cfg


def get_presets(cfg: dict) -> dict[str, tuple[float, float]]:
    presets = req_dict(cfg, ['presets'])
    return {
        name: (
            req_float(cfg, ['presets', name, 'damping_ratio']),
            req_float(cfg, ['presets', name, 'frequency']),
        )
        for name in presets
    }


def validate_config(cfg: dict) -> None:
    # Existence/type checks (no defaults).
    req_str(cfg, ['output_dir'])

    dt_s = req_float(cfg, ['run', 'dt_s'])
    duration_s = req_float(cfg, ['run', 'duration_s'])
    if dt_s <= 0.0:
        raise ValueError('Config key run.dt_s must be > 0.')
    if duration_s < 0.0:
        raise ValueError('Config key run.duration_s must be >= 0.')

    initial = req_value(cfg, ['run', 'initial_position'])
    goal = req_value(cfg, ['run', 'goal'])
    if np.shape(initial) != np.shape(goal):
        raise ValueError('Config keys run.initial_position and run.goal must have the same shape.')

    req_float(cfg, ['analysis', 'settle_tolerance'])

    presets = req_dict(cfg, ['presets'])
    if not presets:
        raise ValueError('Config key presets must define at least one preset.')
    for name, (d, f) in get_presets(cfg).items():
        try:
            Spring(d, f, 0.0)
        except InvalidArgument as e:
            raise ValueError(f"Preset '{name}' is invalid: {e}") from e

    lower = {}
    for k in ('damping_ratio', 'frequency'):
        req_float(cfg, ['fit', 'init', k])
        lower[k], _ = req_bounds(cfg, ['fit', 'bounds', k])

    # Same limits fit_spring enforces.
    if lower['damping_ratio'] < 0.0:
        raise ValueError('Config key fit.bounds.damping_ratio lower bound must be >= 0 (spring must converge).')
    if lower['frequency'] <= 0.0:
        raise ValueError('Config key fit.bounds.frequency lower bound must be > 0.')
