#!/usr/bin/env -S uv run

from __future__ import annotations

import argparse
from pathlib import Path

import numpy as np
from spring_sim.analysis import (
    classify_damping,
    decay_envelope,
    find_overshoot,
    is_monotonic_approach,
    offset_magnitude,
    settle_time,
)
from spring_sim.fitting import fit_spring
from spring_sim.io import parse_trajectory_csv
from spring_sim.output import write_trajectory_csv
from spring_sim.plotting import plot_presets, plot_trajectory
from spring_sim.settings import (
    DEFAULT_CONFIG_PATH,
    get_presets,
    read_config,
    req_bounds,
    req_float,
    req_str,
    req_value,
    resolve_path,
)
from spring_sim.trajectory import SpringTrajectory, simulate_preset


def _format_preset_summary(
    traj: SpringTrajectory,
    damping_ratio: float,
    frequency: float,
    settle_tolerance: float,
) -> str:
    lines: list[str] = []
    lines.append(f"  Regime: {classify_damping(damping_ratio)} (d={damping_ratio:g}, f={frequency:g} Hz)")

    final_pos = traj.position[-1]
    final_off = float(offset_magnitude(traj)[-1])
    lines.append(f"  Final position: {np.array2string(np.asarray(final_pos), precision=6)} (|offset|={final_off:.6f})")

    if not traj.is_vector():
        over = find_overshoot(traj)
        if over is None:
            lines.append("  Overshoot: none")
        else:
            lines.append(f"  Overshoot: {over.amount:.6f} @ {over.time_s * 1000.0:.1f} ms")

    t_settle = settle_time(traj, settle_tolerance)
    if t_settle is None:
        lines.append(f"  Settle time (tol={settle_tolerance:g}): not settled")
    else:
        lines.append(f"  Settle time (tol={settle_tolerance:g}): {t_settle * 1000.0:.1f} ms")

    lines.append(f"  Monotonic approach: {is_monotonic_approach(traj)}")
    return "\n".join(lines)


def _run_presets(config_path: Path, only: list[str] | None) -> None:
    config = read_config(config_path)
    presets = get_presets(config)

    if only:
        unknown = [n for n in only if n not in presets]
        if unknown:
            valid = ", ".join(presets.keys())
            raise SystemExit(f"Unknown preset(s): {', '.join(unknown)}. Available: {valid}")
        presets = {n: presets[n] for n in only}

    dt_s = req_float(config, ["run", "dt_s"])
    duration_s = req_float(config, ["run", "duration_s"])
    initial_position = req_value(config, ["run", "initial_position"])
    goal = req_value(config, ["run", "goal"])
    settle_tolerance = req_float(config, ["analysis", "settle_tolerance"])

    out_dir = resolve_path(req_str(config, ["output_dir"]))
    out_dir.mkdir(parents=True, exist_ok=True)

    print(f"Run: dt={dt_s * 1000.0:.3f} ms, duration={duration_s:.3f} s")

    trajectories: dict[str, SpringTrajectory] = {}
    for name, (damping_ratio, frequency) in presets.items():
        print(f"\nPreset {name}...")
        traj = simulate_preset(
            damping_ratio,
            frequency,
            initial_position,
            goal,
            duration_s=duration_s,
            dt_s=dt_s,
        )
        trajectories[name] = traj

        preset_dir = out_dir / name
        preset_dir.mkdir(parents=True, exist_ok=True)
        write_trajectory_csv(preset_dir / "trajectory.csv", traj)

        offset0 = float(offset_magnitude(traj)[0])
        envelope = decay_envelope(offset0, damping_ratio, frequency, traj.time_s)
        plot_trajectory(traj, preset_dir / "trajectory.png", title=f"Spring: {name}", envelope=envelope)

        print(_format_preset_summary(traj, damping_ratio, frequency, settle_tolerance))

    plot_presets(trajectories, out_dir / "presets.png")
    print(f"\nResults written to {out_dir}/")


def _run_fit(config_path: Path, csv_path: Path, goal: float | None) -> None:
    config = read_config(config_path)

    series = parse_trajectory_csv(csv_path)
    if goal is None:
        goal = series.values[-1]
        print(f"Goal not given, using last sample: {goal:.6f}")

    init = {k: req_float(config, ["fit", "init", k]) for k in ("damping_ratio", "frequency")}
    bounds = {k: req_bounds(config, ["fit", "bounds", k]) for k in ("damping_ratio", "frequency")}

    print(f"Fitting {len(series.time_s)} samples from {csv_path.name}...")
    result = fit_spring(
        series.time_s,
        series.values,
        goal,
        init=init,
        bounds=bounds,
        echo=print,
    )

    print(f"  success={result.success} cost={result.cost:.6g} residual_norm={result.residual_norm:.6g}")
    print(f"  Regime: {classify_damping(result.params['damping_ratio'])}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Closed-form damped spring simulation")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Config JSON")
    parser.add_argument("--preset", action="append", help="Run only this preset (repeatable).")
    parser.add_argument("--fit", type=Path, help="Fit damping ratio and frequency to a (time, position) CSV, then exit.")
    parser.add_argument("--goal", type=float, help="Goal used with --fit (default: last sample).")
    args = parser.parse_args()

    if args.fit is not None and args.preset:
        raise SystemExit("Choose only one: --fit OR --preset.")
    if args.goal is not None and args.fit is None:
        raise SystemExit("--goal only applies to --fit.")

    if args.fit is not None:
        _run_fit(args.config, args.fit, args.goal)
        return

    _run_presets(args.config, args.preset)


if __name__ == "__main__":
    main()
