import numpy as np
import pytest

from spring_sim.fitting import fit_spring, predict_positions
from spring_sim.trajectory import simulate_preset


def test_predict_positions_matches_simulation():
    traj = simulate_preset(0.4, 1.5, 0.0, 1.0, duration_s=1.0, dt_s=0.02)
    pred = predict_positions(traj.time_s, 1.0, 0.0, 0.0, 0.4, 1.5)
    np.testing.assert_allclose(pred, traj.position, rtol=0, atol=1e-12)


def test_predict_positions_with_initial_velocity():
    t = np.array([0.0, 0.001])
    pred = predict_positions(t, 0.0, 0.0, 5.0, 0.5, 1.0)
    assert pred[1] == pytest.approx(5.0 * 0.001, rel=1e-2)


@pytest.mark.parametrize(
    'damping_ratio, frequency, init',
    [
        (0.35, 1.2, {'damping_ratio': 0.5, 'frequency': 1.0}),
        (1.4, 0.8, {'damping_ratio': 1.0, 'frequency': 1.0}),
    ],
)
def test_fit_recovers_known_parameters(damping_ratio, frequency, init):
    traj = simulate_preset(damping_ratio, frequency, 0.0, 1.0, duration_s=3.0, dt_s=0.02)
    result = fit_spring(
        traj.time_s,
        traj.position,
        1.0,
        init=init,
        bounds={'damping_ratio': (0.0, 3.0), 'frequency': (0.1, 5.0)},
    )
    assert result.success
    assert result.params['damping_ratio'] == pytest.approx(damping_ratio, rel=1e-3)
    assert result.params['frequency'] == pytest.approx(frequency, rel=1e-3)
    assert result.residual_norm < 1e-4


def test_fit_with_fixed_damping_ratio():
    traj = simulate_preset(0.5, 2.0, 0.0, 1.0, duration_s=2.0, dt_s=0.02)
    lines = []
    result = fit_spring(
        traj.time_s,
        traj.position,
        1.0,
        init={'damping_ratio': 0.5, 'frequency': 1.8},
        bounds={'damping_ratio': (0.5, 0.5), 'frequency': (0.1, 5.0)},
        echo=lines.append,
    )
    assert result.params['damping_ratio'] == 0.5
    assert result.params['frequency'] == pytest.approx(2.0, rel=1e-3)
    assert any('(fixed)' in line for line in lines)


def test_fit_with_everything_fixed_just_evaluates():
    traj = simulate_preset(0.5, 2.0, 0.0, 1.0, duration_s=1.0, dt_s=0.05)
    result = fit_spring(
        traj.time_s,
        traj.position,
        1.0,
        init={'damping_ratio': 0.5, 'frequency': 2.0},
        bounds={'damping_ratio': (0.5, 0.5), 'frequency': (2.0, 2.0)},
    )
    assert result.success
    assert result.cost == pytest.approx(0.0, abs=1e-20)
    assert result.params == {'damping_ratio': 0.5, 'frequency': 2.0}


@pytest.mark.parametrize(
    'bounds',
    [
        {'damping_ratio': (-1.0, 2.0), 'frequency': (0.1, 5.0)},
        {'damping_ratio': (0.0, 2.0), 'frequency': (0.0, 5.0)},
        {'damping_ratio': (2.0, 1.0), 'frequency': (0.1, 5.0)},
        {'damping_ratio': (0.0, 2.0)},
    ],
)
def test_fit_rejects_bad_bounds(bounds):
    with pytest.raises(ValueError):
        fit_spring([0.0, 0.1], [0.0, 0.1], 1.0, bounds=bounds)


def test_fit_rejects_bad_samples():
    with pytest.raises(ValueError):
        fit_spring([], [], 1.0)
    with pytest.raises(ValueError):
        fit_spring([0.0, 0.1, 0.2], [0.0, 0.1], 1.0)
    with pytest.raises(ValueError):
        fit_spring([0.0, 0.1], [0.0, 0.1], 1.0, init={'damping_ratio': 1.0})
