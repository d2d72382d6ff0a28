import numpy as np
import pytest

from spring_sim.spring import Spring
from spring_sim.trajectory import GoalChange, run_spring, simulate_preset, uniform_time_grid


def test_uniform_time_grid_covers_duration():
    t = uniform_time_grid(1.0, 0.1)
    assert t.size == 11
    assert t[0] == 0.0
    assert t[-1] == pytest.approx(1.0)


def test_uniform_time_grid_zero_duration():
    t = uniform_time_grid(0.0, 0.01)
    assert t.tolist() == [0.0]


@pytest.mark.parametrize('duration_s, dt_s', [(1.0, 0.0), (1.0, -0.1), (-1.0, 0.1)])
def test_uniform_time_grid_rejects_bad_input(duration_s, dt_s):
    with pytest.raises(ValueError):
        uniform_time_grid(duration_s, dt_s)


def test_run_spring_records_initial_state():
    s = Spring(1.0, 1.0, 2.0)
    traj = run_spring(s, [0.0, 0.1, 0.2])
    assert traj.size() == 3
    assert traj.position[0] == 2.0
    assert traj.velocity[0] == 0.0
    assert np.all(traj.position == 2.0)
    assert not traj.is_vector()


def test_run_spring_matches_manual_stepping():
    t = [0.0, 0.05, 0.15, 0.4, 1.0]
    a = Spring(0.4, 1.5, 0.0)
    a.set_goal(1.0)
    traj = run_spring(a, t)

    b = Spring(0.4, 1.5, 0.0)
    b.set_goal(1.0)
    expected = [0.0]
    for t0, t1 in zip(t[:-1], t[1:]):
        expected.append(b.step(t1 - t0))

    np.testing.assert_allclose(traj.position, expected, rtol=0, atol=1e-15)
    assert a.get_position() == traj.position[-1]


def test_non_uniform_grid_agrees_with_fine_grid():
    coarse = run_spring(Spring(0.6, 2.0, 0.0), [0.0, 0.3, 1.0], goal_schedule=[GoalChange(0.0, 1.0)])
    fine = run_spring(Spring(0.6, 2.0, 0.0), uniform_time_grid(1.0, 0.001), goal_schedule=[GoalChange(0.0, 1.0)])
    assert coarse.position[-1] == pytest.approx(fine.position[-1], abs=1e-9)
    assert coarse.velocity[-1] == pytest.approx(fine.velocity[-1], abs=1e-9)


def test_goal_schedule_applies_from_change_time():
    s = Spring(1.0, 1.0, 0.0)
    t = uniform_time_grid(1.0, 0.1)
    traj = run_spring(s, t, goal_schedule=[GoalChange(0.5, 3.0), GoalChange(0.0, 1.0)])

    assert traj.goal[0] == 1.0
    assert traj.goal[4] == 1.0
    assert traj.goal[5] == 3.0
    assert traj.goal[-1] == 3.0
    assert s.goal == 3.0

    # Before the change the motion is the plain goal=1 response.
    ref = Spring(1.0, 1.0, 0.0)
    ref.set_goal(1.0)
    for _ in range(5):
        ref.step(0.1)
    assert traj.position[5] == pytest.approx(ref.get_position())


def test_run_spring_rejects_bad_grid():
    with pytest.raises(ValueError):
        run_spring(Spring(1.0, 1.0, 0.0), [])
    with pytest.raises(ValueError):
        run_spring(Spring(1.0, 1.0, 0.0), [0.0, 0.2, 0.1])


def test_vector_trajectory_shape():
    traj = simulate_preset(
        0.5, 1.0, np.zeros(2), np.array([1.0, -1.0]), duration_s=0.5, dt_s=0.1
    )
    assert traj.is_vector()
    assert traj.position.shape == (6, 2)
    assert traj.velocity.shape == (6, 2)
    assert traj.goal.shape == (6, 2)
    np.testing.assert_allclose(traj.position[:, 0], -traj.position[:, 1])


def test_simulate_preset_starts_at_rest():
    traj = simulate_preset(2.0, 1.0, 0.0, 1.0, duration_s=1.0, dt_s=0.01)
    assert traj.position[0] == 0.0
    assert traj.velocity[0] == 0.0
    assert np.all(traj.goal == 1.0)
    assert 0.0 < traj.position[-1] < 1.0
