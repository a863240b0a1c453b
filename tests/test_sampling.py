import math

import numpy as np
import pytest

from mavtraj.derivatives import ACCELERATION, JERK, POSITION, SNAP, VELOCITY
from mavtraj.polynomial import Polynomial
from mavtraj.sampling import (
    Actuation,
    TrajectoryPoint,
    matrix_from_rotation_vector,
    omega_dot_from_rotation_vector,
    omega_from_rotation_vector,
    sample_flat_state_at_time,
    sample_segment_at_time,
    sample_trajectory_at_time,
    sample_trajectory_in_range,
    sample_trajectory_start_duration,
    sample_whole_trajectory,
)
from mavtraj.segment import Segment
from mavtraj.trajectory import Trajectory


def _segment(rows, time):
    segment = Segment(len(rows[0]), len(rows))
    for index, row in enumerate(rows):
        segment[index] = Polynomial(row)
    segment.time = time
    return segment


@pytest.fixture
def trajectory3():
    rows = [[1.0, 2.0, 0.0, 0.0, 0.0], [0.0, 0.0, 1.0, 0.0, 0.0], [5.0, 0.0, 0.0, 1.0, 0.5]]
    return Trajectory([_segment(rows, 2.0)])


def test_sample_at_time_matches_evaluate(trajectory3):
    state = sample_trajectory_at_time(trajectory3, 1.0)
    assert np.allclose(state.position, trajectory3.evaluate(1.0, POSITION))
    assert np.allclose(state.velocity, trajectory3.evaluate(1.0, VELOCITY))
    assert np.allclose(state.acceleration, trajectory3.evaluate(1.0, ACCELERATION))
    assert np.allclose(state.jerk, trajectory3.evaluate(1.0, JERK))
    assert np.allclose(state.snap, trajectory3.evaluate(1.0, SNAP))
    assert state.time_from_start_ns == 1_000_000_000
    assert state.degrees_of_freedom == Actuation.DOF4


def test_sample_at_time_out_of_range(trajectory3):
    with pytest.raises(ValueError):
        sample_trajectory_at_time(trajectory3, 2.5)
    with pytest.raises(ValueError):
        sample_trajectory_at_time(trajectory3, -0.1)


def test_low_dimension_rejected():
    trajectory = Trajectory([_segment([[1.0, 1.0], [2.0, 0.0]], 1.0)])
    with pytest.raises(ValueError):
        sample_trajectory_at_time(trajectory, 0.5)
    with pytest.raises(ValueError):
        sample_flat_state_at_time(trajectory, 0.5)
    with pytest.raises(ValueError):
        sample_whole_trajectory(trajectory, 0.1)


def test_yaw_dimension_sets_orientation():
    rows = [[0.0, 1.0, 0.0], [0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.5, 0.25, 0.5]]
    trajectory = Trajectory([_segment(rows, 1.0)])
    state = sample_trajectory_at_time(trajectory, 0.5)
    yaw = trajectory.evaluate(0.5, POSITION)[3]
    yaw_rate = trajectory.evaluate(0.5, VELOCITY)[3]
    yaw_acc = trajectory.evaluate(0.5, ACCELERATION)[3]
    w, x, y, z = state.orientation
    assert x == 0.0 and y == 0.0
    assert 2.0 * math.atan2(z, w) == pytest.approx(yaw)
    assert np.allclose(state.angular_velocity, [0.0, 0.0, yaw_rate])
    assert np.allclose(state.angular_acceleration, [0.0, 0.0, yaw_acc])


def test_six_dimensions_use_rotation_vector():
    rows = [[0.0, 1.0], [0.0, 0.0], [0.0, 0.0], [0.0, 0.0], [0.0, 0.0], [math.pi / 2, 0.0]]
    segment = _segment(rows, 1.0)
    state = sample_segment_at_time(segment, 0.5)
    assert state.degrees_of_freedom == Actuation.DOF6
    w, x, y, z = state.orientation
    assert w == pytest.approx(math.cos(math.pi / 4))
    assert z == pytest.approx(math.sin(math.pi / 4))
    assert np.allclose([x, y], 0.0)
    assert np.allclose(state.angular_velocity, 0.0)


def test_segment_sample_out_of_range(trajectory3):
    segment = trajectory3.segments[0]
    with pytest.raises(ValueError):
        sample_segment_at_time(segment, -0.5)
    with pytest.raises(ValueError):
        sample_segment_at_time(segment, segment.time + 0.1)


def test_whole_trajectory_times_and_values(trajectory3):
    states = sample_whole_trajectory(trajectory3, 0.5)
    assert len(states) == 4
    for index, state in enumerate(states):
        assert state.time_from_start_ns == int(index * 0.5 * 1e9)
        assert np.allclose(state.position, trajectory3.evaluate(index * 0.5))


def test_range_rejects_times_outside(trajectory3):
    with pytest.raises(ValueError):
        sample_trajectory_in_range(trajectory3, 0.0, 3.0, 0.1)


def test_start_duration_equals_range(trajectory3):
    a = sample_trajectory_start_duration(trajectory3, 0.5, 1.0, 0.25)
    b = sample_trajectory_in_range(trajectory3, 0.5, 1.5, 0.25)
    assert len(a) == len(b) > 0
    for x, y in zip(a, b):
        assert x.time_from_start_ns == y.time_from_start_ns
        assert np.allclose(x.position, y.position)


def test_trajectory_point_defaults_and_yaw_setters():
    point = TrajectoryPoint()
    assert np.array_equal(point.orientation, [1.0, 0.0, 0.0, 0.0])
    point.set_from_yaw_rate(0.7)
    point.set_from_yaw_acc(-0.2)
    assert np.array_equal(point.angular_velocity, [0.0, 0.0, 0.7])
    assert np.array_equal(point.angular_acceleration, [0.0, 0.0, -0.2])


@pytest.mark.parametrize("rot_vec", [[0.0, 0.0, 0.0], [0.3, -0.2, 1.1], [1e-4, 2e-4, 0.0]])
def test_rotation_matrix_is_orthonormal(rot_vec):
    r = matrix_from_rotation_vector(rot_vec)
    assert np.allclose(r @ r.T, np.eye(3))
    assert np.linalg.det(r) == pytest.approx(1.0)
    assert np.allclose(r @ np.asarray(rot_vec), rot_vec)


def test_zero_rotation_vector_is_identity():
    assert np.allclose(matrix_from_rotation_vector([0.0, 0.0, 0.0]), np.eye(3))


def test_omega_parallel_rate_equals_rate():
    phi = np.array([0.2, 0.4, -0.6])
    phi_dot = 0.5 * phi
    assert np.allclose(omega_from_rotation_vector(phi, phi_dot), phi_dot)


@pytest.mark.parametrize("phi", [[0.4, -0.7, 0.9], [1e-3, 2e-3, -1e-3]])
def test_omega_matches_rotation_derivative(phi):
    phi = np.array(phi)
    phi_dot = np.array([0.3, 0.1, -0.5])
    h = 1e-6
    r = matrix_from_rotation_vector(phi)
    r_dot = (
        matrix_from_rotation_vector(phi + h * phi_dot)
        - matrix_from_rotation_vector(phi - h * phi_dot)
    ) / (2 * h)
    w = r_dot @ r.T
    omega = np.array([w[2, 1], w[0, 2], w[1, 0]])
    assert np.allclose(omega_from_rotation_vector(phi, phi_dot), omega, atol=1e-6)


@pytest.mark.parametrize("phi0", [[0.4, -0.7, 0.9], [1e-3, 0.0, 2e-3]])
def test_omega_dot_matches_finite_difference(phi0):
    phi0 = np.array(phi0)
    phi_dot0 = np.array([0.3, 0.1, -0.5])
    phi_ddot = np.array([-0.2, 0.6, 0.4])
    h = 1e-5

    def omega_at(t):
        phi = phi0 + phi_dot0 * t + 0.5 * phi_ddot * t * t
        return omega_from_rotation_vector(phi, phi_dot0 + phi_ddot * t)

    numeric = (omega_at(h) - omega_at(-h)) / (2 * h)
    analytic = omega_dot_from_rotation_vector(phi0, phi_dot0, phi_ddot)
    assert np.allclose(analytic, numeric, atol=1e-6)