"""Sampling of trajectories and segments into flat-output states."""

import math
from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np

from mavtraj.derivatives import ACCELERATION, JERK, POSITION, SNAP, VELOCITY

NSEC_PER_SEC = 1.0e9

_SERIES_THRESHOLD = 1e-2


class Actuation(IntEnum):
    """Degrees of freedom a sampled state is meant for."""

    DOF4 = 4
    DOF6 = 6


def _zeros3():
    return np.zeros(3)


def _identity_quaternion():
    return np.array([1.0, 0.0, 0.0, 0.0])


@dataclass
class TrajectoryPoint:
    """A sampled state. The orientation is a quaternion stored as (w, x, y, z)."""

    time_from_start_ns: int = 0
    degrees_of_freedom: Actuation = Actuation.DOF4
    position: np.ndarray = field(default_factory=_zeros3)
    velocity: np.ndarray = field(default_factory=_zeros3)
    acceleration: np.ndarray = field(default_factory=_zeros3)
    jerk: np.ndarray = field(default_factory=_zeros3)
    snap: np.ndarray = field(default_factory=_zeros3)
    orientation: np.ndarray = field(default_factory=_identity_quaternion)
    angular_velocity: np.ndarray = field(default_factory=_zeros3)
    angular_acceleration: np.ndarray = field(default_factory=_zeros3)

    def set_from_yaw(self, yaw):
        """Set the orientation to a pure rotation about z by yaw."""
        half = 0.5 * yaw
        self.orientation = np.array([math.cos(half), 0.0, 0.0, math.sin(half)])

    def set_from_yaw_rate(self, yaw_rate):
        self.angular_velocity = np.array([0.0, 0.0, float(yaw_rate)])

    def set_from_yaw_acc(self, yaw_acc):
        self.angular_acceleration = np.array([0.0, 0.0, float(yaw_acc)])


def _skew(v):
    x, y, z = v
    return np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]])


def _rotation_terms(theta):
    """sin(t)/t, (1-cos t)/t**2, (t-sin t)/t**3 and the derivatives of the
    last two divided by t."""
    t2 = theta * theta
    if theta < _SERIES_THRESHOLD:
        sinc = 1.0 - t2 / 6.0
        a = 0.5 - t2 / 24.0
        b = 1.0 / 6.0 - t2 / 120.0
        da = -1.0 / 12.0 + t2 / 180.0
        db = -1.0 / 60.0 + t2 / 1260.0
    else:
        s = math.sin(theta)
        c = math.cos(theta)
        sinc = s / theta
        a = (1.0 - c) / t2
        b = (theta - s) / (t2 * theta)
        da = (theta * s - 2.0 * (1.0 - c)) / (t2 * t2)
        db = ((1.0 - c) * theta - 3.0 * (theta - s)) / (t2 * t2 * theta)
    return sinc, a, b, da, db


def matrix_from_rotation_vector(rot_vec):
    """Rotation matrix of a rotation vector (axis times angle)."""
    phi = np.asarray(rot_vec, dtype=float).reshape(3)
    sinc, a, _, _, _ = _rotation_terms(float(np.linalg.norm(phi)))
    k = _skew(phi)
    return np.eye(3) + sinc * k + a * (k @ k)


def omega_from_rotation_vector(rot_vec, rot_vec_vel):
    """World-frame angular velocity from a rotation vector and its rate."""
    phi = np.asarray(rot_vec, dtype=float).reshape(3)
    phi_dot = np.asarray(rot_vec_vel, dtype=float).reshape(3)
    _, a, b, _, _ = _rotation_terms(float(np.linalg.norm(phi)))
    cross = np.cross(phi, phi_dot)
    return phi_dot + a * cross + b * np.cross(phi, cross)


def omega_dot_from_rotation_vector(rot_vec, rot_vec_vel, rot_vec_acc):
    """World-frame angular acceleration from a rotation vector and its rates."""
    phi = np.asarray(rot_vec, dtype=float).reshape(3)
    phi_dot = np.asarray(rot_vec_vel, dtype=float).reshape(3)
    phi_ddot = np.asarray(rot_vec_acc, dtype=float).reshape(3)
    _, a, b, da, db = _rotation_terms(float(np.linalg.norm(phi)))
    projection = float(phi @ phi_dot)
    a_dot = da * projection
    b_dot = db * projection
    cross = np.cross(phi, phi_dot)
    cross_dot = np.cross(phi, phi_ddot)
    double_cross = np.cross(phi, cross)
    double_cross_dot = np.cross(phi_dot, cross) + np.cross(phi, cross_dot)
    return (
        phi_ddot
        + a_dot * cross
        + a * cross_dot
        + b_dot * double_cross
        + b * double_cross_dot
    )


def _quaternion_from_matrix(m):
    """Unit quaternion (w, x, y, z) of a rotation matrix."""
    trace = m[0, 0] + m[1, 1] + m[2, 2]
    if trace > 0.0:
        s = math.sqrt(trace + 1.0)
        w = 0.5 * s
        s = 0.5 / s
        return np.array(
            [w, (m[2, 1] - m[1, 2]) * s, (m[0, 2] - m[2, 0]) * s, (m[1, 0] - m[0, 1]) * s]
        )
    i = int(np.argmax(np.diag(m)))
    j = (i + 1) % 3
    k = (j + 1) % 3
    s = math.sqrt(m[i, i] - m[j, j] - m[k, k] + 1.0)
    vector = np.zeros(3)
    vector[i] = 0.5 * s
    s = 0.5 / s
    w = (m[k, j] - m[j, k]) * s
    vector[j] = (m[j, i] + m[i, j]) * s
    vector[k] = (m[k, i] + m[i, k]) * s
    return np.array([w, *vector])


def _make_state(dimension, time_ns, position, velocity, acceleration, jerk, snap):
    state = TrajectoryPoint(
        time_from_start_ns=time_ns,
        degrees_of_freedom=Actuation.DOF4,
        position=np.array(position[:3], dtype=float),
        velocity=np.array(velocity[:3], dtype=float),
        acceleration=np.array(acceleration[:3], dtype=float),
        jerk=np.array(jerk[:3], dtype=float),
        snap=np.array(snap[:3], dtype=float),
    )
    if dimension == 4:
        state.set_from_yaw(position[3])
        state.set_from_yaw_rate(velocity[3])
        state.set_from_yaw_acc(acceleration[3])
    elif dimension == 6:
        # Over-actuated: orientation from the interpolated rotation vector.
        rot_vec = position[-3:]
        rot_vec_vel = velocity[-3:]
        rot_vec_acc = acceleration[-3:]
        state.orientation = _quaternion_from_matrix(matrix_from_rotation_vector(rot_vec))
        state.angular_velocity = omega_from_rotation_vector(rot_vec, rot_vec_vel)
        state.angular_acceleration = omega_dot_from_rotation_vector(
            rot_vec, rot_vec_vel, rot_vec_acc
        )
        state.degrees_of_freedom = Actuation.DOF6
    return state


def _check_dimension(dimension):
    if dimension < 3:
        raise ValueError(f"dimension has to be at least 3, but is {dimension}")


def sample_flat_state_at_time(source, sample_time):
    """Sample a trajectory or segment at a time without range checks."""
    _check_dimension(source.D)
    values = [
        source.evaluate(sample_time, order)
        for order in (POSITION, VELOCITY, ACCELERATION, JERK, SNAP)
    ]
    return _make_state(
        source.D, int(sample_time * NSEC_PER_SEC), *values
    )


def sample_trajectory_at_time(trajectory, sample_time):
    """Sample a trajectory at a time within [min_time, max_time]."""
    if sample_time < trajectory.min_time or sample_time > trajectory.max_time:
        raise ValueError(
            f"sample time should be within [{trajectory.min_time} "
            f"{trajectory.max_time}] but is {sample_time}"
        )
    _check_dimension(trajectory.D)
    return sample_flat_state_at_time(trajectory, sample_time)


def sample_trajectory_in_range(trajectory, min_time, max_time, sampling_interval):
    """Sample a trajectory from min_time towards max_time at a fixed interval."""
    if min_time < trajectory.min_time or max_time > trajectory.max_time:
        raise ValueError(
            f"sample time should be within [{trajectory.min_time} "
            f"{trajectory.max_time}] but is [{min_time} {max_time}]"
        )
    _check_dimension(trajectory.D)

    series = [
        trajectory.evaluate_range(min_time, max_time, sampling_interval, order)[0]
        for order in (POSITION, VELOCITY, ACCELERATION, JERK, SNAP)
    ]
    return [
        _make_state(
            trajectory.D,
            int((min_time + sampling_interval * index) * NSEC_PER_SEC),
            *values,
        )
        for index, values in enumerate(zip(*series))
    ]


def sample_trajectory_start_duration(trajectory, start_time, duration, sampling_interval):
    """Sample a trajectory over duration seconds from start_time."""
    return sample_trajectory_in_range(
        trajectory, start_time, start_time + duration, sampling_interval
    )


def sample_whole_trajectory(trajectory, sampling_interval):
    """Sample a trajectory over its whole time range."""
    return sample_trajectory_in_range(
        trajectory, trajectory.min_time, trajectory.max_time, sampling_interval
    )


def sample_segment_at_time(segment, sample_time):
    """Sample a segment at a time within [0, segment.time]."""
    if sample_time < 0.0 or sample_time > segment.time:
        raise ValueError(
            f"sample time should be within [0.0 {segment.time}] but is {sample_time}"
        )
    return sample_flat_state_at_time(segment, sample_time)