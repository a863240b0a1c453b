"""Piecewise-polynomial trajectories made of consecutive segments."""

import dataclasses
import math
import sys

import numpy as np

from mavtraj.derivatives import ACCELERATION, POSITION, VELOCITY
from mavtraj.segment import Extremum
from mavtraj.vertex import Vertex

_MAX_FLOAT = sys.float_info.max
_POSITION_DIMENSIONS = (0, 1, 2)
_YAW_DIMENSIONS = (3,)


class Trajectory:
    """K segments of D dimensions, each polynomial holding N coefficients."""

    __hash__ = None

    def __init__(self, segments=None):
        self.clear()
        if segments is not None:
            self.set_segments(segments)

    @property
    def D(self):
        return self._d

    @property
    def N(self):
        return self._n

    @property
    def K(self):
        return len(self._segments)

    @property
    def empty(self):
        return not self._segments

    @property
    def segments(self):
        return tuple(self._segments)

    @property
    def min_time(self):
        return 0.0

    @property
    def max_time(self):
        return self._max_time

    def copy(self):
        result = Trajectory()
        result._d = self._d
        result._n = self._n
        result._max_time = self._max_time
        result._segments = [s.copy() for s in self._segments]
        return result

    def __eq__(self, other):
        if not isinstance(other, Trajectory):
            return NotImplemented
        return len(self._segments) == len(other._segments) and all(
            a == b for a, b in zip(self._segments, other._segments)
        )

    def __repr__(self):
        return (
            f"Trajectory(D={self._d}, N={self._n}, K={self.K}, "
            f"max_time={self._max_time})"
        )

    def clear(self):
        """Remove all segments and reset the dimensions."""
        self._segments = []
        self._d = 0
        self._n = 0
        self._max_time = 0.0

    def set_segments(self, segments):
        """Replace the segments; dimensions are taken from the first one."""
        segments = list(segments)
        if not segments:
            raise ValueError("cannot set an empty list of segments")
        self._d = segments[0].D
        self._n = segments[0].N
        self._max_time = 0.0
        self._segments = []
        self.add_segments(segments)

    def add_segments(self, segments):
        """Append segments of the same dimension and number of coefficients."""
        segments = list(segments)
        for segment in segments:
            if segment.D != self._d or segment.N != self._n:
                raise ValueError(
                    f"segment has D={segment.D}, N={segment.N}; trajectory has "
                    f"D={self._d}, N={self._n}"
                )
        for segment in segments:
            self._max_time += segment.time
            self._segments.append(segment.copy())

    def segment_times(self):
        return [segment.time for segment in self._segments]

    def _locate(self, t):
        """Index of the segment holding t and the time at its start."""
        if not self._segments:
            raise ValueError("the trajectory is empty")
        accumulated = 0.0
        index = 0
        for index, segment in enumerate(self._segments):
            accumulated += segment.time
            # On a vertex the segment to the right of it is chosen.
            if accumulated > t:
                break
        if t > accumulated:
            raise ValueError(f"time {t} out of range of the trajectory")
        return index, accumulated - self._segments[index].time

    def evaluate(self, t, derivative=POSITION):
        """Value of the given derivative in every dimension at time t."""
        index, start = self._locate(t)
        return self._segments[index].evaluate(t - start, derivative)

    def evaluate_range(self, t_start, t_end, dt, derivative=POSITION):
        """Sample a derivative from t_start towards t_end in steps of dt.

        Returns ``(values, times)``. The recorded times count from the start
        of the segment holding t_start.
        """
        if dt <= 0:
            raise ValueError("dt must be positive")
        index, accumulated = self._locate(t_start)
        time_in_segment = t_start - accumulated

        values = []
        times = []
        while accumulated < t_end:
            segment = self._segments[index]
            if time_in_segment > segment.time:
                time_in_segment -= segment.time
                index += 1
                if index >= len(self._segments):
                    break
                continue
            values.append(segment.evaluate(time_in_segment, derivative))
            times.append(accumulated)
            time_in_segment += dt
            accumulated += dt
        return values, times

    def with_single_dimension(self, dimension):
        """Return a new trajectory holding only the given dimension."""
        if not 0 <= dimension < self._d:
            raise ValueError(f"dimension {dimension} out of range [0..{self._d - 1}]")
        return Trajectory(
            [segment.with_single_dimension(dimension) for segment in self._segments]
        )

    def with_appended_dimension(self, other):
        """Return a new trajectory with the dimensions of other appended."""
        if self._n == 0 or self._d == 0:
            return other.copy()
        if other.N == 0 or other.D == 0:
            return self.copy()
        if self.K != other.K:
            raise ValueError(
                f"cannot append a trajectory of {other.K} segments to one of {self.K}"
            )
        return Trajectory(
            [a.with_appended_dimension(b) for a, b in zip(self._segments, other._segments)]
        )

    def add_trajectories(self, trajectories):
        """Return a copy with the segments of the given trajectories appended."""
        merged = self.copy()
        for trajectory in trajectories:
            if trajectory.D != self._d or trajectory.N != self._n:
                raise ValueError(
                    f"trajectory to append has D={trajectory.D}, N={trajectory.N}; "
                    f"this one has D={self._d}, N={self._n}"
                )
            merged.add_segments(trajectory.segments)
        return merged

    def offset(self, offset):
        """Translate the first (up to three) dimensions by the offset vector."""
        offset = np.asarray(offset, dtype=float).reshape(-1)
        if offset.size < min(self._d, 3):
            raise ValueError("offset vector size smaller than trajectory dimension")
        for segment in self._segments:
            segment.offset(offset)

    def vertex_at_time(self, t, max_derivative_order):
        """Vertex holding all derivatives up to the given order at time t."""
        vertex = Vertex(self._d)
        for order in range(max_derivative_order + 1):
            vertex.add_constraint(order, self.evaluate(t, order))
        return vertex

    def start_vertex(self, max_derivative_order):
        return self.vertex_at_time(0.0, max_derivative_order)

    def goal_vertex(self, max_derivative_order):
        return self.vertex_at_time(self._max_time, max_derivative_order)

    def _vertex_times(self):
        times = [0.0]
        total = 0.0
        for segment in self._segments:
            total += segment.time
            times.append(total)
        return times

    def vertices(self, max_derivative_order):
        """Vertices at the start and at the end of every segment."""
        return [self.vertex_at_time(t, max_derivative_order) for t in self._vertex_times()]

    def split_vertices(self, max_derivative_order_pos, max_derivative_order_yaw):
        """Vertices split into position (dimensions 0-2) and yaw (dimension 3).

        Returns ``(position_vertices, yaw_vertices)``.
        """
        max_order = max(max_derivative_order_pos, max_derivative_order_yaw)
        position_vertices = []
        yaw_vertices = []
        for t in self._vertex_times():
            vertex = self.vertex_at_time(t, max_order)
            position_vertices.append(
                vertex.get_subdimension(_POSITION_DIMENSIONS, max_derivative_order_pos)
            )
            yaw_vertices.append(
                vertex.get_subdimension(_YAW_DIMENSIONS, max_derivative_order_yaw)
            )
        return position_vertices, yaw_vertices

    def compute_min_max_magnitude(self, derivative, dimensions):
        """Analytic extrema of the magnitude of a derivative over dimensions.

        Returns ``(minimum, maximum)`` as Extremum objects carrying the index
        of the segment they belong to and the time within that segment.
        """
        dimensions = list(dimensions)
        minimum = Extremum(value=_MAX_FLOAT)
        maximum = Extremum(value=-_MAX_FLOAT)
        for index, segment in enumerate(self._segments):
            candidates = segment.compute_min_max_magnitude_candidates(
                derivative, 0.0, segment.time, dimensions
            )
            low, high = segment.select_min_max_magnitude_from_candidates(
                derivative, 0.0, segment.time, dimensions, candidates
            )
            if low < minimum:
                minimum = dataclasses.replace(low, segment_idx=index)
            if high > maximum:
                maximum = dataclasses.replace(high, segment_idx=index)
        return minimum, maximum

    def compute_max_velocity_and_acceleration(self):
        """Return ``(v_max, a_max)`` over all dimensions."""
        dimensions = range(self._d)
        _, v_max = self.compute_min_max_magnitude(VELOCITY, dimensions)
        _, a_max = self.compute_min_max_magnitude(ACCELERATION, dimensions)
        return v_max.value, a_max.value

    def _stretch(self, scaling):
        inverse = 1.0 / scaling
        new_max_time = 0.0
        for segment in self._segments:
            new_time = segment.time * scaling
            for polynomial in segment.polynomials:
                polynomial.scale_in_time(inverse)
            segment.time = new_time
            new_max_time += new_time
        self._max_time = new_max_time

    def scale_segment_times(self, scaling):
        """Multiply every segment time by scaling, keeping the path's shape."""
        if scaling < 1.0e-6:
            raise ValueError("scaling must be at least 1e-6")
        self._stretch(scaling)

    def scale_segment_times_to_meet_constraints(self, v_max, a_max):
        """Stretch segment times until velocity and acceleration are within limits.

        Only ever increases segment times. Returns whether the limits are met
        within tolerance after at most 20 iterations.
        """
        max_iterations = 20
        tolerance = 1e-3
        within_range = False
        for _ in range(max_iterations):
            v_actual, a_actual = self.compute_max_velocity_and_acceleration()
            velocity_violation = v_actual / v_max
            acceleration_violation = a_actual / a_max
            within_range = (
                velocity_violation <= 1.0 + tolerance
                and acceleration_violation <= 1.0 + tolerance
            )
            if within_range:
                break
            scaling = max(
                1.0, max(velocity_violation, math.sqrt(acceleration_violation))
            )
            self._stretch(scaling)
        return within_range