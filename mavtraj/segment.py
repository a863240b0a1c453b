"""Parametric path segments: one polynomial per dimension and a duration."""

import dataclasses
import math
import sys
from dataclasses import dataclass

import numpy as np

from mavtraj.derivatives import POSITION, position_derivative_to_string
from mavtraj.polynomial import Polynomial

NSEC_PER_SEC = 1.0e9
SEC_PER_NSEC = 1.0e-9

_MAX_FLOAT = sys.float_info.max


@dataclass
class Extremum:
    """An extreme value at a time, optionally tagged with its segment index.

    Ordering compares values only.
    """

    time: float = 0.0
    value: float = 0.0
    segment_idx: int = -1

    def __lt__(self, other):
        return self.value < other.value

    def __gt__(self, other):
        return self.value > other.value

    def __le__(self, other):
        return self.value <= other.value

    def __ge__(self, other):
        return self.value >= other.value


class Segment:
    """A segment with D polynomials of N coefficients each and a duration."""

    __hash__ = None

    def __init__(self, n, d):
        if n < 0 or d < 0:
            raise ValueError("n and d must not be negative")
        self._n = int(n)
        self._d = int(d)
        self.time = 0.0
        self._polynomials = [Polynomial.zeros(self._n) for _ in range(self._d)]

    @property
    def N(self):
        return self._n

    @property
    def D(self):
        return self._d

    @property
    def time_nsec(self):
        return int(NSEC_PER_SEC * self.time)

    @time_nsec.setter
    def time_nsec(self, nanoseconds):
        self.time = nanoseconds * SEC_PER_NSEC

    @property
    def polynomials(self):
        return tuple(self._polynomials)

    def copy(self):
        result = Segment(self._n, self._d)
        result._polynomials = [p.copy() for p in self._polynomials]
        result.time = self.time
        return result

    def __eq__(self, other):
        if not isinstance(other, Segment):
            return NotImplemented
        return (
            self._d == other._d
            and self.time == other.time
            and all(a == b for a, b in zip(self._polynomials, other._polynomials))
        )

    def _check_index(self, index):
        if not 0 <= index < self._d:
            raise IndexError(f"dimension {index} out of range [0..{self._d - 1}]")

    def __getitem__(self, index):
        self._check_index(index)
        return self._polynomials[index]

    def __setitem__(self, index, polynomial):
        self._check_index(index)
        if not isinstance(polynomial, Polynomial):
            polynomial = Polynomial(polynomial)
        self._polynomials[index] = polynomial

    def __str__(self):
        return format_segment(self, POSITION)

    def evaluate(self, t, derivative=POSITION):
        """Value of the given derivative in every dimension at time t."""
        return np.array([p.evaluate(t, derivative) for p in self._polynomials])

    def _check_dimensions(self, dimensions):
        dimensions = list(dimensions)
        if not dimensions:
            raise ValueError("no dimensions specified")
        for dim in dimensions:
            if not 0 <= dim < self._d:
                raise ValueError(
                    f"specified dimension {dim} is out of bounds [0..{self._d - 1}]"
                )
        return dimensions

    def compute_min_max_magnitude_candidate_times(
        self, derivative, t_start, t_end, dimensions
    ):
        """Candidate times for extrema of the magnitude over the given dimensions."""
        dimensions = self._check_dimensions(dimensions)
        if len(dimensions) == 1:
            return self._polynomials[dimensions[0]].compute_min_max_candidates(
                t_start, t_end, derivative
            )

        # The derivative of |f|^2 is 2 * sum(f_i * f_i'); products of
        # polynomials are convolutions of their coefficients.
        n_d = self._n - derivative
        n_dd = n_d - 1
        length = Polynomial.convolution_length(n_d, n_dd)
        convolved = np.zeros(max(length, 0))
        for dim in dimensions:
            polynomial = self._polynomials[dim]
            d = polynomial.coefficients(derivative)[:n_d]
            dd = polynomial.coefficients(derivative + 1)[: max(n_dd, 0)]
            convolved = convolved + Polynomial.convolve(d, dd)
        # The convolved polynomial already is the derivative of the magnitude.
        return Polynomial(convolved).compute_min_max_candidates(t_start, t_end, -1)

    def compute_min_max_magnitude_candidates(
        self, derivative, t_start, t_end, dimensions
    ):
        """Candidate extrema of the magnitude, evaluated at their times."""
        dimensions = list(dimensions)
        times = self.compute_min_max_magnitude_candidate_times(
            derivative, t_start, t_end, dimensions
        )
        return [
            Extremum(
                t,
                math.sqrt(
                    sum(
                        self._polynomials[dim].evaluate(t, derivative) ** 2
                        for dim in dimensions
                    )
                ),
                0,
            )
            for t in times
        ]

    def select_min_max_magnitude_from_candidates(
        self, derivative, t_start, t_end, dimensions, candidates
    ):
        """Return ``(minimum, maximum)`` among candidates inside [t_start, t_end]."""
        if t_start > t_end:
            raise ValueError("t_start is greater than t_end")
        minimum = Extremum(value=_MAX_FLOAT)
        maximum = Extremum(value=-_MAX_FLOAT)
        for candidate in candidates:
            if candidate.time < t_start or candidate.time > t_end:
                continue
            if maximum < candidate:
                maximum = dataclasses.replace(candidate)
            if candidate < minimum:
                minimum = dataclasses.replace(candidate)
        return minimum, maximum

    def with_single_dimension(self, dimension):
        """Return a one-dimensional segment holding the given dimension."""
        if not 0 <= dimension < self._d:
            raise ValueError(f"dimension {dimension} does not exist in the segment")
        result = Segment(self._n, 1)
        result._polynomials = [self._polynomials[dimension].copy()]
        result.time = self.time
        return result

    def with_appended_dimension(self, other):
        """Return a segment with the dimensions of other appended to these."""
        if self._n == 0 or self._d == 0:
            return other.copy()
        if other.N == 0 or other.D == 0:
            return self.copy()

        new_n = max(other.N, self._n)
        new_d = self._d + other.D

        current = self.copy()
        appended = other.copy()

        # Stretch the shorter segment to the longer duration.
        new_time = max(self.time, other.time)
        if self.time < new_time and new_time > 0.0:
            for polynomial in current._polynomials:
                polynomial.scale_in_time(self.time / new_time)
        elif other.time < new_time and new_time > 0.0:
            for polynomial in appended._polynomials:
                polynomial.scale_in_time(other.time / new_time)

        result = Segment(new_n, new_d)
        if self._n == other.N:
            result._polynomials = current._polynomials + appended._polynomials
        else:
            result._polynomials = [
                polynomial.with_appended_coefficients(new_n)
                for polynomial in self._polynomials + other._polynomials
            ]
        result.time = new_time
        return result

    def offset(self, offset):
        """Translate the first (up to three) dimensions by the offset vector."""
        offset = np.asarray(offset, dtype=float).reshape(-1)
        count = min(self._d, 3)
        if offset.size < count:
            raise ValueError("offset vector size smaller than segment dimension")
        for polynomial, value in zip(self._polynomials[:count], offset):
            polynomial.offset(value)


def _format_column(values):
    texts = [f"{v:g}" for v in values]
    width = max(map(len, texts), default=0)
    return "\n".join(text.rjust(width) for text in texts)


def format_segment(segment, derivative=POSITION):
    """Human-readable listing of a segment's coefficients for a derivative.

    Coefficients are listed with increasing powers.
    """
    if not 0 <= derivative < segment.N:
        raise ValueError(f"derivative {derivative} out of range [0..{segment.N - 1}]")
    lines = [
        f"t: {segment.time:g}",
        f" coefficients for {position_derivative_to_string(derivative)}: ",
    ]
    for index, polynomial in enumerate(segment.polynomials):
        lines.append(f"dim {index}: ")
        lines.append(_format_column(polynomial.coefficients(derivative)))
    return "\n".join(lines) + "\n"