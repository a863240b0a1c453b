"""Polynomials with coefficients stored in increasing powers."""

import sys
from functools import lru_cache

import numpy as np

from mavtraj.rpoly import find_roots_jenkins_traub

_EPSILON = sys.float_info.epsilon
_MAX_FLOAT = sys.float_info.max


@lru_cache(maxsize=None)
def _base_table(n):
    """Read-only n x n table of derivative factors (falling factorials)."""
    table = np.zeros((n, n))
    if n > 0:
        table[0, :] = 1.0
        for row in range(1, n):
            table[row, row:] = np.arange(1, n - row + 1) * table[row - 1, row:]
    table.flags.writeable = False
    return table


def base_coefficients(n):
    """Return the n x n matrix whose row k holds the factors of the k-th derivative.

    Entry (k, i) is the factor that multiplies coefficient i when taking the
    k-th derivative of t**i; entries with i < k are zero.
    """
    if n < 0:
        raise ValueError("n must not be negative")
    return _base_table(int(n)).copy()


class Polynomial:
    """A polynomial c_0 + c_1*t + ... + c_{N-1}*t**(N-1)."""

    __hash__ = None

    def __init__(self, coefficients):
        self._coefficients = np.array(coefficients, dtype=float).reshape(-1)

    @classmethod
    def zeros(cls, n):
        """Return the zero polynomial with n coefficients."""
        if n < 0:
            raise ValueError("the number of coefficients must not be negative")
        return cls(np.zeros(int(n)))

    @property
    def N(self):
        """Number of coefficients."""
        return self._coefficients.size

    def copy(self):
        return Polynomial(self._coefficients)

    def __eq__(self, other):
        if not isinstance(other, Polynomial):
            return NotImplemented
        return np.array_equal(self._coefficients, other._coefficients)

    def __repr__(self):
        return f"Polynomial({self._coefficients.tolist()})"

    def coefficients(self, derivative=0):
        """Coefficients of the given derivative, padded with zeros to length N."""
        n = self.N
        if not 0 <= derivative <= n:
            raise ValueError(f"derivative {derivative} out of range [0..{n}]")
        if derivative == 0:
            return self._coefficients.copy()
        result = np.zeros(n)
        if derivative < n:
            factors = _base_table(n)[derivative, derivative:]
            result[: n - derivative] = self._coefficients[derivative:] * factors
        return result

    def evaluate(self, t, derivative=0):
        """Value of the given derivative at time t."""
        if derivative < 0:
            raise ValueError("derivative must not be negative")
        if derivative >= self.N:
            return 0.0
        result = 0.0
        for coefficient in reversed(self.coefficients(derivative)[: self.N - derivative]):
            result = result * t + coefficient
        return float(result)

    def roots(self, derivative=0):
        """Complex roots of the given derivative."""
        return find_roots_jenkins_traub(self.coefficients(derivative))

    @staticmethod
    def select_min_max_candidates_from_roots(t_start, t_end, roots):
        """Start, end and the real roots inside [t_start, t_end]."""
        if t_start > t_end:
            raise ValueError("t_start is greater than t_end")
        candidates = [float(t_start), float(t_end)]
        for root in np.asarray(roots, dtype=complex).reshape(-1):
            if abs(root.imag) > _EPSILON:
                continue
            if t_start <= root.real <= t_end:
                candidates.append(float(root.real))
        return candidates

    def compute_min_max_candidates(self, t_start, t_end, derivative):
        """Candidate times for the extrema of a derivative in [t_start, t_end]."""
        if self.N - derivative - 1 < 0:
            raise ValueError("N - derivative - 1 has to be at least 0")
        roots = self.roots(derivative + 1)
        return self.select_min_max_candidates_from_roots(t_start, t_end, roots)

    def select_min_max_from_roots(self, t_start, t_end, derivative, roots):
        """Extrema of a derivative, given the roots of its derivative.

        Returns ``((t_min, value_min), (t_max, value_max))``.
        """
        candidates = self.select_min_max_candidates_from_roots(t_start, t_end, roots)
        return self.select_min_max_from_candidates(candidates, derivative)

    def compute_min_max(self, t_start, t_end, derivative):
        """Extrema of a derivative in [t_start, t_end].

        Returns ``((t_min, value_min), (t_max, value_max))``.
        """
        candidates = self.compute_min_max_candidates(t_start, t_end, derivative)
        return self.select_min_max_from_candidates(candidates, derivative)

    def select_min_max_from_candidates(self, candidates, derivative):
        """Evaluate candidates and return ``((t_min, v_min), (t_max, v_max))``."""
        candidates = list(candidates)
        if not candidates:
            raise ValueError("cannot find extrema from an empty candidates list")
        minimum = (candidates[0], _MAX_FLOAT)
        maximum = (candidates[0], -_MAX_FLOAT)
        for t in candidates:
            value = self.evaluate(t, derivative)
            if value < minimum[1]:
                minimum = (t, value)
            if value > maximum[1]:
                maximum = (t, value)
        return minimum, maximum

    @staticmethod
    def convolution_length(data_size, kernel_size):
        return data_size + kernel_size - 1

    @staticmethod
    def convolve(data, kernel):
        """Full discrete convolution of two coefficient vectors."""
        data = np.asarray(data, dtype=float).reshape(-1)
        kernel = np.asarray(kernel, dtype=float).reshape(-1)
        if data.size == 0 or kernel.size == 0:
            length = Polynomial.convolution_length(data.size, kernel.size)
            return np.zeros(max(length, 0))
        return np.convolve(data, kernel)

    def with_appended_coefficients(self, new_n):
        """Return a copy padded with zero coefficients up to new_n."""
        if new_n < self.N:
            raise ValueError("the number of coefficients cannot be decreased")
        coefficients = np.zeros(int(new_n))
        coefficients[: self.N] = self._coefficients
        return Polynomial(coefficients)

    def scale_in_time(self, scaling_factor):
        """Replace p(t) by p(scaling_factor * t) in place."""
        self._coefficients *= float(scaling_factor) ** np.arange(self.N)

    def offset(self, offset):
        """Add a constant to the polynomial in place."""
        if self.N:
            self._coefficients[0] += offset