"""Support points of a path with per-derivative constraints."""

import numpy as np

from mavtraj.derivatives import POSITION


def highest_derivative_from_n(n):
    """Highest derivative that can be optimized for n polynomial coefficients."""
    return int(n / 2) - 1


class Vertex:
    """A path support point holding constraints keyed by derivative order.

    Each constraint is a vector of length ``dimension``.
    """

    def __init__(self, dimension):
        if dimension < 0:
            raise ValueError("dimension must not be negative")
        self.dimension = int(dimension)
        self._constraints = {}

    @property
    def D(self):
        return self.dimension

    @property
    def constraints(self):
        """Constraints as (order, value) pairs in increasing order."""
        return [(k, self._constraints[k].copy()) for k in sorted(self._constraints)]

    def add_constraint(self, derivative_order, value):
        """Set the constraint for a derivative; a scalar fills every dimension."""
        if np.isscalar(value):
            vector = np.full(self.dimension, float(value))
        else:
            vector = np.asarray(value, dtype=float).reshape(-1).copy()
            if vector.size != self.dimension:
                raise ValueError(
                    f"constraint has size {vector.size}, vertex dimension is "
                    f"{self.dimension}"
                )
        self._constraints[int(derivative_order)] = vector

    def remove_constraint(self, derivative_order):
        """Remove a constraint; return whether it was set."""
        return self._constraints.pop(int(derivative_order), None) is not None

    def make_start_or_end(self, value, up_to_derivative):
        """Fix position to value and all derivatives up to the given one to zero."""
        self.add_constraint(POSITION, value)
        for order in range(POSITION + 1, up_to_derivative + 1):
            self.add_constraint(order, 0.0)

    def has_constraint(self, derivative_order):
        return int(derivative_order) in self._constraints

    def get_constraint(self, derivative_order):
        """Return a copy of the constraint value; KeyError if it is not set."""
        try:
            return self._constraints[int(derivative_order)].copy()
        except KeyError:
            raise KeyError(f"no constraint for derivative {derivative_order}") from None

    def number_of_constraints(self):
        return len(self._constraints)

    def is_equal_tol(self, other, tol):
        """Whether both vertices hold the same constraints up to tol."""
        if self.dimension != other.dimension:
            return False
        if self._constraints.keys() != other._constraints.keys():
            return False
        return all(
            np.max(np.abs(value - other._constraints[order]), initial=0.0) <= tol
            for order, value in self._constraints.items()
        )

    def get_subdimension(self, subdimensions, max_derivative_order):
        """Return a vertex restricted to the given dimensions and derivatives."""
        indices = list(subdimensions)
        for index in indices:
            if not 0 <= index < self.dimension:
                raise ValueError(
                    f"subdimension {index} out of range [0..{self.dimension - 1}]"
                )
        sub = Vertex(len(indices))
        for order, value in self._constraints.items():
            if order <= max_derivative_order:
                sub._constraints[order] = value[indices].copy()
        return sub

    def __iter__(self):
        return iter(self.constraints)

    def __repr__(self):
        parts = ", ".join(f"{k}: {v.tolist()}" for k, v in self.constraints)
        return f"Vertex(dimension={self.dimension}, constraints={{{parts}}})"