"""Derivative orders and their textual names."""

POSITION = 0
VELOCITY = 1
ACCELERATION = 2
JERK = 3
SNAP = 4

ORIENTATION = 0
ANGULAR_VELOCITY = 1
ANGULAR_ACCELERATION = 2

INVALID = -1

_POSITION_NAMES = ("position", "velocity", "acceleration", "jerk", "snap")
_ORIENTATION_NAMES = ("orientation", "angular_velocity", "angular_acceleration")


def position_derivative_to_string(derivative):
    """Return the name of a position derivative order, or "invalid"."""
    if POSITION <= derivative <= SNAP:
        return _POSITION_NAMES[derivative]
    return "invalid"


def position_derivative_to_int(name):
    """Return the order of a named position derivative, or INVALID."""
    try:
        return _POSITION_NAMES.index(name)
    except ValueError:
        return INVALID


def orientation_derivative_to_string(derivative):
    """Return the name of an orientation derivative order, or "invalid"."""
    if ORIENTATION <= derivative <= ANGULAR_ACCELERATION:
        return _ORIENTATION_NAMES[derivative]
    return "invalid"


def orientation_derivative_to_int(name):
    """Return the order of a named orientation derivative, or INVALID."""
    try:
        return _ORIENTATION_NAMES.index(name)
    except ValueError:
        return INVALID