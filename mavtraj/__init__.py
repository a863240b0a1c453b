"""Piecewise polynomial trajectories: roots, extrema, scaling, sampling, storage and timing."""

__version__ = "0.1.0"

__all__ = [
    "derivatives",
    "vertex",
    "timing",
    "rpoly_steps",
    "rpoly",
    "polynomial",
    "segment",
    "trajectory",
    "sampling",
    "io",
]