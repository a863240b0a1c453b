# mavtraj

Piecewise polynomial trajectories for multirotors and other aerial vehicles.

A trajectory is a chain of segments. Each segment has a duration and one
polynomial per dimension (for example x, y, z and yaw). Polynomial
coefficients are stored in increasing powers:
`c0 + c1*t + ... + c[N-1]*t**(N-1)`.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `mavtraj.derivatives` – derivative order constants (`POSITION`,
  `VELOCITY`, `ACCELERATION`, `JERK`, `SNAP`, `ORIENTATION`,
  `ANGULAR_VELOCITY`, `ANGULAR_ACCELERATION`, `INVALID`) and conversion
  between orders and names (`position_derivative_to_string`,
  `position_derivative_to_int`, `orientation_derivative_to_string`,
  `orientation_derivative_to_int`).
- `mavtraj.polynomial` – `Polynomial`: coefficients and values of any
  derivative, complex roots, minimum and maximum on an interval
  (`compute_min_max`), time scaling (`scale_in_time`), constant offset,
  zero-padding (`with_appended_coefficients`) and coefficient convolution.
  `base_coefficients(n)` returns the table of derivative factors.
- `mavtraj.rpoly` – `find_roots_jenkins_traub` for coefficients in
  increasing powers and `real_polynomial_roots` for coefficients in
  decreasing powers (Jenkins–Traub three-stage method, degree up to 100).
- `mavtraj.rpoly_steps` – the individual steps used by the root finder
  (`solve_quadratic`, `quadratic_synthetic_division`, `calculate_scalars`,
  `next_k`, `new_estimate`).
- `mavtraj.segment` – `Segment` with `N` coefficients, `D` dimensions and a
  `time` in seconds (also `time_nsec`); evaluation, analytic extrema of the
  magnitude over chosen dimensions (returned as `Extremum`), splitting
  (`with_single_dimension`), appending dimensions
  (`with_appended_dimension`) and `offset`. `format_segment` renders a
  readable listing.
- `mavtraj.trajectory` – `Trajectory`: evaluation at a time and over a
  range (`evaluate_range` returns values and times), vertices at segment
  boundaries (`vertices`, `split_vertices` into position and yaw),
  magnitude extrema, `compute_max_velocity_and_acceleration`,
  `scale_segment_times` and `scale_segment_times_to_meet_constraints`,
  merging trajectories (`add_trajectories`) and appending dimensions.
- `mavtraj.vertex` – `Vertex`, a support point with one constraint vector
  per derivative order.
- `mavtraj.sampling` – `TrajectoryPoint` states with position, velocity,
  acceleration, jerk, snap, orientation quaternion `(w, x, y, z)` and angular
  rates. For 4-dimensional trajectories the fourth dimension is yaw; for
  6-dimensional ones the last three are a rotation vector. Sample with
  `sample_trajectory_at_time`, `sample_trajectory_in_range`,
  `sample_trajectory_start_duration`, `sample_whole_trajectory` and
  `sample_segment_at_time`.
- `mavtraj.io` – segments and trajectories to and from plain dictionaries,
  YAML files (`segments_to_file`, `segments_from_file`) and a text matrix of
  states sampled every 10 ms (`sampled_trajectory_states_to_file`).
- `mavtraj.timing` – `Timer` (usable as a context manager) recording into a
  `Timing` registry with totals, means, variance, min, max and a text
  `report()`; `default_timing()` returns the shared registry.

## Example

```python
from mavtraj.io import segments_from_file, segments_to_file
from mavtraj.polynomial import Polynomial
from mavtraj.segment import Segment
from mavtraj.trajectory import Trajectory

segment = Segment(3, 3)
segment[0] = Polynomial([0.0, 1.0, 0.0])
segment[1] = Polynomial([0.0, 0.0, 0.0])
segment[2] = Polynomial([0.0, 0.0, 1.0])
segment.time = 1.0

trajectory = Trajectory([segment])
print(trajectory.evaluate(0.5))      # position at t = 0.5 s
print(trajectory.evaluate(0.5, 1))   # velocity at t = 0.5 s

v_max, a_max = trajectory.compute_max_velocity_and_acceleration()
met = trajectory.scale_segment_times_to_meet_constraints(1.0, 1.0)

segments_to_file("trajectory.yaml", trajectory.segments)
restored = segments_from_file("trajectory.yaml")
```

## Timing

```python
from mavtraj.timing import Timer, default_timing

with Timer("solve"):
    ...

print(default_timing().report())
```

## Errors

Operations that cannot complete raise exceptions. Malformed serialized
segments raise `mavtraj.io.TrajectoryFormatError` (a `ValueError`). Times
outside a trajectory, invalid dimensions passed to extrema or splitting
functions, mismatched segment shapes and bad scaling factors raise
`ValueError`; indexing a segment outside its dimensions raises `IndexError`.

## What the package does not do

The package works with trajectories whose coefficients are already known.
It does not compute trajectories from vertices: there is no optimizer that
turns a list of `Vertex` constraints and segment times into segments, and no
estimation of segment times. It has no command-line tool.