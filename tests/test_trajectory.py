import numpy as np
import pytest

from mavtraj.derivatives import ACCELERATION, POSITION, VELOCITY
from mavtraj.polynomial import Polynomial
from mavtraj.segment import Segment
from mavtraj.trajectory import Trajectory


def make_segment(polys, time):
    n = max(len(p) for p in polys)
    segment = Segment(n, len(polys))
    for index, coefficients in enumerate(polys):
        padded = list(coefficients) + [0.0] * (n - len(coefficients))
        segment[index] = Polynomial(padded)
    segment.time = time
    return segment


@pytest.fixture
def line_1d():
    # Continuous path: t on [0, 1], then 1 + t on [0, 2].
    return Trajectory([make_segment([[0, 1]], 1.0), make_segment([[1, 1]], 2.0)])


@pytest.fixture
def curve_2d():
    return Trajectory(
        [
            make_segment([[0, 1, 0], [0, 0, 1]], 1.0),
            make_segment([[1, 1, 0], [1, 2, 1]], 1.5),
        ]
    )


def test_set_segments_rejects_empty():
    with pytest.raises(ValueError):
        Trajectory([])


def test_add_segments_rejects_mismatched_dimension(line_1d):
    with pytest.raises(ValueError):
        line_1d.add_segments([make_segment([[0, 1], [0, 1]], 1.0)])


def test_properties(line_1d):
    assert line_1d.D == 1
    assert line_1d.N == 2
    assert line_1d.K == 2
    assert line_1d.max_time == pytest.approx(sum(line_1d.segment_times()))
    assert line_1d.segment_times() == [1.0, 2.0]


def test_clear(line_1d):
    line_1d.clear()
    assert line_1d.empty
    assert line_1d.D == 0
    assert line_1d.max_time == 0.0


def test_evaluate_within_second_segment(curve_2d):
    first, second = curve_2d.segments
    t = first.time + 0.7
    np.testing.assert_allclose(curve_2d.evaluate(t), second.evaluate(0.7))
    np.testing.assert_allclose(
        curve_2d.evaluate(t, VELOCITY), second.evaluate(0.7, VELOCITY)
    )


def test_evaluate_at_end_uses_last_segment(curve_2d):
    last = curve_2d.segments[-1]
    np.testing.assert_allclose(curve_2d.evaluate(curve_2d.max_time), last.evaluate(last.time))


def test_evaluate_out_of_range_raises(line_1d):
    with pytest.raises(ValueError):
        line_1d.evaluate(line_1d.max_time + 0.5)


def test_evaluate_empty_raises():
    with pytest.raises(ValueError):
        Trajectory().evaluate(0.0)


def test_evaluate_range_matches_evaluate():
    trajectory = Trajectory([make_segment([[0, 1, 2], [3, 0, 1]], 2.0)])
    values, times = trajectory.evaluate_range(0.0, 2.0, 0.1, POSITION)
    assert len(values) == len(times) > 0
    assert all(t < 2.0 for t in times)
    for value, t in zip(values, times):
        np.testing.assert_allclose(value, trajectory.evaluate(t), atol=1e-9)
    assert np.diff(times) == pytest.approx([0.1] * (len(times) - 1))


def test_evaluate_range_spans_segments(line_1d):
    values, times = line_1d.evaluate_range(0.0, line_1d.max_time, 0.25, POSITION)
    for value, t in zip(values, times):
        np.testing.assert_allclose(value, line_1d.evaluate(t), atol=1e-9)
    assert times[-1] < line_1d.max_time


def test_evaluate_range_start_out_of_range(line_1d):
    with pytest.raises(ValueError):
        line_1d.evaluate_range(10.0, 11.0, 0.1, POSITION)


def test_single_and_appended_dimension_round_trip(curve_2d):
    x = curve_2d.with_single_dimension(0)
    y = curve_2d.with_single_dimension(1)
    assert x.D == 1 and y.D == 1
    assert x.max_time == pytest.approx(curve_2d.max_time)
    assert x.with_appended_dimension(y) == curve_2d


def test_single_dimension_out_of_range(curve_2d):
    with pytest.raises(ValueError):
        curve_2d.with_single_dimension(2)


def test_appended_dimension_with_empty(curve_2d):
    assert Trajectory().with_appended_dimension(curve_2d) == curve_2d
    assert curve_2d.with_appended_dimension(Trajectory()) == curve_2d


def test_appended_dimension_segment_count_mismatch(curve_2d, line_1d):
    short = Trajectory([curve_2d.segments[0]])
    with pytest.raises(ValueError):
        short.with_appended_dimension(line_1d)


def test_add_trajectories(line_1d):
    merged = line_1d.add_trajectories([line_1d, line_1d])
    assert merged.K == 3 * line_1d.K
    assert merged.max_time == pytest.approx(3 * line_1d.max_time)
    assert line_1d.K == 2


def test_add_trajectories_mismatch(line_1d, curve_2d):
    with pytest.raises(ValueError):
        line_1d.add_trajectories([curve_2d])


def test_offset(curve_2d):
    before = curve_2d.evaluate(1.8)
    curve_2d.offset([2.0, -1.0])
    np.testing.assert_allclose(curve_2d.evaluate(1.8), before + np.array([2.0, -1.0]))
    np.testing.assert_allclose(
        curve_2d.evaluate(1.8, VELOCITY),
        Trajectory(curve_2d.segments).evaluate(1.8, VELOCITY),
    )


def test_offset_too_short(curve_2d):
    with pytest.raises(ValueError):
        curve_2d.offset([1.0])


def test_vertices(curve_2d):
    vertices = curve_2d.vertices(ACCELERATION)
    assert len(vertices) == curve_2d.K + 1
    assert vertices[0].is_equal_tol(curve_2d.start_vertex(ACCELERATION), 1e-12)
    assert vertices[-1].is_equal_tol(curve_2d.goal_vertex(ACCELERATION), 1e-12)
    np.testing.assert_allclose(
        vertices[-1].get_constraint(POSITION), curve_2d.evaluate(curve_2d.max_time)
    )
    assert vertices[0].number_of_constraints() == ACCELERATION + 1


def test_vertex_at_time(curve_2d):
    vertex = curve_2d.vertex_at_time(0.4, VELOCITY)
    np.testing.assert_allclose(vertex.get_constraint(VELOCITY), curve_2d.evaluate(0.4, VELOCITY))
    assert not vertex.has_constraint(ACCELERATION)


def test_split_vertices():
    trajectory = Trajectory([make_segment([[0, 1], [0, 2], [1, 0], [0, 3]], 1.0)])
    positions, yaws = trajectory.split_vertices(ACCELERATION, VELOCITY)
    assert len(positions) == len(yaws) == trajectory.K + 1
    assert positions[0].D == 3
    assert yaws[0].D == 1
    assert positions[0].number_of_constraints() == ACCELERATION + 1
    assert yaws[0].number_of_constraints() == VELOCITY + 1
    np.testing.assert_allclose(
        yaws[-1].get_constraint(POSITION), trajectory.evaluate(1.0)[3:]
    )


def test_split_vertices_needs_four_dimensions(curve_2d):
    with pytest.raises(ValueError):
        curve_2d.split_vertices(ACCELERATION, VELOCITY)


def test_min_max_magnitude(curve_2d):
    minimum, maximum = curve_2d.compute_min_max_magnitude(POSITION, [0, 1])
    assert minimum.segment_idx == 0
    assert minimum.value == pytest.approx(0.0, abs=1e-9)
    assert maximum.segment_idx == 1
    assert maximum.time == pytest.approx(curve_2d.segments[1].time)
    assert maximum.value == pytest.approx(np.linalg.norm(curve_2d.evaluate(curve_2d.max_time)))


def test_min_max_magnitude_bounds_samples(curve_2d):
    _, maximum = curve_2d.compute_min_max_magnitude(VELOCITY, [0, 1])
    samples = [
        np.linalg.norm(curve_2d.evaluate(t, VELOCITY))
        for t in np.linspace(0.0, curve_2d.max_time, 200)
    ]
    assert max(samples) <= maximum.value + 1e-9
    assert max(samples) == pytest.approx(maximum.value, rel=1e-2)


def test_scale_segment_times(curve_2d):
    original = curve_2d.copy()
    curve_2d.scale_segment_times(2.0)
    assert curve_2d.max_time == pytest.approx(2.0 * original.max_time)
    for t in np.linspace(0.0, original.max_time, 7):
        np.testing.assert_allclose(curve_2d.evaluate(2.0 * t), original.evaluate(t), atol=1e-9)


def test_scale_segment_times_rejects_tiny(curve_2d):
    with pytest.raises(ValueError):
        curve_2d.scale_segment_times(1e-9)


def test_scale_to_meet_constraints():
    trajectory = Trajectory([make_segment([[0, 0, 1], [0, 1, 0]], 2.0)])
    end_before = trajectory.evaluate(trajectory.max_time)
    assert trajectory.scale_segment_times_to_meet_constraints(1.0, 1.0)
    v_max, a_max = trajectory.compute_max_velocity_and_acceleration()
    assert v_max <= 1.0 * (1 + 1e-3)
    assert a_max <= 1.0 * (1 + 1e-3)
    assert trajectory.max_time > 2.0
    np.testing.assert_allclose(trajectory.evaluate(trajectory.max_time), end_before, atol=1e-9)


def test_equality_and_copy(curve_2d):
    duplicate = curve_2d.copy()
    assert duplicate == curve_2d
    duplicate.scale_segment_times(3.0)
    assert duplicate != curve_2d


def test_segments_are_copied_on_set():
    segment = make_segment([[0, 1]], 1.0)
    trajectory = Trajectory([segment])
    trajectory.scale_segment_times(2.0)
    assert segment.time == 1.0
    assert trajectory.segments[0].time == 2.0