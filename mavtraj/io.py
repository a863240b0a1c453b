"""Reading and writing trajectories as YAML and sampled states as text."""

import math
from collections.abc import Mapping

import numpy as np
import yaml

from mavtraj.sampling import sample_whole_trajectory
from mavtraj.segment import Segment
from mavtraj.trajectory import Trajectory

SEGMENTS_KEY = "segments"
NUM_COEFFICIENTS_KEY = "N"
DIMENSION_KEY = "D"
SEGMENT_TIME_KEY = "time"
COEFFICIENTS_KEY = "coefficients"

_SEGMENT_KEYS = (NUM_COEFFICIENTS_KEY, DIMENSION_KEY, SEGMENT_TIME_KEY, COEFFICIENTS_KEY)
_SAMPLING_INTERVAL = 0.01
_STATE_DIMENSION = 3


class TrajectoryFormatError(ValueError):
    """Raised when serialized segments are malformed."""


def segment_to_dict(segment):
    """Plain-data form of a segment; the time is in nanoseconds."""
    return {
        NUM_COEFFICIENTS_KEY: segment.N,
        DIMENSION_KEY: segment.D,
        SEGMENT_TIME_KEY: segment.time_nsec,
        COEFFICIENTS_KEY: [
            [float(c) for c in polynomial.coefficients()]
            for polynomial in segment.polynomials
        ],
    }


def segments_to_dict(segments):
    return {SEGMENTS_KEY: [segment_to_dict(segment) for segment in segments]}


def trajectory_to_dict(trajectory):
    return segments_to_dict(trajectory.segments)


def coefficients_from_list(node):
    """Coefficient vector from a list of numbers."""
    if not isinstance(node, list):
        raise TrajectoryFormatError("coefficients must be a sequence")
    try:
        return np.array([float(value) for value in node])
    except (TypeError, ValueError) as error:
        raise TrajectoryFormatError(f"invalid coefficient: {error}") from None


def _require_keys(node):
    if not isinstance(node, Mapping):
        raise TrajectoryFormatError("a segment must be a mapping")
    for key in _SEGMENT_KEYS:
        if node.get(key) is None:
            raise TrajectoryFormatError(f"segment is missing '{key}'")
    if not isinstance(node[COEFFICIENTS_KEY], list):
        raise TrajectoryFormatError("segment coefficients must be a sequence")


def _header(node):
    try:
        return (
            int(node[NUM_COEFFICIENTS_KEY]),
            int(node[DIMENSION_KEY]),
            int(node[SEGMENT_TIME_KEY]),
        )
    except (TypeError, ValueError) as error:
        raise TrajectoryFormatError(f"invalid segment header: {error}") from None


def segment_from_dict(node):
    """Build a segment from its plain-data form."""
    _require_keys(node)
    n, d, time_ns = _header(node)
    segment = Segment(n, d)
    rows = node[COEFFICIENTS_KEY]
    for index in range(d):
        if index >= len(rows):
            raise TrajectoryFormatError(f"missing coefficients for dimension {index}")
        segment[index] = coefficients_from_list(rows[index])
    segment.time_nsec = time_ns
    return segment


def segments_from_list(node):
    if not isinstance(node, list):
        raise TrajectoryFormatError("segments must be a sequence")
    return [segment_from_dict(item) for item in node]


def trajectory_from_dict(node):
    """Build a trajectory from its plain-data form."""
    if not isinstance(node, Mapping):
        raise TrajectoryFormatError("a trajectory must be a mapping")
    segments = segments_from_list(node.get(SEGMENTS_KEY))
    if not segments:
        raise TrajectoryFormatError("a trajectory needs at least one segment")
    return Trajectory(segments)


def _yaml_float(value):
    value = float(value)
    if math.isnan(value):
        return ".nan"
    if math.isinf(value):
        return ".inf" if value > 0 else "-.inf"
    text = repr(value)
    if "e" in text and "." not in text:
        mantissa, exponent = text.split("e")
        text = f"{mantissa}.0e{exponent}"
    return text


def segments_to_file(filename, segments):
    """Write segments as YAML with one flow-style coefficient list per dimension."""
    segments = list(segments)
    lines = [f"{SEGMENTS_KEY}:" if segments else f"{SEGMENTS_KEY}: []"]
    for segment in segments:
        lines.append(f"  - {NUM_COEFFICIENTS_KEY}: {segment.N}")
        lines.append(f"    {DIMENSION_KEY}: {segment.D}")
        lines.append(f"    {SEGMENT_TIME_KEY}: {segment.time_nsec}  # [ns]")
        lines.append(f"    {COEFFICIENTS_KEY}:")
        for polynomial in segment.polynomials:
            values = ", ".join(_yaml_float(c) for c in polynomial.coefficients())
            lines.append(f"      - [{values}]")
    with open(filename, "w", encoding="utf-8") as stream:
        stream.write("\n".join(lines) + "\n")


def segments_from_file(filename):
    """Read segments written by segments_to_file, checking their sizes."""
    with open(filename, encoding="utf-8") as stream:
        document = yaml.safe_load(stream)

    if not isinstance(document, Mapping) or SEGMENTS_KEY not in document:
        raise TrajectoryFormatError("no segments element")
    items = document[SEGMENTS_KEY] or []
    if not isinstance(items, list):
        raise TrajectoryFormatError("segments must be a sequence")

    segments = []
    for item in items:
        _require_keys(item)
        n, d, time_ns = _header(item)
        segment = Segment(n, d)
        segment.time_nsec = time_ns
        rows = item[COEFFICIENTS_KEY]
        if len(rows) != d:
            raise TrajectoryFormatError("coefficients and dimensions do not coincide")
        for index, row in enumerate(rows):
            if not isinstance(row, list) or len(row) != n:
                raise TrajectoryFormatError("number of coefficients does not coincide")
            segment[index] = coefficients_from_list(row)
        segments.append(segment)
    return segments


def _format_matrix(matrix):
    texts = [["%g" % value for value in row] for row in matrix]
    if not texts:
        return ""
    widths = [max(len(row[col]) for row in texts) for col in range(len(texts[0]))]
    return "\n".join(
        " ".join(text.rjust(width) for text, width in zip(row, widths)) for row in texts
    )


def sampled_trajectory_states_to_file(filename, trajectory):
    """Sample a trajectory every 10 ms and write the states as a text matrix.

    Columns: time [ns], position, velocity, acceleration, jerk, snap,
    orientation (w, x, y, z), angular velocity, angular acceleration and,
    in the first K rows, the accumulated segment end times.
    """
    states = sample_whole_trajectory(trajectory, _SAMPLING_INTERVAL)
    dim = _STATE_DIMENSION
    output = np.zeros((len(states), 8 * dim + 3))
    for row, state in zip(output, states):
        row[0] = state.time_from_start_ns
        row[1 : 1 + dim] = state.position
        row[1 + dim : 1 + 2 * dim] = state.velocity
        row[1 + 2 * dim : 1 + 3 * dim] = state.acceleration
        row[1 + 3 * dim : 1 + 4 * dim] = state.jerk
        row[1 + 4 * dim : 1 + 5 * dim] = state.snap
        row[1 + 5 * dim : 2 + 6 * dim] = state.orientation
        row[2 + 6 * dim : 2 + 7 * dim] = state.angular_velocity
        row[2 + 7 * dim : 2 + 8 * dim] = state.angular_acceleration

    accumulated = 0.0
    for row, segment_time in zip(output, trajectory.segment_times()):
        accumulated += segment_time
        row[2 + 8 * dim] = accumulated

    with open(filename, "w", encoding="utf-8") as stream:
        stream.write(_format_matrix(output))