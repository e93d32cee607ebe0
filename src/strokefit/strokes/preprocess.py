"""
Polyline preprocessing before curve fitting.

Linearization resamples a stroke to equally spaced points; Ramer-Douglas-
Peucker reduction drops points that add no shape within a tolerance. Both
are optional: the fitters accept any polyline.
"""

import numpy as np

from strokefit.errors import InvalidArgumentError
from strokefit.geometry import EPSILON, as_points, distance, equals_or_close, lerp
from strokefit.tracer import get_tracer, trace

PREPROCESS_MODES = ("none", "linear", "rdp")


@trace(label="preprocess_points")
def preprocess_points(points, config):
    """
    Apply the preprocessing selected by a PreprocessConfig.

    Args:
        points: polyline as [[x, y], ...] or an (n, 2) array
        config: PreprocessConfig

    Returns:
        (n, 2) array of points to fit
    """
    tracer = get_tracer()

    if points is None:
        raise InvalidArgumentError("points must not be None")

    if config.mode == "none":
        result = as_points(points)
    elif config.mode == "linear":
        result = linearize(points, config.point_distance)
    elif config.mode == "rdp":
        result = rdp_reduce(points, config.rdp_error)
    else:
        raise InvalidArgumentError(f"Unknown preprocess mode {config.mode!r}, expected one of {PREPROCESS_MODES}")

    tracer.event(f"Preprocessed ({config.mode}): {len(points)} -> {len(result)} points")
    return result


def linearize(points, spacing):
    """
    Resample a polyline to points spaced `spacing` apart along its path.

    The first point is kept, then a point is emitted every `spacing` units
    of travel. The last input point is appended unless it coincides with
    the last emitted point.

    Raises:
        InvalidArgumentError: points is None or spacing <= EPSILON
    """
    if points is None:
        raise InvalidArgumentError("points must not be None")
    if spacing is None or spacing <= EPSILON:
        raise InvalidArgumentError(f"spacing {spacing} must be greater than epsilon {EPSILON}")

    src = as_points(points)
    if len(src) == 0:
        return src

    prev = src[0]
    result = [prev]
    carried = 0.0  # distance travelled since the last emitted point
    for p0, p1 in zip(src[:-1], src[1:]):
        seg = distance(p0, p1)
        if carried + seg <= spacing:
            carried += seg
            continue

        # Walk along this segment in spacing steps
        along = spacing - carried
        while along <= seg:
            np_ = lerp(p0, p1, along / seg)
            if not equals_or_close(np_, prev):
                result.append(np_)
                prev = np_
            along += spacing
        carried = seg - (along - spacing)

    last = src[-1]
    if not equals_or_close(prev, last):
        result.append(last)

    return np.array(result)


def remove_duplicates(points):
    """
    Drop points within epsilon of the previously kept point.

    The same point may appear more than once, just not consecutively.
    Returns the input unchanged when nothing was dropped.
    """
    if len(points) < 2:
        return points

    keep = [0]
    prev = points[0]
    for i in range(1, len(points)):
        if not equals_or_close(prev, points[i]):
            keep.append(i)
            prev = points[i]

    if len(keep) == len(points):
        return points

    return as_points(points)[keep]


def rdp_reduce(points, error):
    """
    Ramer-Douglas-Peucker reduction.

    Removes duplicates first, then keeps only the points farther than
    `error` from the chord of the span they sit in. Endpoints are always
    kept.

    Args:
        points: polyline as [[x, y], ...] or an (n, 2) array
        error: maximum distance of a dropped point from the reduced line.
            Low values (2-4) suit mouse and touch input.

    Returns:
        (n, 2) array of kept points
    """
    if points is None:
        raise InvalidArgumentError("points must not be None")

    pts = as_points(remove_duplicates(points))
    if len(pts) < 3:
        return pts.copy()

    keep = {0, len(pts) - 1}
    stack = [(0, len(pts) - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue

        distances = _perpendicular_distances(pts[first + 1:last], pts[first], pts[last])
        max_idx = int(np.argmax(distances))
        if distances[max_idx] > error:
            split = first + 1 + max_idx
            keep.add(split)
            stack.append((split, last))
            stack.append((first, split))

    return pts[sorted(keep)]


def _perpendicular_distances(points, start, end):
    """
    Compute distances from each point to the segment from start to end.
    """
    line_vec = end - start
    line_len = np.linalg.norm(line_vec)

    if line_len == 0:
        # Start and end are the same point
        return np.linalg.norm(points - start, axis=1)

    line_unit = line_vec / line_len

    # Project onto line, clamped to the segment
    projections = np.clip((points - start) @ line_unit, 0, line_len)
    nearest = start + np.outer(projections, line_unit)

    return np.linalg.norm(points - nearest, axis=1)
