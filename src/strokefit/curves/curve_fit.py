"""
Batch Bezier curve fitting.

Fits a whole polyline at once: try one curve over the full range and, when
it misses the error tolerance, split at the point of maximum error and fit
both halves. The result is a composite curve with C1 continuity at every
join.
"""

from strokefit.curves.segment_fit import (
    END_TANGENT_N_PTS,
    center_tangent,
    fit_single_curve,
    left_tangent,
    right_tangent,
)
from strokefit.curves.workspace import FitWorkspace
from strokefit.errors import InvalidArgumentError
from strokefit.geometry import EPSILON
from strokefit.tracer import get_tracer, trace


@trace(label="fit_curves")
def fit_curves(points, max_error, workspace=None):
    """
    Fit a sequence of connected cubic Bezier curves to a polyline.

    Args:
        points: polyline as [[x, y], ...] or an (n, 2) array
        max_error: maximum distance from a point to the fitted curve
        workspace: FitWorkspace to reuse; a fresh one is used if omitted.
            A workspace must not be shared by concurrent calls.

    Returns:
        list of CubicBezier, empty for fewer than 2 points

    Raises:
        InvalidArgumentError: max_error below epsilon or points is None
    """
    if max_error is None or max_error < EPSILON:
        raise InvalidArgumentError(f"max_error must be at least {EPSILON}, got {max_error}")
    if points is None:
        raise InvalidArgumentError("points must not be None")
    if len(points) < 2:
        return []

    ws = workspace if workspace is not None else FitWorkspace()
    if not ws.is_empty:
        raise InvalidArgumentError("workspace is already in use")

    try:
        ws.load(points, max_error)
        last = len(ws) - 1
        curves = fit_range(ws, 0, last, left_tangent(ws, last), right_tangent(ws, 0))
    finally:
        ws.clear()

    get_tracer().event(f"Fitted {len(curves)} curves to {len(points)} points", level="DEBUG")
    return curves


def fit_range(ws, first, last, tan_left, tan_right):
    """
    Fit points first..last, splitting until every piece is within tolerance.

    Uses an explicit stack instead of recursion so long strokes cannot hit
    the interpreter recursion limit. Pieces come off the stack left to right.
    """
    result = []
    n_points = len(ws)
    stack = [(first, last, tan_left, tan_right)]

    while stack:
        first, last, tan_left, tan_right = stack.pop()
        curve, split, ok = fit_single_curve(ws, first, last, tan_left, tan_right)
        if ok:
            result.append(curve)
            continue

        tan_m1 = center_tangent(ws, first, last, split)
        tan_m2 = -tan_m1

        # End tangents may be based on points beyond the new piece; refresh
        # them only when the split is close to the original end
        if first == 0 and split < END_TANGENT_N_PTS:
            tan_left = left_tangent(ws, split)
        if last == n_points - 1 and split > n_points - (END_TANGENT_N_PTS + 1):
            tan_right = right_tangent(ws, split)

        stack.append((split, last, tan_m2, tan_right))
        stack.append((first, split, tan_left, tan_m1))

    return result
