"""
Single-segment cubic Bezier fitting.

Schneider-style least-squares fit ("An Algorithm for Automatically Fitting
Digitized Curves", Graphics Gems I) shared by the batch fitter and the
incremental builder. Every function here works on a FitWorkspace and a
[first, last] index range into its points; none of them keep state.
"""

import numpy as np

from strokefit.errors import FitInternalError
from strokefit.geometry import EPSILON, distance, length, length_squared, normalize
from strokefit.models import CubicBezier

MAX_ITERATIONS = 4       # Newton passes before giving up and splitting
END_TANGENT_N_PTS = 8    # max points an end tangent is based on
MID_TANGENT_N_PTS = 4    # max points on each side of a split tangent


def fit_single_curve(ws, first, last, tan_left, tan_right):
    """
    Try to fit one cubic Bezier to points first..last (inclusive).
    
    Overwrites ws.u. tan_left points from p0 into the curve, tan_right from
    p3 into the curve.
    
    Returns:
        (curve, split, success). On failure curve is the best attempt and
        split is the index of maximum error, kept strictly inside
        (first, last) so splitting always makes progress.
    """
    n_pts = last - first + 1
    if n_pts < 2:
        raise FitInternalError(f"Need at least 2 points to fit, got {n_pts}")
    
    if n_pts == 2:
        curve = wu_barsky_curve(ws.points[first], ws.points[last], tan_left, tan_right)
        return curve, 0, True
    
    # Start from chord-length parameterization
    arc_length_parameterize(ws, first, last)
    
    curve = None
    split = 0
    for i in range(MAX_ITERATIONS + 1):
        if i != 0:
            reparameterize(ws, first, last, curve)
        curve = generate_bezier(ws, first, last, tan_left, tan_right)
        error, split = find_max_squared_error(ws, first, last, curve)
        if error < ws.squared_error:
            return curve, split, True
    
    return curve, split, False


def wu_barsky_curve(p0, p3, tan_left, tan_right, alpha=None):
    """Place the inner control points a third of the chord along each tangent."""
    if alpha is None:
        alpha = distance(p0, p3) / 3
    p1 = p0 + tan_left * alpha
    p2 = p3 + tan_right * alpha
    return CubicBezier.from_points(p0, p1, p2, p3)


def arc_length_parameterize(ws, first, last):
    """Set ws.u to the normalized chord length of each point in first..last."""
    arclen = np.asarray(ws.arclen[first:last + 1], dtype=np.float64)
    span = arclen[-1] - arclen[0]
    if span <= 0:
        u = np.linspace(0.0, 1.0, len(arclen))
    else:
        u = (arclen - arclen[0]) / span
    u[0] = 0.0
    u[-1] = 1.0
    ws.u = u


def generate_bezier(ws, first, last, tan_left, tan_right):
    """
    Least-squares Bezier for the current parameterization.
    
    Solves the 2x2 system for the distances of p1 and p2 along the end
    tangents. Falls back to Wu/Barsky when the system is near singular or a
    distance comes out negative or tiny relative to the chord.
    """
    pts = ws.segment(first, last)
    p0 = pts[0]
    p3 = pts[-1]
    
    t = ws.u[1:]
    ti = 1.0 - t
    b0 = ti * ti * ti
    b1 = 3 * ti * ti * t
    b2 = 3 * ti * t * t
    b3 = t * t * t
    
    # Q(t) with p1 = p0 and p2 = p3
    s = np.outer(b0 + b1, p0) + np.outer(b2 + b3, p3)
    v = pts[1:] - s
    
    a0 = np.outer(b1, tan_left)
    a1 = np.outer(b2, tan_right)
    c00 = float(np.sum(a0 * a0))
    c01 = float(np.sum(a0 * a1))
    c11 = float(np.sum(a1 * a1))
    x0 = float(np.sum(a0 * v))
    x1 = float(np.sum(a1 * v))
    
    det_c0_c1 = c00 * c11 - c01 * c01
    lin_dist = distance(p0, p3)
    
    if abs(det_c0_c1) >= EPSILON:
        alpha_l = (x0 * c11 - x1 * c01) / det_c0_c1
        alpha_r = (c00 * x1 - c01 * x0) / det_c0_c1
        epsilon2 = EPSILON * lin_dist
        if alpha_l >= epsilon2 and alpha_r >= epsilon2:
            return CubicBezier.from_points(p0, p0 + tan_left * alpha_l, p3 + tan_right * alpha_r, p3)
    
    return wu_barsky_curve(p0, p3, tan_left, tan_right, alpha=lin_dist / 3)


def reparameterize(ws, first, last, curve):
    """One Newton-Raphson step towards each interior point's closest parameter."""
    if last - first < 2:
        return
    
    pts = ws.segment(first, last)[1:-1]
    t = ws.u[1:-1]
    
    q = curve.sample(t)
    q1 = curve.derivative(t)
    q2 = curve.second_derivative(t)
    
    diff = q - pts
    num = np.sum(diff * q1, axis=1)
    den = np.sum(q1 * q1, axis=1) + np.sum(diff * q2, axis=1)
    
    ok = np.abs(den) > EPSILON
    refined = t.copy()
    refined[ok] = t[ok] - num[ok] / den[ok]
    # Keep every point matched to the curve itself, not its extension
    ws.u[1:-1] = np.clip(refined, 0.0, 1.0)


def find_max_squared_error(ws, first, last, curve):
    """
    Maximum squared distance from a point to the curve at its parameter.
    
    This measures against the point's current parameter estimate, not the
    true closest point on the curve.
    
    Returns:
        (max_squared_error, split_index)
    """
    pts = ws.segment(first, last)
    n_pts = len(pts)
    
    fitted = curve.sample(ws.u[1:])
    d = np.sum((pts[1:] - fitted) ** 2, axis=1)
    
    i = int(np.argmax(d))
    max_error = float(d[i])
    s = i + 1 if max_error > 0 else n_pts // 2
    
    # Never split at an end
    split = first + s
    if split <= first:
        split = first + 1
    if split >= last:
        split = last - 1
    
    return max_error, split


def left_tangent(ws, last):
    """Tangent at the start of the polyline, from points up to index last."""
    pts = ws.points
    arclen = ws.arclen
    total_len = arclen[-1]
    p0 = pts[0]
    
    tan_left = normalize(pts[1] - p0)
    if total_len <= 0:
        return tan_left
    
    total = tan_left.copy()
    weight_total = 1.0
    last = min(END_TANGENT_N_PTS, last - 1)
    for i in range(2, last + 1):
        ti = 1 - (arclen[i] / total_len)
        weight = ti * ti * ti
        total += normalize(pts[i] - p0) * weight
        weight_total += weight
    
    # Chords going opposite ways can cancel out
    if length(total) > EPSILON:
        tan_left = normalize(total / weight_total)
    return tan_left


def right_tangent(ws, first):
    """Tangent at the end of the polyline, from points back to index first."""
    pts = ws.points
    arclen = ws.arclen
    n = len(pts)
    total_len = arclen[-1]
    p3 = pts[-1]
    
    tan_right = normalize(pts[n - 2] - p3)
    if total_len <= 0:
        return tan_right
    
    total = tan_right.copy()
    weight_total = 1.0
    first = max(n - (END_TANGENT_N_PTS + 1), first + 1)
    for i in range(n - 3, first - 1, -1):
        t = arclen[i] / total_len
        weight = t * t * t
        total += normalize(pts[i] - p3) * weight
        weight_total += weight
    
    if length(total) > EPSILON:
        tan_right = normalize(total / weight_total)
    return tan_right


def center_tangent(ws, first, last, split):
    """
    Tangent at a split point, pointing back towards first.
    
    The left sub-curve uses it as its end tangent and the right sub-curve
    uses its negation as its start tangent, which keeps the join C1.
    """
    if not first < split < last:
        raise FitInternalError(f"Split {split} not inside ({first}, {last})")
    
    pts = ws.points
    arclen = ws.arclen
    split_len = arclen[split]
    p_split = pts[split]
    
    # left side
    first_len = arclen[first]
    part_len = split_len - first_len
    total = np.zeros(2)
    weight_total = 0.0
    if part_len > 0:
        for i in range(max(first, split - MID_TANGENT_N_PTS), split):
            t = (arclen[i] - first_len) / part_len
            weight = t * t * t
            total += normalize(pts[i] - p_split) * weight
            weight_total += weight
    if length(total) > EPSILON and weight_total > EPSILON:
        tan_left = normalize(total / weight_total)
    else:
        tan_left = normalize(pts[split - 1] - p_split)
    
    # right side
    part_len = arclen[last] - split_len
    total = np.zeros(2)
    weight_total = 0.0
    if part_len > 0:
        for i in range(split + 1, min(last, split + MID_TANGENT_N_PTS) + 1):
            ti = 1 - ((arclen[i] - split_len) / part_len)
            weight = ti * ti * ti
            total += normalize(p_split - pts[i]) * weight
            weight_total += weight
    if length(total) > EPSILON and weight_total > EPSILON:
        tan_right = normalize(total / weight_total)
    else:
        tan_right = normalize(p_split - pts[split + 1])
    
    # Halves are weighted equally so neither sub-curve dominates
    total = tan_left + tan_right
    if length_squared(total) >= EPSILON:
        return normalize(total / 2)
    
    # Points reverse direction here: retry with the immediate neighbours,
    # then settle for one side
    tan_left = normalize(pts[split - 1] - p_split)
    tan_right = normalize(p_split - pts[split + 1])
    total = tan_left + tan_right
    if length_squared(total) < EPSILON:
        return tan_left
    return normalize(total / 2)
