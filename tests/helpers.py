"""Shared assertions for curve tests."""

import numpy as np

from strokefit.geometry import EPSILON, equals_or_close, normalize


def assert_c0(curves):
    """Every curve starts where the previous one ends."""
    for a, b in zip(curves[:-1], curves[1:]):
        assert equals_or_close(a.p3, b.p0), f"{a.p3} != {b.p0}"


def assert_c1(curves, tol=1e-6):
    """Tangent directions match at every join with a usable tangent."""
    for a, b in zip(curves[:-1], curves[1:]):
        out_dir = normalize(np.subtract(a.p3, a.p2))
        in_dir = normalize(np.subtract(b.p1, b.p0))
        if np.dot(out_dir, out_dir) < EPSILON or np.dot(in_dir, in_dir) < EPSILON:
            continue
        assert np.allclose(out_dir, in_dir, atol=tol), f"{out_dir} vs {in_dir}"


def dense_samples(curves, n=400):
    """Points sampled densely over every curve."""
    ts = np.linspace(0, 1, n)
    return np.vstack([c.sample(ts) for c in curves])


def max_distance_to_curves(points, curves):
    """Largest distance from any point to its nearest dense sample."""
    samples = dense_samples(curves)
    worst = 0.0
    for p in np.asarray(points, dtype=float):
        worst = max(worst, float(np.min(np.linalg.norm(samples - p, axis=1))))
    return worst
