"""
2D vector helpers for strokefit.

Points and directions are numpy float64 arrays of shape (2,). numpy supplies
the arithmetic; this module names the few operations the fitting code leans
on and fixes the epsilon used to treat near-duplicate points as identical.
"""

import math

import numpy as np

# Below this, floating point results are not trusted
EPSILON = 1.2e-12


def vec(x, y):
    """Create a 2D vector."""
    return np.array([x, y], dtype=np.float64)


def as_point(p):
    """Coerce an (x, y) pair to a 2D vector."""
    arr = np.asarray(p, dtype=np.float64)
    if arr.shape != (2,):
        raise ValueError(f"Expected a 2D point, got shape {arr.shape}")
    return arr


def as_points(points):
    """
    Coerce a polyline to an (n, 2) float array.
    
    Accepts lists of [x, y] pairs, tuples, or numpy arrays. An empty input
    yields an array of shape (0, 2).
    """
    arr = np.asarray(points, dtype=np.float64)
    if arr.size == 0:
        return np.zeros((0, 2), dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError(f"Expected points of shape (n, 2), got {arr.shape}")
    return arr


def dot(a, b):
    return float(a[0] * b[0] + a[1] * b[1])


def length_squared(v):
    return float(v[0] * v[0] + v[1] * v[1])


def length(v):
    return math.sqrt(length_squared(v))


def distance_squared(a, b):
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return float(dx * dx + dy * dy)


def distance(a, b):
    return math.sqrt(distance_squared(a, b))


def normalize(v):
    """
    Scale a vector to unit length.
    
    Returns the zero vector when the length is below EPSILON, so callers
    that need a direction must check the result.
    """
    n = length(v)
    if n < EPSILON:
        return np.zeros(2, dtype=np.float64)
    return np.asarray(v, dtype=np.float64) / n


def lerp(a, b, amount):
    """Linear interpolation from a (amount=0) to b (amount=1)."""
    return a + (b - a) * amount


def equals_or_close(a, b):
    """True if two points are equal within EPSILON (squared distance)."""
    return distance_squared(a, b) < EPSILON
