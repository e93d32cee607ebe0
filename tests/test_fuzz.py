"""Randomized strokes aimed at the fitters' degenerate cases."""

import numpy as np
import pytest

from helpers import assert_c0, assert_c1, max_distance_to_curves
from strokefit.curves.curve_builder import CurveBuilder
from strokefit.curves.curve_fit import fit_curves
from strokefit.curves.spline_builder import SplineBuilder
from strokefit.strokes.preprocess import remove_duplicates

SEEDS = list(range(12))


def random_walk(rng, n=150):
    steps = rng.normal(scale=3.0, size=(n, 2))
    return np.cumsum(steps, axis=0)


def near_collinear(rng, n=120):
    x = np.sort(rng.uniform(0, 300, size=n))
    return np.column_stack([x, 0.5 * x + rng.normal(scale=1e-7, size=n)])


def back_and_forth(rng, n=120):
    """Scribble along a line, reversing direction repeatedly."""
    x = 50 * np.sin(np.linspace(0, 6 * np.pi, n)) + rng.normal(scale=0.01, size=n)
    return np.column_stack([x, np.zeros(n)])


def with_duplicates(rng, n=100):
    pts = random_walk(rng, n)
    repeats = rng.integers(1, 4, size=n)
    return np.repeat(pts, repeats, axis=0)


GENERATORS = [random_walk, near_collinear, back_and_forth, with_duplicates]


def assert_finite(curves):
    for curve in curves:
        assert np.all(np.isfinite(curve.control_points()))


@pytest.mark.parametrize("make", GENERATORS)
@pytest.mark.parametrize("seed", SEEDS)
def test_batch_fit(make, seed):
    rng = np.random.default_rng(seed)
    points = remove_duplicates(make(rng))
    max_error = float(rng.choice([0.5, 2.0, 8.0]))
    
    curves = fit_curves(points, max_error)
    
    assert curves
    assert_finite(curves)
    assert_c0(curves)
    assert_c1(curves, tol=1e-4)
    assert np.allclose(curves[0].p0, points[0])
    assert np.allclose(curves[-1].p3, points[-1])
    assert max_distance_to_curves(points, curves) <= max_error * 1.1


@pytest.mark.parametrize("make", GENERATORS)
@pytest.mark.parametrize("seed", SEEDS)
def test_builder(make, seed):
    rng = np.random.default_rng(seed)
    points = make(rng)
    point_distance = float(rng.choice([1.0, 4.0]))
    max_error = float(rng.choice([0.5, 2.0]))
    
    builder = CurveBuilder(point_distance, max_error)
    before = builder.curves
    for p in points:
        report = builder.add_point(p)
        after = builder.curves
        if report.changed:
            assert after[:report.first_changed_index] == before[:report.first_changed_index]
        else:
            assert after == before
        before = after
    
    assert_finite(builder.curves)
    assert_c0(builder.curves)
    assert_c1(builder.curves, tol=1e-4)
    if builder.curves:
        distance = max_distance_to_curves(points, builder.curves)
        assert distance <= (max_error + point_distance) * 1.1


@pytest.mark.parametrize("seed", SEEDS[:4])
def test_spline_builder_matches_builder(seed):
    rng = np.random.default_rng(seed)
    sb = SplineBuilder(2.0, 1.0, 16)
    
    for p in back_and_forth(rng):
        sb.add(p)
        assert sb.spline.curves == sb.builder.curves
    
    for u in np.linspace(0, 1, 21):
        assert np.all(np.isfinite(sb.sample(u)))
