"""
Stroke fitting pipeline for strokefit.

Runs preprocessing, curve fitting and arc-length indexing for whole
strokes, either in one batch or by replaying the points through the
streaming builder.
"""

from strokefit.config import StrokeFitConfig
from strokefit.curves.curve_fit import fit_curves
from strokefit.curves.spline import Spline
from strokefit.curves.spline_builder import SplineBuilder
from strokefit.curves.workspace import FitWorkspace
from strokefit.errors import InvalidArgumentError
from strokefit.export.svg_path import compute_curves_bbox
from strokefit.geometry import as_points
from strokefit.models import FittedStroke, generate_stroke_id
from strokefit.strokes.preprocess import preprocess_points
from strokefit.tracer import get_tracer, trace


@trace(label="fit_stroke")
def fit_stroke(points, config=None, workspace=None):
    """
    Preprocess and batch fit a single stroke.

    Args:
        points: polyline as [[x, y], ...] or an (n, 2) array
        config: StrokeFitConfig (defaults if omitted)
        workspace: FitWorkspace to reuse across calls

    Returns:
        FittedStroke
    """
    if points is None:
        raise InvalidArgumentError("points must not be None")
    if config is None:
        config = StrokeFitConfig()

    raw = as_points(points)
    prepared = preprocess_points(raw, config.preprocess)
    curves = fit_curves(prepared, config.fit.max_error, workspace=workspace)

    return _make_result(raw, prepared, curves, config, config.preprocess.mode)


@trace(label="fit_strokes")
def fit_strokes(strokes, config=None):
    """
    Fit every stroke in a list, sharing one workspace.

    Returns:
        list of FittedStroke, one per input stroke
    """
    tracer = get_tracer()

    if config is None:
        config = StrokeFitConfig()

    workspace = FitWorkspace()
    results = []
    total_curves = 0

    for idx, points in enumerate(strokes):
        try:
            result = fit_stroke(points, config, workspace=workspace)
        except Exception as e:
            tracer.event(f"Stroke {idx} failed: {e}", level="ERROR")
            raise
        results.append(result)
        total_curves += len(result.curves)

    tracer.event(f"Fitted {total_curves} curves for {len(results)} strokes")

    return results


@trace(label="replay_stroke")
def replay_stroke(points, config=None):
    """
    Feed a stroke point by point through a SplineBuilder.

    This is the path a live drawing takes; the raw points are resampled by
    the builder itself, so preprocessing is not applied.

    Returns:
        FittedStroke
    """
    if points is None:
        raise InvalidArgumentError("points must not be None")
    if config is None:
        config = StrokeFitConfig()

    raw = as_points(points)
    builder = SplineBuilder(
        config.builder.point_distance,
        config.builder.max_error,
        config.spline.samples_per_curve,
    )
    changes = 0
    for p in raw:
        if builder.add(p):
            changes += 1

    get_tracer().event(f"Replayed {len(raw)} points, {changes} spline updates, {len(builder.curves)} curves")

    result = _make_result(raw, raw, builder.curves, config, "stream")
    result.fitted_point_count = builder.builder.point_count
    return result


def _make_result(raw, prepared, curves, config, mode):
    curves = list(curves)
    total_length = 0.0
    if curves:
        total_length = Spline.from_curves(curves, config.spline.samples_per_curve).length

    return FittedStroke(
        stroke_id=generate_stroke_id(raw),
        mode=mode,
        input_point_count=len(raw),
        fitted_point_count=len(prepared),
        curves=curves,
        length=total_length,
        bbox=compute_curves_bbox(curves),
    )
