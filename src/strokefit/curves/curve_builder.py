"""
Incremental Bezier curve building for live strokes.

Points arrive one at a time (mouse, touch, pen). Raw input is resampled to
a fixed spacing, and each resampled point refits only the open (last)
curve. When the open curve can no longer meet the error tolerance it is
split: the part before the split is frozen and a new open curve starts at
the split point. Frozen curves never change again, so consumers only need
to look at curves from the reported index onwards.
"""

from strokefit.curves.curve_fit import fit_range
from strokefit.curves.segment_fit import (
    END_TANGENT_N_PTS,
    center_tangent,
    fit_single_curve,
    left_tangent,
    right_tangent,
    wu_barsky_curve,
)
from strokefit.curves.workspace import FitWorkspace
from strokefit.errors import InvalidArgumentError
from strokefit.geometry import EPSILON, as_point, distance, normalize
from strokefit.models import ChangeReport
from strokefit.tracer import get_tracer


class CurveBuilder:
    """
    Fits a growing point stream into C1-continuous cubic Bezier curves.

    On a split the part before the split point is fitted like a batch
    stroke and the part after it is split again until it fits, so a single
    point can freeze several curves and add more than one. Every curve
    stays within max_error of the resampled points it covers.

    Not thread safe; use from a single writer.
    """

    def __init__(self, point_distance, max_error, workspace=None):
        """
        Args:
            point_distance: spacing of the resampled points
            max_error: maximum distance from a point to the fitted curve
            workspace: empty FitWorkspace to own; a fresh one if omitted
        """
        if point_distance is None or point_distance <= EPSILON:
            raise InvalidArgumentError(f"point_distance must be greater than {EPSILON}, got {point_distance}")
        if max_error is None or max_error < EPSILON:
            raise InvalidArgumentError(f"max_error must be at least {EPSILON}, got {max_error}")

        self._ws = workspace if workspace is not None else FitWorkspace()
        if not self._ws.is_empty:
            raise InvalidArgumentError("workspace is already in use")

        self._point_distance = float(point_distance)
        self._max_error = float(max_error)
        self._ws.squared_error = self._max_error * self._max_error
        self._curves = []
        self._prev = None          # most recent resampled point
        self._tan_left = None      # start tangent of the open curve, fixed once a curve is frozen
        self._total_length = 0.0   # arc length of all resampled points
        self._first = 0            # index of the first point of the open curve

    @property
    def point_distance(self):
        return self._point_distance

    @property
    def max_error(self):
        return self._max_error

    @property
    def curves(self):
        """Current curves, oldest first."""
        return tuple(self._curves)

    @property
    def point_count(self):
        """Number of resampled points so far."""
        return len(self._ws)

    def __len__(self):
        return len(self._curves)

    def __iter__(self):
        return iter(tuple(self._curves))

    def add_point(self, p):
        """
        Add a raw input point.

        Moves shorter than point_distance from the last resampled point are
        ignored. Longer moves are cut into point_distance steps along the
        straight line to p, each fitted in turn.

        Returns:
            ChangeReport covering every curve that moved or was added
        """
        p = as_point(p)
        ws = self._ws

        if not ws.points:
            self._prev = p
            ws.points.append(p)
            ws.arclen.append(0.0)
            return ChangeReport.NO_CHANGE

        start = self._prev
        td = distance(start, p)
        md = self._point_distance
        if td <= md:
            return ChangeReport.NO_CHANGE

        direction = normalize(p - start)
        report = ChangeReport.NO_CHANGE
        for step in range(1, int(td // md) + 1):
            q = start + direction * (md * step)
            report = report.merge(self._add_resampled(q))
            self._prev = q
        return report

    def _add_resampled(self, q):
        ws = self._ws
        pts = ws.points
        last = len(pts)
        pts.append(q)
        self._total_length += self._point_distance
        ws.arclen.append(self._total_length)

        if last == 1:
            # Second point: straight curve between the two
            p0 = pts[0]
            tan_left = normalize(q - p0)
            self._tan_left = tan_left
            self._curves.append(wu_barsky_curve(p0, q, tan_left, -tan_left, alpha=self._point_distance / 3))
            return ChangeReport.at(0, True)

        last_curve = len(self._curves) - 1
        first = self._first

        # Only the first curve may still move its start tangent
        tan_left = left_tangent(ws, last) if last_curve == 0 else self._tan_left
        tan_right = right_tangent(ws, first)

        curve, split, ok = fit_single_curve(ws, first, last, tan_left, tan_right)
        if ok:
            self._curves[last_curve] = curve
            return ChangeReport.at(last_curve, False)

        tan_m1 = center_tangent(ws, first, last, split)
        if first == 0 and split < END_TANGENT_N_PTS:
            tan_left = left_tangent(ws, split)

        # Freeze everything before the split
        self._curves[last_curve:] = fit_range(ws, first, split, tan_left, tan_m1)
        first = split
        tan_left = -tan_m1

        # Open curve from the split to the newest point
        curve, split, ok = fit_single_curve(ws, first, last, tan_left, tan_right)
        while not ok:
            tan_m1 = center_tangent(ws, first, last, split)
            self._curves.extend(fit_range(ws, first, split, tan_left, tan_m1))
            first = split
            tan_left = -tan_m1
            curve, split, ok = fit_single_curve(ws, first, last, tan_left, tan_right)

        self._curves.append(curve)
        self._first = first
        self._tan_left = tan_left

        tracer = get_tracer()
        if tracer.is_enabled("DEBUG"):
            tracer.event(f"Split open curve, {len(self._curves)} curves", level="DEBUG", first=first)

        return ChangeReport.at(last_curve, True)

    def clear(self):
        """Reset to the empty state."""
        self._ws.clear()
        self._ws.squared_error = self._max_error * self._max_error
        self._curves.clear()
        self._prev = None
        self._tan_left = None
        self._total_length = 0.0
        self._first = 0
