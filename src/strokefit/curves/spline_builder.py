"""
Streaming spline: a CurveBuilder feeding an arc-length Spline.

Each add() applies only the builder's reported changes to the spline, so
curves frozen by the builder are never revisited.
"""

from strokefit.curves.curve_builder import CurveBuilder
from strokefit.curves.spline import Spline


class SplineBuilder:
    """Builds a constant-speed spline from points as they come in."""

    def __init__(self, point_distance, max_error, samples_per_curve, workspace=None):
        self._builder = CurveBuilder(point_distance, max_error, workspace=workspace)
        self._spline = Spline(samples_per_curve)

    @property
    def builder(self):
        return self._builder

    @property
    def spline(self):
        return self._spline

    @property
    def curves(self):
        """Curves that make up the spline."""
        return self._spline.curves

    @property
    def length(self):
        return self._spline.length

    def add(self, p):
        """
        Add a data point.

        Returns:
            True if the spline changed
        """
        report = self._builder.add_point(p)
        if not report.changed:
            return False

        curves = self._builder.curves
        spline = self._spline
        first = report.first_changed_index

        if len(spline) == 0:
            # First curves ever
            for curve in curves:
                spline.add(curve)
        elif report.was_appended:
            # The open curve was frozen (possibly refit); the rest are new
            spline.update(len(spline) - 1, curves[first])
            for curve in curves[first + 1:]:
                spline.add(curve)
        else:
            # Open curve refit in place
            spline.update(len(spline) - 1, curves[-1])

        return True

    def sample(self, u):
        """Position at fraction u of the spline's length."""
        return self._spline.sample(u)

    def tangent(self, u):
        """Unit direction at fraction u of the spline's length."""
        return self._spline.tangent(u)

    def clear(self):
        self._builder.clear()
        self._spline.clear()
