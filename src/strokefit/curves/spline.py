"""
Arc-length parameterized spline over connected Bezier curves.

Each curve is sampled at a fixed number of parameter steps and the chord
lengths are accumulated into one flat table. sample(u) then maps a
fraction of the total length to a curve and local t with a binary search
and a linear interpolation, so moving u at a constant rate moves along
the spline at (nearly) constant speed.
"""

from bisect import bisect_right

import numpy as np

from strokefit.errors import ContinuityError, EmptySplineError, InvalidArgumentError
from strokefit.geometry import equals_or_close
from strokefit.models import SamplePosition

MIN_SAMPLES_PER_CURVE = 8
MAX_SAMPLES_PER_CURVE = 1024


class Spline:
    """
    Ordered, connected curves with a cumulative arc length table.

    Table entry curve_index * N + k holds the length from the start of the
    spline to t = (k + 1) / N on that curve, N being samples_per_curve.
    """

    def __init__(self, samples_per_curve):
        if not MIN_SAMPLES_PER_CURVE <= samples_per_curve <= MAX_SAMPLES_PER_CURVE:
            raise InvalidArgumentError(
                f"samples_per_curve must be between {MIN_SAMPLES_PER_CURVE} and "
                f"{MAX_SAMPLES_PER_CURVE}, got {samples_per_curve}"
            )
        self._samples_per_curve = int(samples_per_curve)
        self._curves = []
        self._arclen = []

    @classmethod
    def from_curves(cls, curves, samples_per_curve):
        """Build a spline by adding each curve in order."""
        if curves is None:
            raise InvalidArgumentError("curves must not be None")
        spline = cls(samples_per_curve)
        for curve in curves:
            spline.add(curve)
        return spline

    @property
    def samples_per_curve(self):
        return self._samples_per_curve

    @property
    def curves(self):
        """Read-only view of the curves."""
        return tuple(self._curves)

    @property
    def arc_lengths(self):
        """Copy of the cumulative arc length table."""
        return list(self._arclen)

    @property
    def length(self):
        """Total length of the spline, 0 when empty."""
        return self._arclen[-1] if self._arclen else 0.0

    def __len__(self):
        return len(self._curves)

    def add(self, curve):
        """
        Append a curve.

        Raises:
            ContinuityError: curve.p0 does not meet the last curve's p3
        """
        curves = self._curves
        if curves and not equals_or_close(curves[-1].p3, curve.p0):
            raise ContinuityError(
                f"The new curve at index {len(curves)} does not connect with the "
                f"previous curve at index {len(curves) - 1}"
            )
        curves.append(curve)
        self._arclen.extend([0.0] * self._samples_per_curve)
        self._update_arc_lengths(len(curves) - 1)

    def update(self, index, curve):
        """
        Replace the curve at index.

        The arc length table is recomputed for that curve and every curve
        after it, since lengths are cumulative.

        Raises:
            IndexError: index out of range
            ContinuityError: curve does not meet a neighbour
        """
        curves = self._curves
        if index < 0 or index >= len(curves):
            raise IndexError(f"Curve index {index} is out of range (there are {len(curves)} curves in the spline)")
        if index > 0 and not equals_or_close(curves[index - 1].p3, curve.p0):
            raise ContinuityError(
                f"The updated curve at index {index} does not connect with the previous curve at index {index - 1}"
            )
        if index < len(curves) - 1 and not equals_or_close(curves[index + 1].p0, curve.p3):
            raise ContinuityError(
                f"The updated curve at index {index} does not connect with the next curve at index {index + 1}"
            )
        curves[index] = curve
        for i in range(index, len(curves)):
            self._update_arc_lengths(i)

    def clear(self):
        self._curves.clear()
        self._arclen.clear()

    def sample(self, u):
        """Position at fraction u of the spline's length."""
        pos = self.sample_position(u)
        return self._curves[pos.index].sample(pos.time)

    def tangent(self, u):
        """Unit direction at fraction u of the spline's length."""
        pos = self.sample_position(u)
        return self._curves[pos.index].tangent(pos.time)

    def sample_position(self, u):
        """
        Curve index and t for fraction u of the total length.

        u below 0 clamps to the start and above 1 to the end.

        Raises:
            EmptySplineError: no curves have been added
        """
        if not self._curves:
            raise EmptySplineError("No curves have been added to the spline")
        if u < 0:
            return SamplePosition(index=0, time=0.0)
        if u > 1:
            return SamplePosition(index=len(self._curves) - 1, time=1.0)

        arclen = self._arclen
        n = self._samples_per_curve
        target = u * self.length

        # Largest table entry <= target
        index = bisect_right(arclen, target) - 1
        if index >= len(arclen) - 1:
            return SamplePosition(index=len(self._curves) - 1, time=1.0)

        if index < 0:
            # Before the first table entry, inside the first sample step
            part = target / arclen[0]
            return SamplePosition(index=0, time=part / n)

        lo = arclen[index]
        hi = arclen[index + 1]
        part = (target - lo) / (hi - lo)
        t = (((index + 1) % n) + part) / n
        return SamplePosition(index=(index + 1) // n, time=t)

    def _update_arc_lengths(self, curve_index):
        """Recompute the table entries of one curve. The slots must exist."""
        n = self._samples_per_curve
        curve = self._curves[curve_index]
        start = curve_index * n
        offset = self._arclen[start - 1] if curve_index > 0 else 0.0

        ts = np.arange(1, n + 1, dtype=np.float64) / n
        samples = np.vstack([curve.control_points()[:1], curve.sample(ts)])
        steps = np.linalg.norm(np.diff(samples, axis=0), axis=1)
        self._arclen[start:start + n] = (offset + np.cumsum(steps)).tolist()
