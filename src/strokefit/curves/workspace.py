"""
Reusable working set for curve fitting.

A FitWorkspace holds the points being fit, the cumulative arc length at
each point and the current parameter estimate of each point of the segment
under fit. One workspace serves one fitting context at a time; callers that
fit concurrently must each bring their own.
"""

import numpy as np

from strokefit.geometry import as_point, distance


class FitWorkspace:
    """Point, arc length and parameterization buffers shared by the fitters."""
    
    def __init__(self):
        self.points = []
        self.arclen = []
        self.u = np.zeros(0, dtype=np.float64)
        self.squared_error = 0.0
    
    def __len__(self):
        return len(self.points)
    
    @property
    def is_empty(self):
        return not self.points and not self.arclen and self.u.size == 0
    
    @property
    def total_length(self):
        return self.arclen[-1] if self.arclen else 0.0
    
    def load(self, points, max_error):
        """Fill the workspace with a whole polyline and its arc lengths."""
        self.points.extend(as_point(p) for p in points)
        self.squared_error = max_error * max_error
        self.initialize_arc_lengths()
    
    def initialize_arc_lengths(self):
        """Build arclen from points. arclen[0] is 0, arclen[-1] the polyline length."""
        arclen = self.arclen
        arclen.clear()
        if not self.points:
            return
        arclen.append(0.0)
        total = 0.0
        prev = self.points[0]
        for p in self.points[1:]:
            total += distance(prev, p)
            arclen.append(total)
            prev = p
    
    def segment(self, first, last):
        """Points first..last (inclusive) as an (n, 2) array."""
        return np.asarray(self.points[first:last + 1], dtype=np.float64)
    
    def clear(self):
        """Drop all state so the workspace can serve the next fit."""
        self.points.clear()
        self.arclen.clear()
        self.u = np.zeros(0, dtype=np.float64)
        self.squared_error = 0.0
