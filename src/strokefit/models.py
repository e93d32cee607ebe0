"""
Pydantic data models for strokefit.

Curves and change reports are immutable values; content-based stroke IDs
keep outputs deterministic.
"""

import hashlib
from typing import ClassVar, List, Optional, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from strokefit.errors import InvalidArgumentError
from strokefit.geometry import normalize


def _pair(p):
    return (float(p[0]), float(p[1]))


class CubicBezier(BaseModel):
    """
    A single cubic Bezier curve segment.
    
    p0 and p3 are the endpoints and always lie on the fitted data; p1 and p2
    are the inner control points. Equality and hashing are exact over all
    four control points.
    """
    p0: Tuple[float, float]  # start point
    p1: Tuple[float, float]  # control point 1
    p2: Tuple[float, float]  # control point 2
    p3: Tuple[float, float]  # end point
    
    model_config = ConfigDict(frozen=True, extra="forbid")
    
    @classmethod
    def from_points(cls, p0, p1, p2, p3):
        """Build a curve from any four 2-vectors (arrays, lists or tuples)."""
        return cls(p0=_pair(p0), p1=_pair(p1), p2=_pair(p2), p3=_pair(p3))
    
    def control_points(self):
        """Control points as a (4, 2) array."""
        return np.array([self.p0, self.p1, self.p2, self.p3], dtype=np.float64)
    
    def sample(self, t):
        """
        Evaluate the curve at t.
        
        t may be a scalar (returns shape (2,)) or an array of k values
        (returns shape (k, 2)). t is not clamped to [0, 1].
        """
        t = np.asarray(t, dtype=np.float64)
        ti = 1.0 - t
        basis = np.stack([ti * ti * ti, 3 * ti * ti * t, 3 * ti * t * t, t * t * t], axis=-1)
        return basis @ self.control_points()
    
    def derivative(self, t):
        """First derivative at t. Accepts scalar or array t like sample()."""
        cp = self.control_points()
        d = np.diff(cp, axis=0) * 3  # control points of Q'
        t = np.asarray(t, dtype=np.float64)
        ti = 1.0 - t
        basis = np.stack([ti * ti, 2 * ti * t, t * t], axis=-1)
        return basis @ d
    
    def second_derivative(self, t):
        """Second derivative at t. Accepts scalar or array t like sample()."""
        cp = self.control_points()
        dd = np.diff(cp, n=2, axis=0) * 6  # control points of Q''
        t = np.asarray(t, dtype=np.float64)
        basis = np.stack([1.0 - t, t], axis=-1)
        return basis @ dd
    
    def tangent(self, t):
        """Unit direction of the curve at a scalar t (zero vector if degenerate)."""
        return normalize(self.derivative(float(t)))


class SamplePosition(BaseModel):
    """Curve index and local t resolved from a spline-wide parameter."""
    index: int = Field(..., ge=0)
    time: float
    
    model_config = ConfigDict(frozen=True)


class ChangeReport(BaseModel):
    """
    Changes made to a builder's curve list by adding a point.
    
    Curves before first_changed_index are untouched; every curve at or after
    it was replaced or is new. was_appended means the curve count grew.
    """
    changed: bool = False
    first_changed_index: Optional[int] = None
    was_appended: bool = False
    
    model_config = ConfigDict(frozen=True)
    
    NO_CHANGE: ClassVar["ChangeReport"]
    
    @classmethod
    def at(cls, first_changed_index, appended):
        """Report a change starting at first_changed_index."""
        if first_changed_index < 0:
            raise InvalidArgumentError(f"first_changed_index must be >= 0, got {first_changed_index}")
        return cls(changed=True, first_changed_index=first_changed_index, was_appended=appended)
    
    def merge(self, other):
        """Combine two consecutive reports into one covering both."""
        if not other.changed:
            return self
        if not self.changed:
            return other
        return ChangeReport.at(
            min(self.first_changed_index, other.first_changed_index),
            self.was_appended or other.was_appended,
        )


ChangeReport.NO_CHANGE = ChangeReport()


class FittedStroke(BaseModel):
    """Result of fitting one stroke."""
    stroke_id: str
    mode: str = "none"
    input_point_count: int = 0
    fitted_point_count: int = 0
    curves: List[CubicBezier] = Field(default_factory=list)
    length: float = 0.0
    bbox: List[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0, 0.0])
    
    model_config = ConfigDict(extra="forbid")


def generate_stroke_id(points, round_digits=2):
    """
    Generate deterministic stroke ID from point coordinates.
    
    Rounds coordinates to avoid floating point instability.
    """
    if len(points) == 0:
        return "stroke_empty"
    
    rounded = [[round(float(p[0]), round_digits), round(float(p[1]), round_digits)] for p in points]
    h = hashlib.sha256(str(rounded).encode()).hexdigest()[:12]
    return f"stroke_{h}"
