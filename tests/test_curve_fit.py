"""Tests for batch curve fitting."""

import numpy as np
import pytest

from helpers import assert_c0, assert_c1, max_distance_to_curves
from strokefit.curves.curve_fit import fit_curves
from strokefit.curves.workspace import FitWorkspace
from strokefit.errors import InvalidArgumentError


class TestFitCurves:
    """Tests for fit_curves."""
    
    def test_empty_and_single_point(self):
        assert fit_curves([], 1.0) == []
        assert fit_curves([[3, 4]], 1.0) == []
    
    def test_two_points_one_curve(self):
        curves = fit_curves([[0, 0], [9, 0]], 1.0)
        
        assert len(curves) == 1
        assert curves[0].p0 == (0.0, 0.0)
        assert curves[0].p3 == (9.0, 0.0)
    
    def test_l_shape(self, l_shape):
        """A sharp corner fits within tolerance and keeps its ends."""
        from strokefit.curves.spline import Spline
        
        curves = fit_curves(l_shape, 0.5)
        
        assert 1 <= len(curves) <= 2
        assert curves[0].p0 == (0.0, 0.0)
        assert curves[-1].p3 == (10.0, 10.0)
        assert_c0(curves)
        assert max_distance_to_curves(l_shape, curves) <= 0.5
        
        spline = Spline.from_curves(curves, 64)
        assert np.allclose(spline.sample(0), (0, 0))
        assert np.allclose(spline.sample(1), (10, 10))
    
    def test_straight_line_single_collinear_curve(self, straight_line):
        curves = fit_curves(straight_line, 0.5)
        
        assert len(curves) == 1
        cp = curves[0].control_points()
        direction = cp[3] - cp[0]
        for p in cp[1:3]:
            rel = p - cp[0]
            cross = direction[0] * rel[1] - direction[1] * rel[0]
            assert abs(cross) < 1e-6 * np.dot(direction, direction)
    
    def test_endpoints_preserved(self, sine_stroke):
        curves = fit_curves(sine_stroke, 2.0)
        
        assert np.allclose(curves[0].p0, sine_stroke[0])
        assert np.allclose(curves[-1].p3, sine_stroke[-1])
    
    @pytest.mark.parametrize("max_error", [0.5, 2.0, 8.0])
    def test_within_error_bound(self, sine_stroke, max_error):
        curves = fit_curves(sine_stroke, max_error)
        
        assert max_distance_to_curves(sine_stroke, curves) <= max_error * 1.1
    
    def test_continuity(self, sine_stroke, quarter_circle):
        for points in (sine_stroke, quarter_circle):
            curves = fit_curves(points, 0.5)
            assert_c0(curves)
            assert_c1(curves)
    
    def test_tighter_error_more_curves(self, sine_stroke):
        loose = fit_curves(sine_stroke, 8.0)
        tight = fit_curves(sine_stroke, 0.25)
        
        assert len(tight) >= len(loose)
        assert len(tight) > 1
    
    def test_deterministic(self, sine_stroke):
        first = fit_curves(sine_stroke, 1.0)
        second = fit_curves(sine_stroke, 1.0)
        
        assert first == second
    
    def test_accepts_lists_and_arrays(self, quarter_circle):
        from_array = fit_curves(quarter_circle, 1.0)
        from_list = fit_curves(quarter_circle.tolist(), 1.0)
        
        assert from_array == from_list


class TestFitCurvesArguments:
    """Tests for argument validation."""
    
    @pytest.mark.parametrize("max_error", [0.0, -1.0, 1e-13, None])
    def test_bad_error(self, straight_line, max_error):
        with pytest.raises(InvalidArgumentError):
            fit_curves(straight_line, max_error)
    
    def test_none_points(self):
        with pytest.raises(InvalidArgumentError):
            fit_curves(None, 1.0)
    
    def test_bad_error_checked_before_points(self):
        with pytest.raises(InvalidArgumentError, match="max_error"):
            fit_curves(None, 0.0)
    
    def test_invalid_argument_is_value_error(self):
        with pytest.raises(ValueError):
            fit_curves([[0, 0], [1, 1]], -1)


class TestWorkspaceReuse:
    """Tests for sharing a FitWorkspace between calls."""
    
    def test_workspace_cleared_after_fit(self, sine_stroke):
        ws = FitWorkspace()
        fit_curves(sine_stroke, 1.0, workspace=ws)
        
        assert ws.is_empty
    
    def test_reuse_gives_same_result(self, sine_stroke, quarter_circle):
        ws = FitWorkspace()
        fit_curves(quarter_circle, 1.0, workspace=ws)
        reused = fit_curves(sine_stroke, 1.0, workspace=ws)
        
        assert reused == fit_curves(sine_stroke, 1.0)
    
    def test_busy_workspace_rejected(self, sine_stroke):
        ws = FitWorkspace()
        ws.load([[0, 0], [1, 0]], 1.0)
        
        with pytest.raises(InvalidArgumentError):
            fit_curves(sine_stroke, 1.0, workspace=ws)
    
    def test_workspace_cleared_after_error(self, sine_stroke):
        """A fit that fails part way leaves the workspace ready for reuse."""
        ws = FitWorkspace()
        
        with pytest.raises(ValueError):
            fit_curves([[0, 0], [1, 1], [1, 2, 3]], 1.0, workspace=ws)
        
        assert ws.is_empty
        assert fit_curves(sine_stroke, 1.0, workspace=ws) == fit_curves(sine_stroke, 1.0)
        assert ws.is_empty
