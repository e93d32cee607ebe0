"""Tests for the tracer module."""

import json
import os

import numpy as np
import pytest

from strokefit.tracer import configure_tracer, get_tracer, summarize, trace


@pytest.fixture(autouse=True)
def tracer_off():
    """Leave the global tracer disabled after every test."""
    yield
    configure_tracer(enabled=False)


class TestSummarize:
    """Tests for object summarization."""
    
    def test_numpy_array_summary(self):
        """Test that numpy arrays are summarized with shape and type."""
        arr = np.zeros((120, 2), dtype=np.float64)
        summary = summarize(arr)
        
        assert "ndarray" in summary
        assert "120x2" in summary
        assert "float64" in summary
    
    def test_summary_capped_length(self):
        large_dict = {f"key_{i}": f"value_{i}" for i in range(100)}
        
        assert len(summarize(large_dict, max_len=20)) <= 20
    
    def test_list_summary(self):
        summary = summarize([1, 2, 3, 4, 5])
        
        assert "list" in summary
        assert "len=5" in summary
    
    def test_string_summary(self):
        summary = summarize("a" * 1000)
        
        assert "str" in summary
        assert "len=1000" in summary
        assert len(summary) <= 200
    
    def test_none_summary(self):
        assert summarize(None) == "None"
    
    def test_curve_summary(self):
        from strokefit.models import CubicBezier
        
        curve = CubicBezier.from_points((0, 0), (1, 2), (3, 2), (4, 0))
        summary = summarize(curve)
        
        assert "CubicBezier" in summary
        assert "4.00" in summary
    
    def test_pydantic_model_summary(self):
        from strokefit.models import FittedStroke
        
        summary = summarize(FittedStroke(stroke_id="s"))
        
        assert "FittedStroke" in summary


class TestTracerSpan:
    """Tests for tracer span functionality."""
    
    def test_span_nesting(self, capsys):
        """Spans indent their contents."""
        configure_tracer(enabled=True, level="INFO")
        tracer = get_tracer()
        
        with tracer.span("outer", module="test"):
            with tracer.span("inner", module="test"):
                tracer.event("inside")
        
        lines = capsys.readouterr().err.strip().split("\n")
        
        assert len(lines) == 5
        event_line = [line for line in lines if "inside" in line][0]
        assert "    test:inner" in event_line
    
    def test_tracer_disabled_no_output(self, capsys):
        configure_tracer(enabled=False)
        tracer = get_tracer()
        
        with tracer.span("test", module="test"):
            tracer.event("should not appear")
        
        assert capsys.readouterr().err == ""
    
    def test_level_filter(self, capsys):
        configure_tracer(enabled=True, level="INFO")
        tracer = get_tracer()
        
        tracer.event("hidden", level="DEBUG")
        tracer.event("shown", level="WARN")
        
        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err
        assert not tracer.is_enabled("DEBUG")
    
    def test_span_error_logged_and_raised(self, capsys):
        configure_tracer(enabled=True)
        tracer = get_tracer()
        
        with pytest.raises(ValueError):
            with tracer.span("boom", module="test"):
                raise ValueError("bad")
        
        err = capsys.readouterr().err
        assert "failed" in err
        assert "ValueError" in err
        
        # Depth is restored after the failure
        tracer.event("after")
        assert "test:boom" not in capsys.readouterr().err
    
    def test_file_and_json_output(self, temp_dir, capsys):
        path = os.path.join(temp_dir, "trace.log")
        configure_tracer(enabled=True, file_path=path, json_output=True)
        get_tracer().event("hello", curves=3)
        configure_tracer(enabled=False)
        
        with open(path, "r", encoding="utf-8") as f:
            lines = f.read().strip().split("\n")
        
        assert "hello" in lines[0]
        record = json.loads(lines[1])
        assert record["message"] == "hello curves=3"
        assert record["meta"] == {"curves": "3"}


class TestTraceDecorator:
    """Tests for the @trace decorator."""
    
    def test_decorator_runs_function(self):
        configure_tracer(enabled=False)
        
        @trace(label="test_func")
        def my_func(x):
            return x * 2
        
        assert my_func(5) == 10
    
    def test_decorator_with_exception(self):
        configure_tracer(enabled=True)
        
        @trace(label="failing_func")
        def failing_func():
            raise ValueError("test error")
        
        with pytest.raises(ValueError):
            failing_func()
    
    def test_decorator_logs_span(self, capsys):
        configure_tracer(enabled=True)
        
        @trace(label="traced", arg_names=["size"])
        def traced(size=0):
            return size
        
        assert traced(size=7) == 7
        err = capsys.readouterr().err
        assert "traced  start size=7" in err
        assert "end ok" in err
