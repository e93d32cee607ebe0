"""Pytest fixtures for strokefit tests."""

import os
import tempfile

import numpy as np
import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def quarter_circle():
    """Evenly spaced points on a quarter circle of radius 100."""
    t = np.linspace(0, np.pi / 2, 40)
    return np.column_stack([100 * np.cos(t), 100 * np.sin(t)])


@pytest.fixture
def sine_stroke():
    """A wavy stroke, like a quick pen squiggle."""
    x = np.linspace(0, 400, 200)
    return np.column_stack([x, 40 * np.sin(x / 30)])


@pytest.fixture
def straight_line():
    """50 evenly spaced collinear points."""
    return [[i * 2.0, i * 1.0] for i in range(50)]


@pytest.fixture
def l_shape():
    """Three points forming an L."""
    return [[0, 0], [10, 0], [10, 10]]


@pytest.fixture
def default_config():
    """Create default configuration."""
    from strokefit.config import StrokeFitConfig
    return StrokeFitConfig()


@pytest.fixture
def points_file(temp_dir, sine_stroke):
    """A JSON points file holding one stroke."""
    import json
    path = os.path.join(temp_dir, "points.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(sine_stroke.tolist(), f)
    return path
