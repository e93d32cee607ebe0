"""
Configuration management for strokefit.

Loads YAML configuration with sensible defaults for preprocessing, fitting,
spline sampling and tracing.
"""

import os
from dataclasses import asdict, dataclass, field

import yaml


@dataclass
class PreprocessConfig:
    """Configuration for polyline preprocessing."""
    mode: str = "rdp"  # "none", "linear" or "rdp"
    point_distance: float = 8.0
    rdp_error: float = 2.0


@dataclass
class FitConfig:
    """Configuration for batch Bezier fitting."""
    max_error: float = 8.0


@dataclass
class SplineConfig:
    """Configuration for arc-length sampling."""
    samples_per_curve: int = 64


@dataclass
class BuilderConfig:
    """Configuration for incremental curve building."""
    point_distance: float = 8.0
    max_error: float = 8.0


@dataclass
class TracingConfig:
    """Configuration for runtime tracing."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass
class StrokeFitConfig:
    """Complete configuration."""
    preprocess: PreprocessConfig = field(default_factory=PreprocessConfig)
    fit: FitConfig = field(default_factory=FitConfig)
    spline: SplineConfig = field(default_factory=SplineConfig)
    builder: BuilderConfig = field(default_factory=BuilderConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)


SECTIONS = ("preprocess", "fit", "spline", "builder", "tracing")


def load_config(config_path=None):
    """
    Load configuration from YAML file.

    Falls back to defaults for any missing values.
    """
    config = StrokeFitConfig()

    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        config = _merge_config(config, yaml_data)

    return config


def _merge_config(config, yaml_data):
    """Merge YAML data into config dataclass. Unknown keys are ignored."""
    for section_name in SECTIONS:
        values = yaml_data.get(section_name)
        if not isinstance(values, dict):
            continue
        section = getattr(config, section_name)
        for key, value in values.items():
            if hasattr(section, key):
                setattr(section, key, value)

    return config


def save_default_config(path):
    """Save default configuration to YAML file for reference."""
    config = StrokeFitConfig()

    yaml_data = {name: asdict(getattr(config, name)) for name in SECTIONS}
    # file_path has no useful default
    yaml_data["tracing"].pop("file_path")

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
