"""Configuration management for covariance feature extraction."""

from pathlib import Path
from typing import Dict, Optional, Union

import yaml

from .errors import ConfigurationError

# Numerical constants
SPHERE_VOLUME_FACTOR = 4.0 / 3.0
INDEX_DTYPE = "float32"

# Feature-set presets
PRESET_DIMENSIONALITY = "Dimensionality"
PRESET_ALL = "All"

DIMENSIONALITY_FEATURES = ("Linearity", "Planarity", "Scattering", "Verticality")
ALL_FEATURES = DIMENSIONALITY_FEATURES + (
    "Omnivariance",
    "Sum",
    "Eigenentropy",
    "Anisotropy",
    "SurfaceVariation",
    "DemantkeVerticality",
    "Density",
)

DEFAULT_CONFIG = {
    "knn": 10,
    "threads": 1,
    "feature_set": PRESET_DIMENSIONALITY,
    "stride": 1,
    "radius": 0.0,          # 0 disables radius search
    "min_k": 3,             # minimum neighbors in radius mode
    "features": [],         # overrides feature_set when non-empty
    "mode": "",             # "", "SQRT" or "NORM"
    "optimized": False,     # read OptimalKNN / OptimalRadius per point
    "verbose": False,
}

AUX_FIELDS_CONFIG = {
    "optimal_knn_field": "OptimalKNN",
    "optimal_radius_field": "OptimalRadius",
}

CONFIG_SECTION = "covariance_features"


def default_cfg() -> Dict:
    """Default configuration for covariance features."""
    config = DEFAULT_CONFIG.copy()
    config["features"] = list(DEFAULT_CONFIG["features"])
    config.update(AUX_FIELDS_CONFIG)
    return config


def merge_cfg(cfg: Optional[Dict] = None) -> Dict:
    """Overlay a user config on top of the defaults."""
    config = default_cfg()
    if cfg:
        config.update(cfg)
    return config


def load_config(config_path: Union[str, Path]) -> Dict:
    """Load configuration from a YAML file and merge it over the defaults.

    The options may sit at the top level of the document or under a
    ``covariance_features`` section.
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file must hold a mapping: {config_path}")

    section = raw.get(CONFIG_SECTION, raw)
    if not isinstance(section, dict):
        raise ConfigurationError(f"Section '{CONFIG_SECTION}' must be a mapping")

    return merge_cfg(section)
