"""
Common utilities, configuration and errors.
"""

# ============================================================================
# Configuration
# ============================================================================
from .config import (
    # Main config functions
    default_cfg,
    merge_cfg,
    load_config,

    # Constants
    SPHERE_VOLUME_FACTOR,
    INDEX_DTYPE,
    PRESET_DIMENSIONALITY,
    PRESET_ALL,
    DIMENSIONALITY_FEATURES,
    ALL_FEATURES,
    CONFIG_SECTION,

    # Config dictionaries
    DEFAULT_CONFIG,
    AUX_FIELDS_CONFIG,
)

# ============================================================================
# Errors
# ============================================================================
from .errors import (
    CovarianceFeaturesError,
    ConfigurationError,
    FatalError,
    DegenerateGeometryError,
    DecompositionError,
)

# ============================================================================
# Utilities
# ============================================================================
from .utils import (
    ensure_torch,
    as_coords,
)


__all__ = [
    # Configuration
    "default_cfg",
    "merge_cfg",
    "load_config",

    # Constants
    "SPHERE_VOLUME_FACTOR",
    "INDEX_DTYPE",
    "PRESET_DIMENSIONALITY",
    "PRESET_ALL",
    "DIMENSIONALITY_FEATURES",
    "ALL_FEATURES",
    "CONFIG_SECTION",

    # Config dictionaries
    "DEFAULT_CONFIG",
    "AUX_FIELDS_CONFIG",

    # Errors
    "CovarianceFeaturesError",
    "ConfigurationError",
    "FatalError",
    "DegenerateGeometryError",
    "DecompositionError",

    # Utilities - Conversion
    "ensure_torch",
    "as_coords",
]
