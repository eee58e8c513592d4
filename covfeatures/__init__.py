"""
covfeatures - Covariance-Based Local Features for Point Clouds

Per-point shape descriptors (linearity, planarity, scattering, verticality,
...) from the eigenstructure of each point's neighborhood covariance, for
feeding scene classification and segmentation.

Components:
    - Core: Point set, feature schema, feature derivation, pipeline
    - Analysis: FAISS neighbor search, covariance, eigendecomposition
    - Processing: Partitioned thread-parallel dispatch
    - Utils: Configuration, errors and helper functions

Example:
    >>> from covfeatures import PointSet, default_cfg, compute_covariance_features
    >>>
    >>> cfg = default_cfg()
    >>> cfg["knn"] = 16
    >>> cfg["threads"] = 4
    >>>
    >>> pts = PointSet(xyz)
    >>> compute_covariance_features(pts, cfg)
    >>> planarity = pts["Planarity"]
"""

__version__ = "1.0.0"

# ============================================================================
# Core
# ============================================================================
from .core import (
    # Point set
    PointSet,

    # Schema
    Feature,
    EigenMode,
    NeighborMode,
    FeatureSchema,
    FEATURE_NAMES,
    resolve_schema,

    # Features
    transform_eigenvalues,
    derive_features,

    # Pipeline
    process_point,
    CovarianceFeatures,
    compute_covariance_features,
)

# ============================================================================
# Analysis
# ============================================================================
from .analysis import (
    KDIndex,
    compute_covariance,
    decompose,
)

# ============================================================================
# Processing
# ============================================================================
from .processing import (
    partition_ranges,
    run_partitioned,
)

# ============================================================================
# Utils
# ============================================================================
from .utils import (
    # Configuration
    default_cfg,
    load_config,
    DEFAULT_CONFIG,
    DIMENSIONALITY_FEATURES,
    ALL_FEATURES,

    # Errors
    CovarianceFeaturesError,
    ConfigurationError,
    FatalError,
    DegenerateGeometryError,
    DecompositionError,
)


__all__ = [
    "__version__",

    # ========================================================================
    # Core
    # ========================================================================
    "PointSet",
    "Feature",
    "EigenMode",
    "NeighborMode",
    "FeatureSchema",
    "FEATURE_NAMES",
    "resolve_schema",
    "transform_eigenvalues",
    "derive_features",
    "process_point",
    "CovarianceFeatures",
    "compute_covariance_features",

    # ========================================================================
    # Analysis
    # ========================================================================
    "KDIndex",
    "compute_covariance",
    "decompose",

    # ========================================================================
    # Processing
    # ========================================================================
    "partition_ranges",
    "run_partitioned",

    # ========================================================================
    # Utils
    # ========================================================================
    "default_cfg",
    "load_config",
    "DEFAULT_CONFIG",
    "DIMENSIONALITY_FEATURES",
    "ALL_FEATURES",
    "CovarianceFeaturesError",
    "ConfigurationError",
    "FatalError",
    "DegenerateGeometryError",
    "DecompositionError",
]
