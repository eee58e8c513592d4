"""
Core feature extraction.

Includes:
- Point container with named scalar fields
- Feature schema resolution (presets, explicit lists, eigenvalue modes)
- Eigenvalue-based shape descriptors
- Per-point pipeline and two-phase driver
"""

# ============================================================================
# Point Set
# ============================================================================
from .pointset import (
    PointSet,
)

# ============================================================================
# Schema
# ============================================================================
from .schema import (
    Feature,
    EigenMode,
    NeighborMode,
    FeatureSchema,
    FEATURE_NAMES,
    FEATURES_BY_NAME,
    parse_feature_names,
    resolve_schema,
)

# ============================================================================
# Features
# ============================================================================
from .features import (
    transform_eigenvalues,
    check_dominant,
    verticality,
    eigenentropy,
    density,
    derive_features,
)

# ============================================================================
# Pipeline
# ============================================================================
from .pipeline import (
    read_optimal_knn,
    read_optimal_radius,
    gather_neighbors,
    process_point,
    CovarianceFeatures,
    compute_covariance_features,
)


__all__ = [
    # Point set
    "PointSet",

    # Schema
    "Feature",
    "EigenMode",
    "NeighborMode",
    "FeatureSchema",
    "FEATURE_NAMES",
    "FEATURES_BY_NAME",
    "parse_feature_names",
    "resolve_schema",

    # Features
    "transform_eigenvalues",
    "check_dominant",
    "verticality",
    "eigenentropy",
    "density",
    "derive_features",

    # Pipeline
    "read_optimal_knn",
    "read_optimal_radius",
    "gather_neighbors",
    "process_point",
    "CovarianceFeatures",
    "compute_covariance_features",
]
