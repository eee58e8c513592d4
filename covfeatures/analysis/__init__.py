"""
Neighborhood analysis.

Includes:
- Exact K-nearest / radius neighbor search (FAISS)
- Neighborhood covariance and symmetric eigendecomposition
"""

# ============================================================================
# KNN (FAISS)
# ============================================================================
from .knn import (
    KDIndex,
)

# ============================================================================
# PCA
# ============================================================================
from .pca import (
    compute_centroid,
    compute_covariance,
    decompose,
)


__all__ = [
    # KNN
    "KDIndex",

    # PCA
    "compute_centroid",
    "compute_covariance",
    "decompose",
]
