"""
Eigenvalue-based shape descriptors.

Implements the local descriptors of Guinard & Landrieu (2017), "Weakly
supervised segmentation-aided classification of urban scenes from 3D LiDAR
point clouds", with the square-root eigenvalue option of Gressin et al.
(2012) and the verticality of Demantke et al. (2011).
"""

import math
from typing import Iterator, Optional, Sequence, Tuple

from ..utils.config import SPHERE_VOLUME_FACTOR
from ..utils.errors import DegenerateGeometryError
from .schema import EigenMode, Feature


def transform_eigenvalues(values: Sequence[float], mode: EigenMode) -> Tuple[float, float, float]:
    """Apply the run's eigenvalue transform to descending, non-negative values."""
    l0, l1, l2 = (float(v) for v in values)
    if mode is EigenMode.SQRT:
        return math.sqrt(l0), math.sqrt(l1), math.sqrt(l2)
    if mode is EigenMode.NORM:
        total = l0 + l1 + l2
        return l0 / total, l1 / total, l2 / total
    return l0, l1, l2


def check_dominant(values: Sequence[float], point_id: Optional[int] = None) -> None:
    """Raise when the largest eigenvalue is zero."""
    if values[0] == 0:
        raise DegenerateGeometryError(
            "Eigenvalues are all 0. Can't compute local features.", point_id
        )


def verticality(lambdas: Sequence[float], vectors) -> float:
    """z share of the eigenvalue-weighted sum of absolute eigenvectors."""
    unary = [
        sum(lambdas[j] * abs(float(vectors[i][j])) for j in range(3))
        for i in range(3)
    ]
    norm = math.sqrt(sum(u * u for u in unary))
    return unary[2] / norm


def eigenentropy(lambdas: Sequence[float]) -> float:
    # log is undefined at zero; NaN is left for the caller
    if any(v <= 0 for v in lambdas):
        return math.nan
    return -sum(v * math.log(v) for v in lambdas)


def density(kopt: float, ropt: float) -> float:
    """Neighbor count over the volume of the optimal sphere."""
    return (float(kopt) + 1.0) / (SPHERE_VOLUME_FACTOR * math.pi * float(ropt) ** 3)


def derive_features(
    lambdas: Sequence[float],
    vectors,
    features: Feature,
    kopt: Optional[float] = None,
    ropt: Optional[float] = None,
) -> Iterator[Tuple[Feature, float]]:
    """
    Yield (feature, value) for each requested feature.

    Args:
        lambdas: transformed eigenvalues, descending, lambdas[0] > 0
        vectors: 3x3 eigenvectors, column j paired with lambdas[j]
        features: requested feature flags
        kopt, ropt: per-point optimal neighbor count and radius; Density is
            only produced when both are given
    """
    l0, l1, l2 = lambdas
    total = l0 + l1 + l2

    if features & Feature.LINEARITY:
        yield Feature.LINEARITY, (l0 - l1) / l0
    if features & Feature.PLANARITY:
        yield Feature.PLANARITY, (l1 - l2) / l0
    if features & Feature.SCATTERING:
        yield Feature.SCATTERING, l2 / l0
    if features & Feature.VERTICALITY:
        yield Feature.VERTICALITY, verticality(lambdas, vectors)
    if features & Feature.OMNIVARIANCE:
        yield Feature.OMNIVARIANCE, (l0 * l1 * l2) ** (1.0 / 3.0)
    if features & Feature.SUM:
        yield Feature.SUM, total
    if features & Feature.EIGENENTROPY:
        yield Feature.EIGENENTROPY, eigenentropy(lambdas)
    if features & Feature.ANISOTROPY:
        yield Feature.ANISOTROPY, (l0 - l2) / l0
    if features & Feature.SURFACE_VARIATION:
        yield Feature.SURFACE_VARIATION, l2 / total
    if features & Feature.DEMANTKE_VERTICALITY:
        yield Feature.DEMANTKE_VERTICALITY, 1.0 - abs(float(vectors[2][2]))
    if features & Feature.DENSITY and kopt is not None and ropt is not None:
        yield Feature.DENSITY, density(kopt, ropt)
