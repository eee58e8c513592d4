"""Neighborhood covariance and symmetric eigendecomposition."""

import torch
from typing import Tuple

from ..utils.errors import DecompositionError
from ..utils.utils import ensure_torch


def compute_centroid(neighbors: torch.Tensor) -> torch.Tensor:
    """Mean of the neighbor coordinates."""
    return neighbors.mean(dim=0)


def compute_covariance(neighbors) -> torch.Tensor:
    """
    Sample covariance of a (K,3) neighborhood about its centroid.

    Normalized by K-1; a single point (or coincident points, bit-equal
    coordinates) gives the exact zero matrix.
    """
    neighbors = ensure_torch(neighbors)
    if neighbors.ndim != 2 or neighbors.shape[1] != 3 or neighbors.shape[0] < 1:
        raise ValueError(f"Expected (K,3) neighborhood with K>=1, got {tuple(neighbors.shape)}")

    # shift by a member point so coincident inputs cancel exactly
    shifted = neighbors - neighbors[0].unsqueeze(0)
    centered = shifted - compute_centroid(shifted).unsqueeze(0)
    cov = torch.einsum('ki,kj->ij', centered, centered)
    return cov / max(neighbors.shape[0] - 1, 1)


def decompose(cov) -> Tuple[torch.Tensor, torch.Tensor]:
    """
    Eigendecomposition of a symmetric 3x3 matrix.

    Returns:
        evals: (3,) descending, clamped at zero
        evecs: (3,3) with column i matching evals[i]
    """
    cov = ensure_torch(cov)
    if not bool(torch.isfinite(cov).all()):
        raise DecompositionError("Cannot perform eigen decomposition: non-finite covariance")

    try:
        evals, evecs = torch.linalg.eigh(cov)
    except torch.linalg.LinAlgError as e:
        raise DecompositionError(f"Cannot perform eigen decomposition: {e}") from e

    evals = torch.flip(evals, dims=(0,))
    evecs = torch.flip(evecs, dims=(1,))
    evals = torch.clamp(evals, min=0.0)
    return evals, evecs
