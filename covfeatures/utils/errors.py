"""Exceptions raised during schema resolution and feature computation."""

from typing import Optional


class CovarianceFeaturesError(Exception):
    """Base class for all covfeatures errors."""


class ConfigurationError(CovarianceFeaturesError, ValueError):
    """Invalid options, or a point set missing the fields a run needs."""


class FatalError(CovarianceFeaturesError, RuntimeError):
    """Per-point failure that aborts the whole run."""

    def __init__(self, message: str, point_id: Optional[int] = None):
        if point_id is not None:
            message = f"{message} (point {point_id})"
        super().__init__(message)
        self.point_id = point_id


class DegenerateGeometryError(FatalError):
    """Dominant eigenvalue is zero; ratio features are undefined."""


class DecompositionError(FatalError):
    """Symmetric eigensolver failed, usually from non-finite coordinates."""
