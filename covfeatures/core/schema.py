"""
Feature schema resolution.

Turns a config dict into an immutable FeatureSchema once per run: which
features to compute, how to transform eigenvalues, and how neighborhoods are
gathered. Output fields are registered on the point set here, before any
worker starts.
"""

import enum
import warnings
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from ..utils.config import (
    ALL_FEATURES,
    DIMENSIONALITY_FEATURES,
    PRESET_ALL,
    PRESET_DIMENSIONALITY,
    merge_cfg,
)
from ..utils.errors import ConfigurationError
from .pointset import PointSet


class Feature(enum.Flag):
    NONE = 0
    LINEARITY = enum.auto()
    PLANARITY = enum.auto()
    SCATTERING = enum.auto()
    VERTICALITY = enum.auto()
    OMNIVARIANCE = enum.auto()
    SUM = enum.auto()
    EIGENENTROPY = enum.auto()
    ANISOTROPY = enum.auto()
    SURFACE_VARIATION = enum.auto()
    DEMANTKE_VERTICALITY = enum.auto()
    DENSITY = enum.auto()


FEATURE_NAMES = {
    Feature.LINEARITY: "Linearity",
    Feature.PLANARITY: "Planarity",
    Feature.SCATTERING: "Scattering",
    Feature.VERTICALITY: "Verticality",
    Feature.OMNIVARIANCE: "Omnivariance",
    Feature.SUM: "Sum",
    Feature.EIGENENTROPY: "Eigenentropy",
    Feature.ANISOTROPY: "Anisotropy",
    Feature.SURFACE_VARIATION: "SurfaceVariation",
    Feature.DEMANTKE_VERTICALITY: "DemantkeVerticality",
    Feature.DENSITY: "Density",
}
FEATURES_BY_NAME = {name: flag for flag, name in FEATURE_NAMES.items()}


class EigenMode(enum.Enum):
    RAW = "RAW"
    SQRT = "SQRT"
    NORM = "NORM"

    @classmethod
    def parse(cls, value) -> "EigenMode":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().upper()
        if key == "":
            return cls.RAW
        try:
            return cls(key)
        except ValueError:
            raise ConfigurationError(
                f"Unknown eigenvalue mode '{value}' (expected '', 'SQRT' or 'NORM')"
            ) from None


class NeighborMode(enum.Enum):
    KNN = "knn"
    RADIUS = "radius"
    ADAPTIVE = "adaptive"


@dataclass(frozen=True)
class FeatureSchema:
    """Resolved, read-only run configuration shared by all workers."""
    features: Feature
    mode: EigenMode
    neighbor_mode: NeighborMode
    field_names: Tuple[str, ...]
    knn: int = 10
    stride: int = 1
    radius: float = 0.0
    min_k: int = 3
    threads: int = 1
    optimal_knn_field: Optional[str] = None
    optimal_radius_field: Optional[str] = None
    notices: Tuple[str, ...] = ()
    verbose: bool = False

    @property
    def adaptive(self) -> bool:
        return self.neighbor_mode is NeighborMode.ADAPTIVE


def parse_feature_names(names) -> Tuple[Feature, Tuple[str, ...]]:
    """Map feature names onto flags, keeping first-seen order for registration."""
    flags = Feature.NONE
    ordered = []
    for name in names:
        flag = FEATURES_BY_NAME.get(name)
        if flag is None:
            raise ConfigurationError(
                f"Unknown feature '{name}'. Valid features: {', '.join(ALL_FEATURES)}"
            )
        if not flags & flag:
            flags |= flag
            ordered.append(name)
    return flags, tuple(ordered)


def _check_int(cfg: Dict, key: str, minimum: int) -> int:
    try:
        value = int(cfg[key])
    except (TypeError, ValueError):
        raise ConfigurationError(f"Option '{key}' must be an integer, got {cfg[key]!r}") from None
    if value < minimum:
        raise ConfigurationError(f"Option '{key}' must be >= {minimum}, got {value}")
    return value


def _select_features(cfg: Dict, notices: list) -> Tuple[Tuple[str, ...], EigenMode]:
    mode = EigenMode.parse(cfg.get("mode", ""))
    explicit = list(cfg.get("features") or [])
    feature_set = str(cfg.get("feature_set") or PRESET_DIMENSIONALITY)

    if explicit:
        notices.append(f"Feature list provided. Ignoring feature_set {feature_set}.")
        return tuple(explicit), mode

    if feature_set.lower() == PRESET_DIMENSIONALITY.lower():
        return DIMENSIONALITY_FEATURES, EigenMode.SQRT
    if feature_set.lower() == PRESET_ALL.lower():
        return ALL_FEATURES, mode

    raise ConfigurationError(
        f"Unknown feature_set '{feature_set}' (expected '{PRESET_DIMENSIONALITY}' or '{PRESET_ALL}')"
    )


def resolve_schema(cfg: Optional[Dict], point_set: PointSet) -> FeatureSchema:
    """
    Resolve options against the point set layout.

    Registers one float64 field per requested feature (re-using existing
    ones) and checks that adaptive mode has its auxiliary fields.
    Raises ConfigurationError before touching the point set if anything
    is invalid.
    """
    cfg = merge_cfg(cfg)
    notices = []

    names, mode = _select_features(cfg, notices)
    features, names = parse_feature_names(names)

    threads = _check_int(cfg, "threads", 1)
    knn = _check_int(cfg, "knn", 1)
    stride = _check_int(cfg, "stride", 1)
    min_k = _check_int(cfg, "min_k", 0)
    radius = float(cfg.get("radius") or 0.0)
    if not radius >= 0.0:
        raise ConfigurationError(f"Option 'radius' must be >= 0, got {radius}")

    kopt_field = ropt_field = None
    if bool(cfg.get("optimized", False)):
        neighbor_mode = NeighborMode.ADAPTIVE
        kopt_field = cfg["optimal_knn_field"]
        ropt_field = cfg["optimal_radius_field"]
        for dim in (kopt_field, ropt_field):
            if not point_set.has_field(dim):
                raise ConfigurationError(f'No dimension "{dim}".')
    elif radius > 0.0:
        neighbor_mode = NeighborMode.RADIUS
    else:
        neighbor_mode = NeighborMode.KNN

    if features & Feature.DENSITY and neighbor_mode is not NeighborMode.ADAPTIVE:
        warnings.warn("Density is only computed with optimized=True; field will stay unset")

    verbose = bool(cfg.get("verbose", False))
    if verbose:
        for notice in notices:
            print(f"[Schema] {notice}")

    for name in names:
        point_set.register_field(name, np.float64)

    return FeatureSchema(
        features=features,
        mode=mode,
        neighbor_mode=neighbor_mode,
        field_names=names,
        knn=knn,
        stride=stride,
        radius=radius,
        min_k=min_k,
        threads=threads,
        optimal_knn_field=kopt_field,
        optimal_radius_field=ropt_field,
        notices=tuple(notices),
        verbose=verbose,
    )
