"""
pipeline.py - Covariance Features over a Point Set
==================================================

Per point:

    gather neighbors -> covariance -> eigendecomposition
        -> eigenvalue transform -> features -> write fields

Neighbors come from one of three modes fixed for the whole run:

- knn:      ``knn + 1`` nearest (the point finds itself), every ``stride``-th
- radius:   everything within ``radius``; fewer than ``min_k`` hits skips
            the point without writing anything
- adaptive: ``OptimalKNN`` nearest, read per point; ``OptimalRadius`` only
            feeds Density

A zero dominant eigenvalue or a failed decomposition aborts the run. Points
are independent, so the set is split into contiguous ranges and processed
one thread per range.
"""

import math
import time
from typing import Dict, Optional

import numpy as np

from ..analysis.knn import KDIndex
from ..analysis.pca import compute_covariance, decompose
from ..processing.dispatch import run_partitioned
from ..utils.errors import FatalError
from .features import check_dominant, derive_features, transform_eigenvalues
from .pointset import PointSet
from .schema import FEATURE_NAMES, Feature, FeatureSchema, NeighborMode, resolve_schema


def read_optimal_knn(point_set: PointSet, point_id: int, schema: FeatureSchema) -> int:
    """Per-point neighbor count from the OptimalKNN field."""
    value = float(point_set.get_field(schema.optimal_knn_field, point_id))
    if not math.isfinite(value) or value < 1:
        raise FatalError(f"Invalid {schema.optimal_knn_field} value {value}", point_id)
    return int(value)


def read_optimal_radius(point_set: PointSet, point_id: int, schema: FeatureSchema) -> float:
    """Per-point radius from the OptimalRadius field."""
    value = float(point_set.get_field(schema.optimal_radius_field, point_id))
    if not math.isfinite(value) or value <= 0:
        raise FatalError(f"Invalid {schema.optimal_radius_field} value {value}", point_id)
    return value


def gather_neighbors(point_set: PointSet, point_id: int, index: KDIndex, schema: FeatureSchema):
    """Neighbor ids for one point, or None when radius mode comes up short."""
    p = point_set.point(point_id)

    if schema.neighbor_mode is NeighborMode.ADAPTIVE:
        return index.neighbors(p, read_optimal_knn(point_set, point_id, schema), 1)

    if schema.neighbor_mode is NeighborMode.RADIUS:
        ids = index.radius(p, schema.radius)
        if len(ids) < schema.min_k:
            return None
        return ids

    return index.neighbors(p, schema.knn + 1, schema.stride)


def process_point(point_set: PointSet, point_id: int, index: KDIndex, schema: FeatureSchema) -> bool:
    """
    Compute and write the requested features of one point.

    Returns False when the point is skipped (radius mode, too few
    neighbors). Raises FatalError on degenerate geometry or solver failure.
    """
    ids = gather_neighbors(point_set, point_id, index, schema)
    if ids is None:
        return False
    if len(ids) == 0:
        raise FatalError("Empty neighborhood", point_id)

    cov = compute_covariance(point_set.xyz[np.asarray(ids, dtype=np.int64)])

    try:
        evals, evecs = decompose(cov)
    except FatalError as e:
        raise type(e)(str(e), point_id) from e

    raw = evals.tolist()
    check_dominant(raw, point_id)
    lambdas = transform_eigenvalues(raw, schema.mode)

    kopt = ropt = None
    if schema.adaptive and schema.features & Feature.DENSITY:
        kopt = read_optimal_knn(point_set, point_id, schema)
        ropt = read_optimal_radius(point_set, point_id, schema)

    for feature, value in derive_features(lambdas, evecs.tolist(), schema.features, kopt, ropt):
        point_set.set_field(FEATURE_NAMES[feature], point_id, value)
    return True


class CovarianceFeatures:
    """
    Two-phase driver: ``prepare`` resolves the schema and registers output
    fields, ``filter`` computes features in place.
    """

    def __init__(self, cfg: Optional[Dict] = None):
        self.cfg = dict(cfg or {})
        self.schema: Optional[FeatureSchema] = None

    def prepare(self, point_set: PointSet) -> FeatureSchema:
        self.schema = resolve_schema(self.cfg, point_set)
        return self.schema

    def filter(self, point_set: PointSet, index: Optional[KDIndex] = None) -> int:
        """Run over every point; returns the number of points written."""
        if self.schema is None:
            self.prepare(point_set)
        schema = self.schema

        if index is None:
            index = KDIndex(point_set.xyz)

        n = len(point_set)
        done = np.zeros(n, dtype=bool)

        def work(i):
            done[i] = process_point(point_set, i, index, schema)

        if schema.verbose:
            print(f"[CovFeatures] {n} points, mode={schema.neighbor_mode.value}, "
                  f"eigen={schema.mode.value}, threads={schema.threads}")
        t0 = time.time()

        run_partitioned(n, schema.threads, work)

        written = int(done.sum())
        if schema.verbose:
            print(f"[CovFeatures] Done in {time.time() - t0:.2f}s "
                  f"({written} written, {n - written} skipped)")
        return written


def compute_covariance_features(
    point_set: PointSet,
    cfg: Optional[Dict] = None,
    index: Optional[KDIndex] = None,
) -> FeatureSchema:
    """Resolve the schema and compute features in one call."""
    runner = CovarianceFeatures(cfg)
    schema = runner.prepare(point_set)
    runner.filter(point_set, index)
    return schema
