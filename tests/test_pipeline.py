# ============================================================================
# End-to-end covariance features
# ============================================================================
import math

import numpy as np
import pytest

from covfeatures import (
    CovarianceFeatures,
    ConfigurationError,
    DecompositionError,
    DegenerateGeometryError,
    FatalError,
    KDIndex,
    PointSet,
    compute_covariance_features,
    process_point,
    resolve_schema,
)

FULL = ["Linearity", "Planarity", "Scattering", "Verticality", "Omnivariance", "Sum",
        "Eigenentropy", "Anisotropy", "SurfaceVariation", "DemantkeVerticality"]


def _cloud(n=200, seed=0):
    rng = np.random.default_rng(seed)
    return rng.normal(size=(n, 3)) * [4.0, 2.0, 0.5]


def _fields(pts, names):
    return {name: pts[name].copy() for name in names}


# ============================================================================
# Scenarios
# ============================================================================
def test_flat_grid_is_planar():
    """Every neighborhood spans the whole symmetric grid."""
    xs, ys = np.meshgrid(np.arange(5.0), np.arange(5.0))
    pts = PointSet(np.column_stack([xs.ravel(), ys.ravel(), np.zeros(xs.size)]))
    compute_covariance_features(pts, {"knn": 30, "features": ["Linearity", "Planarity", "Verticality"]})

    np.testing.assert_allclose(pts["Planarity"], 1.0, atol=1e-9)
    np.testing.assert_allclose(pts["Linearity"], 0.0, atol=1e-9)
    np.testing.assert_allclose(pts["Verticality"], 0.0, atol=1e-9)


def test_vertical_line_is_linear_and_vertical():
    pts = PointSet(np.column_stack([np.zeros(12), np.zeros(12), np.arange(12.0)]))
    compute_covariance_features(pts, {"knn": 4})

    np.testing.assert_allclose(pts["Linearity"], 1.0, atol=1e-6)
    np.testing.assert_allclose(pts["Verticality"], 1.0, atol=1e-6)


def test_dimensionality_sums_to_one_raw():
    pts = PointSet(_cloud())
    compute_covariance_features(pts, {"features": ["Linearity", "Planarity", "Scattering"], "knn": 8})
    total = pts["Linearity"] + pts["Planarity"] + pts["Scattering"]
    np.testing.assert_allclose(total, 1.0, rtol=1e-9)


def test_normalized_sum_is_one():
    pts = PointSet(_cloud())
    compute_covariance_features(pts, {"features": ["Sum"], "mode": "NORM"})
    np.testing.assert_allclose(pts["Sum"], 1.0, rtol=1e-12)


def test_sqrt_mode_scattering_is_root_of_raw():
    xyz = _cloud(50)
    raw, sq = PointSet(xyz), PointSet(xyz)
    compute_covariance_features(raw, {"features": ["Scattering"]})
    compute_covariance_features(sq, {"features": ["Scattering"], "mode": "SQRT"})
    np.testing.assert_allclose(sq["Scattering"], np.sqrt(raw["Scattering"]), rtol=1e-6, atol=1e-12)


def test_stride_changes_neighborhood():
    xyz = _cloud(100)
    a, b = PointSet(xyz), PointSet(xyz)
    compute_covariance_features(a, {"features": ["Sum"], "knn": 5})
    compute_covariance_features(b, {"features": ["Sum"], "knn": 5, "stride": 3})
    assert not np.allclose(a["Sum"], b["Sum"])
    assert np.isfinite(b["Sum"]).all()


# ============================================================================
# Radius mode
# ============================================================================
def test_radius_mode_skips_sparse_points():
    """Point 3 only has one neighbor in range: 2 < min_k=3, nothing written."""
    xyz = np.array([
        [0.0, 0.0, 0.0],
        [0.3, 0.0, 0.0],
        [0.0, 0.3, 0.1],
        [10.0, 0.0, 0.0],
        [10.3, 0.0, 0.0],
    ])
    pts = PointSet(xyz)
    runner = CovarianceFeatures({"radius": 1.0, "min_k": 3, "features": ["Linearity", "Sum"]})
    runner.prepare(pts)
    written = runner.filter(pts)

    assert written == 3
    assert np.isfinite(pts["Linearity"][:3]).all()
    assert np.isnan(pts["Linearity"][3:]).all()
    assert np.isnan(pts["Sum"][3:]).all()


def test_radius_mode_keeps_existing_values_on_skip():
    xyz = np.array([[0.0, 0.0, 0.0], [5.0, 0.0, 0.0]])
    pts = PointSet(xyz, {"Sum": np.array([-1.0, -1.0])})
    compute_covariance_features(pts, {"radius": 1.0, "features": ["Sum"]})
    assert (pts["Sum"] == -1.0).all()


# ============================================================================
# Adaptive mode
# ============================================================================
def test_adaptive_density():
    xyz = _cloud(30)
    pts = PointSet(xyz, {
        "OptimalKNN": np.full(30, 9, dtype=np.uint64),
        "OptimalRadius": np.ones(30),
    })
    compute_covariance_features(pts, {"optimized": True, "features": ["Density", "Linearity"]})

    np.testing.assert_allclose(pts["Density"], 10.0 / (4.0 / 3.0 * math.pi))
    assert pts["Density"][0] == pytest.approx(2.3873, abs=1e-4)
    assert np.isfinite(pts["Linearity"]).all()


def test_adaptive_uses_per_point_count():
    xyz = _cloud(40)
    kopt = np.where(np.arange(40) % 2 == 0, 5, 20).astype(np.uint64)
    pts = PointSet(xyz, {"OptimalKNN": kopt, "OptimalRadius": np.ones(40)})
    schema = resolve_schema({"optimized": True, "features": ["Sum"]}, pts)
    index = KDIndex(pts.xyz)

    assert process_point(pts, 0, index, schema)
    expected = np.cov(xyz[index.neighbors(xyz[0], 5)].T).trace()
    assert pts["Sum"][0] == pytest.approx(expected)


def _adaptive_points(n=20):
    return PointSet(_cloud(n), {
        "OptimalKNN": np.full(n, 8.0),
        "OptimalRadius": np.ones(n),
    })


def test_adaptive_unset_knn_is_fatal():
    """An unset (NaN) OptimalKNN aborts with the point id."""
    pts = _adaptive_points()
    pts["OptimalKNN"][3] = np.nan
    with pytest.raises(FatalError, match="OptimalKNN") as info:
        compute_covariance_features(pts, {"optimized": True, "features": ["Linearity"]})
    assert info.value.point_id == 3


def test_adaptive_zero_knn_is_fatal():
    pts = _adaptive_points()
    pts["OptimalKNN"][5] = 0
    with pytest.raises(FatalError) as info:
        compute_covariance_features(pts, {"optimized": True, "features": ["Linearity"]})
    assert info.value.point_id == 5


@pytest.mark.parametrize("bad", [np.nan, np.inf, 0.0, -1.0])
def test_adaptive_bad_radius_is_fatal_for_density(bad):
    pts = _adaptive_points()
    pts["OptimalRadius"][7] = bad
    with pytest.raises(FatalError, match="OptimalRadius") as info:
        compute_covariance_features(pts, {"optimized": True, "features": ["Density"]})
    assert info.value.point_id == 7


def test_adaptive_radius_ignored_without_density():
    pts = _adaptive_points()
    pts["OptimalRadius"][:] = np.nan
    compute_covariance_features(pts, {"optimized": True, "features": ["Linearity"]})
    assert np.isfinite(pts["Linearity"]).all()


def test_adaptive_missing_fields_fails_before_processing():
    pts = PointSet(_cloud(10))
    with pytest.raises(ConfigurationError):
        compute_covariance_features(pts, {"optimized": True})
    assert pts.field_names == []


# ============================================================================
# Fatal conditions
# ============================================================================
def test_coincident_points_are_degenerate():
    pts = PointSet(np.ones((3, 3)))
    with pytest.raises(DegenerateGeometryError) as info:
        compute_covariance_features(pts, {"knn": 2})
    assert info.value.point_id == 0


def test_coincident_georeferenced_points_are_degenerate():
    """Coincident points with inexact coordinates still abort the run."""
    pts = PointSet(np.tile([0.1, 0.7, 1234567.3], (11, 1)))
    with pytest.raises(DegenerateGeometryError) as info:
        compute_covariance_features(pts, {"knn": 10})
    assert info.value.point_id == 0


def test_degenerate_error_surfaces_after_all_threads():
    """Siblings still write their points before the failure is raised."""
    good = _cloud(30)
    bad = np.ones((10, 3)) * 100.0
    pts = PointSet(np.vstack([good, bad]))

    with pytest.raises(DegenerateGeometryError) as info:
        compute_covariance_features(pts, {"knn": 5, "threads": 4, "features": ["Sum"]})

    assert info.value.point_id >= 30
    assert np.isfinite(pts["Sum"][:30]).all()


def test_non_finite_coordinates_abort():
    """A NaN neighbor poisons the covariance and aborts the run."""
    clean = _cloud(20)
    broken = clean.copy()
    broken[4, 0] = np.nan
    pts = PointSet(broken)
    schema = resolve_schema({"features": ["Sum"], "knn": 19}, pts)

    with pytest.raises(DecompositionError) as info:
        process_point(pts, 0, KDIndex(clean), schema)
    assert info.value.point_id == 0


# ============================================================================
# Determinism
# ============================================================================
def test_idempotent():
    pts = PointSet(_cloud())
    runner = CovarianceFeatures({"feature_set": "All"})
    with pytest.warns(UserWarning):
        runner.prepare(pts)
    runner.filter(pts)
    first = _fields(pts, FULL)

    runner.filter(pts)
    for name in FULL:
        np.testing.assert_array_equal(pts[name], first[name])


def test_thread_count_invariance():
    xyz = _cloud(301)
    single, multi = PointSet(xyz), PointSet(xyz)
    cfg = {"features": FULL, "knn": 12}

    compute_covariance_features(single, dict(cfg, threads=1))
    compute_covariance_features(multi, dict(cfg, threads=4))

    for name in FULL:
        np.testing.assert_array_equal(single[name], multi[name])


def test_more_threads_than_points():
    pts = PointSet(_cloud(3))
    compute_covariance_features(pts, {"knn": 2, "threads": 8, "features": ["Linearity"]})
    assert np.isfinite(pts["Linearity"]).all()


def test_verbose_reports_progress(capsys):
    pts = PointSet(_cloud(20))
    compute_covariance_features(pts, {"verbose": True, "threads": 2})
    out = capsys.readouterr().out
    assert "[CovFeatures] 20 points" in out
    assert "20 written, 0 skipped" in out
