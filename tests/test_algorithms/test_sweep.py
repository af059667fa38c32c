"""
Tests for k-means sweep orchestration.
"""

import numpy as np
import pytest

from nexus_algorithms.algorithms.sweep import (
    ClusterSweepConfig,
    ClusterSweepResult,
    run_cluster_sweep,
)


def blobs(k=3, n_per=10, seed=42):
    rng = np.random.default_rng(seed)
    centers = np.arange(k)[:, None] * np.array([[8.0, 8.0]])
    return np.vstack([c + 0.2 * rng.standard_normal((n_per, 2)) for c in centers])


def test_cluster_sweep_config_defaults():
    """Test ClusterSweepConfig default values."""
    cfg = ClusterSweepConfig()
    assert cfg.k_min == 2
    assert cfg.k_max == 8
    assert cfg.max_iterations == 100
    assert cfg.base_seed == 0
    assert cfg.n_restarts == 1
    assert cfg.compute_silhouette is False
    assert cfg.reseed_empty is False


def test_run_cluster_sweep_basic():
    """Test basic sweep without silhouette scores."""
    X = blobs()
    cfg = ClusterSweepConfig(k_min=2, k_max=5)

    result = run_cluster_sweep(X, cfg)

    assert isinstance(result, ClusterSweepResult)
    assert len(result.by_k) == 4  # K=2,3,4,5
    entry = result.by_k["2"]
    assert entry["labels"].shape == (X.shape[0],)
    assert entry["centroids"].shape == (2, 2)
    assert entry["silhouette"] is None
    assert result.dist is None
    assert result.best_silhouette_k() is None


def test_run_cluster_sweep_restarts_keep_best():
    """Test the reported inertia is the minimum over restarts."""
    X = blobs()
    cfg = ClusterSweepConfig(k_min=3, k_max=3, n_restarts=4)

    result = run_cluster_sweep(X, cfg)

    entry = result.by_k["3"]
    assert len(entry["inertias"]) == 4
    assert entry["inertia"] == pytest.approx(min(entry["inertias"]))


def test_run_cluster_sweep_silhouette_picks_true_k():
    """Test silhouette scoring identifies the generating cluster count."""
    X = blobs(k=3)
    cfg = ClusterSweepConfig(k_min=2, k_max=5, n_restarts=5, compute_silhouette=True)

    result = run_cluster_sweep(X, cfg)

    assert result.dist is not None
    assert result.dist.shape == (X.shape[0], X.shape[0])
    assert all(entry["silhouette"] is not None for entry in result.by_k.values())
    assert result.best_silhouette_k() == 3


def test_inertia_curve_sorted_by_k():
    """Test the inertia curve is in ascending K order."""
    X = blobs()
    result = run_cluster_sweep(X, ClusterSweepConfig(k_min=1, k_max=4, n_restarts=3))
    curve = result.inertia_curve()
    assert [k for k, _ in curve] == [1, 2, 3, 4]


def test_run_cluster_sweep_invalid_range():
    """Test invalid K ranges and restart counts are rejected."""
    X = blobs()
    with pytest.raises(ValueError, match="k_min"):
        run_cluster_sweep(X, ClusterSweepConfig(k_min=5, k_max=3))
    with pytest.raises(ValueError, match="k_max"):
        run_cluster_sweep(X, ClusterSweepConfig(k_min=2, k_max=X.shape[0] + 1))
    with pytest.raises(ValueError, match="n_restarts"):
        run_cluster_sweep(X, ClusterSweepConfig(n_restarts=0))
