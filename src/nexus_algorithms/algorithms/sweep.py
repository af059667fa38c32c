"""
Sweep orchestration for k-means across a range of K values.

Runs k-means for every K with optional restarts and reports the inertia
(and optionally the silhouette score) per K, which is what the analytics
dashboard plots to pick a cluster count.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import numpy as np

from ..utils.logging_config import get_logger
from .clustering import (
    euclidean_distance_matrix,
    kmeans_points,
    silhouette_score_precomputed,
    _as_points,
)

logger = get_logger(__name__)

Array2D = np.ndarray


@dataclass
class ClusterSweepConfig:
    """Configuration for a k-means sweep."""

    k_min: int = 2
    k_max: int = 8
    max_iterations: int = 100
    base_seed: int = 0
    n_restarts: int = 1
    compute_silhouette: bool = False
    reseed_empty: bool = False


@dataclass
class ClusterSweepResult:
    """Results from a k-means sweep, keyed by str(K)."""

    by_k: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    dist: Optional[Array2D] = None

    def inertia_curve(self) -> List[tuple]:
        """``(K, best inertia)`` pairs in ascending K order."""
        return sorted((int(k), entry["inertia"]) for k, entry in self.by_k.items())

    def best_silhouette_k(self) -> Optional[int]:
        """K with the highest silhouette score, if silhouettes were computed."""
        scored = [
            (entry["silhouette"], int(k))
            for k, entry in self.by_k.items()
            if entry.get("silhouette") is not None
        ]
        if not scored:
            return None
        return max(scored, key=lambda item: (item[0], -item[1]))[1]


def run_cluster_sweep(X: Array2D, cfg: ClusterSweepConfig) -> ClusterSweepResult:
    """
    Run k-means for every K in ``[k_min, k_max]``.

    For each K the best of ``n_restarts`` runs (lowest inertia) is kept;
    restart ``r`` uses seed ``base_seed + r`` so sweeps are reproducible.

    Args:
        X: Points of shape (n_samples, n_features)
        cfg: ClusterSweepConfig with sweep parameters

    Returns:
        ClusterSweepResult; each ``by_k`` entry has ``inertia``,
        ``inertias``, ``labels``, ``centroids``, ``n_iter`` and
        ``silhouette`` (None unless requested)

    Raises:
        ValueError: If k_min > k_max, k_min < 1, n_restarts < 1 or
            k_max exceeds the number of samples
    """
    X = _as_points(X)
    n_samples = X.shape[0]

    if cfg.k_min < 1:
        raise ValueError(f"k_min must be >= 1, got {cfg.k_min}")
    if cfg.k_min > cfg.k_max:
        raise ValueError(f"k_min ({cfg.k_min}) must be <= k_max ({cfg.k_max})")
    if cfg.k_max > n_samples:
        raise ValueError(f"k_max ({cfg.k_max}) must be <= n_samples ({n_samples})")
    if cfg.n_restarts < 1:
        raise ValueError(f"n_restarts must be >= 1, got {cfg.n_restarts}")

    dist = euclidean_distance_matrix(X) if cfg.compute_silhouette else None

    by_k: Dict[str, Dict[str, Any]] = {}
    for K in range(cfg.k_min, cfg.k_max + 1):
        runs = []
        for restart_idx in range(cfg.n_restarts):
            labels, info = kmeans_points(
                X,
                K,
                max_iterations=cfg.max_iterations,
                seed=cfg.base_seed + restart_idx,
                reseed_empty=cfg.reseed_empty,
            )
            runs.append((labels, info))

        inertias = [info["inertia"] for _, info in runs]
        best_idx = int(np.argmin(inertias))
        best_labels, best_info = runs[best_idx]

        by_k[str(K)] = {
            "inertia": best_info["inertia"],
            "inertias": inertias,
            "labels": best_labels,
            "centroids": best_info["centroids"],
            "n_iter": best_info["n_iter"],
            "silhouette": (
                silhouette_score_precomputed(best_labels, dist)
                if dist is not None
                else None
            ),
        }
        logger.debug("Sweep K=%d best inertia %.4f", K, best_info["inertia"])

    return ClusterSweepResult(by_k=by_k, dist=dist)
