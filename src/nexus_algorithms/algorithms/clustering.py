"""
Clustering algorithms and cluster-quality metrics.

Provides Lloyd's k-means with range-uniform initialisation, brute-force
DBSCAN and the silhouette score used to compare k values.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..config import config
from ..records import Feature, Student, feature_matrix
from ..utils.logging_config import get_logger
from .exceptions import EmptyDatasetError

logger = get_logger(__name__)

Array2D = np.ndarray
NOISE = -1


@dataclass
class ClusterResult:
    """Result of a k-means run over records."""

    clusters: List[List[Student]]
    centroids: np.ndarray
    assignments: np.ndarray
    inertia: float
    n_iter: int = 0
    inertia_history: List[float] = field(default_factory=list)


@dataclass
class DensityClusterResult:
    """Result of a DBSCAN run over records."""

    clusters: List[List[Student]]
    noise: List[Student]
    cluster_count: int
    labels: np.ndarray = None

    def __post_init__(self):
        """Initialize labels if None."""
        if self.labels is None:
            self.labels = np.full(0, NOISE, dtype=int)


def _resolve_rng(
    seed: Optional[int], rng: Optional[np.random.Generator]
) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng(seed)


def _as_points(X: Array2D) -> Array2D:
    X = np.asarray(X, dtype=np.float64)
    if X.ndim != 2:
        raise ValueError(f"Expected a 2-D array of points, got shape {X.shape}")
    if X.shape[0] == 0:
        raise EmptyDatasetError("Cannot cluster an empty set of points")
    return X


def euclidean_distance_matrix(X: Array2D) -> Array2D:
    """Pairwise Euclidean distances, shape ``(n, n)``."""
    X = np.asarray(X, dtype=np.float64)
    diffs = X[:, None, :] - X[None, :, :]
    return np.sqrt(np.sum(diffs ** 2, axis=2))


# ------------------------------------------------------------------
# k-means
# ------------------------------------------------------------------

def _init_centroids(X: Array2D, K: int, rng: np.random.Generator) -> Array2D:
    """Draw K centroids uniformly inside each dimension's observed range."""
    lo = X.min(axis=0)
    hi = X.max(axis=0)
    return rng.uniform(lo, hi, size=(K, X.shape[1]))


def _assign(X: Array2D, centroids: Array2D) -> np.ndarray:
    """Index of the nearest centroid for every point (first wins ties)."""
    diffs = X[:, None, :] - centroids[None, :, :]  # (n, K, d)
    sq = np.sum(diffs ** 2, axis=2)  # (n, K)
    return np.argmin(sq, axis=1)


def _inertia(X: Array2D, centroids: Array2D, labels: np.ndarray) -> float:
    diffs = X - centroids[labels]
    return float(np.sum(diffs ** 2))


def kmeans_points(
    X: Array2D,
    K: int,
    *,
    max_iterations: Optional[int] = None,
    seed: Optional[int] = 0,
    rng: Optional[np.random.Generator] = None,
    reseed_empty: bool = False,
) -> Tuple[np.ndarray, Dict[str, Any]]:
    """
    Lloyd's k-means on an ``(n, d)`` array.

    Each iteration assigns every point to its nearest centroid, then moves
    every centroid to the mean of its points. Stops early once the
    assignments repeat. A centroid that loses all its points is reset to the
    zero vector, or to a random data point when *reseed_empty* is set.

    Args:
        X: Points of shape (n_samples, n_features)
        K: Number of clusters
        max_iterations: Iteration cap (default from config)
        seed: Seed for the default generator (ignored when *rng* is given)
        rng: Random generator used for initialisation and reseeding
        reseed_empty: Reseed empty clusters from the data instead of zeroing

    Returns:
        Tuple of:
        - labels: Cluster assignments of shape (n_samples,)
        - info: Dictionary with centroids, inertia, n_iter and
          inertia_history (inertia after each assignment step, then the
          final value; never increases)

    Raises:
        EmptyDatasetError: If X has no rows
        ValueError: If K is not within [1, n_samples]
    """
    X = _as_points(X)
    n, d = X.shape
    if K < 1:
        raise ValueError(f"K must be >= 1, got {K}")
    if K > n:
        raise ValueError(f"K ({K}) cannot exceed number of samples ({n})")
    if max_iterations is None:
        max_iterations = config.analytics.kmeans_max_iterations
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")

    rng = _resolve_rng(seed, rng)
    centroids = _init_centroids(X, K, rng)
    labels: Optional[np.ndarray] = None
    history: List[float] = []

    n_iter = 0
    for _ in range(max_iterations):
        n_iter += 1
        new_labels = _assign(X, centroids)
        history.append(_inertia(X, centroids, new_labels))
        if labels is not None and np.array_equal(labels, new_labels):
            break
        labels = new_labels

        for k in range(K):
            members = X[labels == k]
            if len(members) == 0:
                if reseed_empty:
                    centroids[k] = X[int(rng.integers(0, n))]
                else:
                    centroids[k] = np.zeros(d)
                logger.warning("Cluster %d lost all points; centroid reset", k)
                continue
            centroids[k] = members.mean(axis=0)

    inertia = _inertia(X, centroids, labels)
    history.append(inertia)
    logger.debug("k-means K=%d finished after %d iterations (inertia=%.4f)", K, n_iter, inertia)

    return labels.astype(int), {
        "centroids": centroids,
        "inertia": inertia,
        "n_iter": n_iter,
        "inertia_history": history,
    }


def kmeans(
    records: Sequence[Student],
    k: int,
    features: Sequence[Feature],
    max_iterations: Optional[int] = None,
    *,
    seed: Optional[int] = 0,
    rng: Optional[np.random.Generator] = None,
    reseed_empty: bool = False,
) -> ClusterResult:
    """
    Partition *records* into *k* clusters over the given features.

    See ``kmeans_points`` for the algorithm. The result always holds exactly
    *k* centroids (and *k* cluster lists, possibly empty) and one assignment
    per record.
    """
    X = feature_matrix(records, features)
    labels, info = kmeans_points(
        X,
        k,
        max_iterations=max_iterations,
        seed=seed,
        rng=rng,
        reseed_empty=reseed_empty,
    )
    clusters: List[List[Student]] = [[] for _ in range(k)]
    for record, label in zip(records, labels):
        clusters[label].append(record)

    return ClusterResult(
        clusters=clusters,
        centroids=info["centroids"],
        assignments=labels,
        inertia=info["inertia"],
        n_iter=info["n_iter"],
        inertia_history=info["inertia_history"],
    )


# ------------------------------------------------------------------
# DBSCAN
# ------------------------------------------------------------------

def dbscan_points(
    X: Array2D,
    epsilon: Optional[float] = None,
    min_points: Optional[int] = None,
) -> Tuple[np.ndarray, Dict[str, Any]]:
    """
    Density-based clustering (DBSCAN) with brute-force neighbourhoods.

    A point's neighbourhood is every *other* point within *epsilon*. Points
    with fewer than *min_points* neighbours start as noise; a cluster grows
    from a core point by absorbing its neighbours and, for neighbours that
    are core points themselves, their neighbours too. A noise point reached
    this way joins the cluster and leaves the noise set.

    Args:
        X: Points of shape (n_samples, n_features)
        epsilon: Neighbourhood radius (default from config)
        min_points: Neighbour count for a core point (default from config)

    Returns:
        Tuple of:
        - labels: Cluster id per point, ``-1`` for noise
        - info: Dictionary with clusters (member indices in absorption
          order), noise (indices) and cluster_count
    """
    X = _as_points(X)
    if epsilon is None:
        epsilon = config.analytics.dbscan_epsilon
    if min_points is None:
        min_points = config.analytics.dbscan_min_points
    if epsilon <= 0:
        raise ValueError(f"epsilon must be > 0, got {epsilon}")
    if min_points < 1:
        raise ValueError(f"min_points must be >= 1, got {min_points}")

    n = X.shape[0]
    dist = euclidean_distance_matrix(X)

    def neighbours(i: int) -> List[int]:
        return [int(j) for j in np.flatnonzero(dist[i] <= epsilon) if j != i]

    labels = np.full(n, NOISE, dtype=int)
    visited = np.zeros(n, dtype=bool)
    clusters: List[List[int]] = []
    noise: List[int] = []

    for i in range(n):
        if visited[i]:
            continue
        visited[i] = True
        seeds = neighbours(i)
        if len(seeds) < min_points:
            noise.append(i)
            continue

        cluster_id = len(clusters)
        members = [i]
        labels[i] = cluster_id
        frontier = deque(seeds)
        while frontier:
            j = frontier.popleft()
            if not visited[j]:
                visited[j] = True
                reachable = neighbours(j)
                if len(reachable) >= min_points:
                    frontier.extend(reachable)
            if labels[j] == NOISE:
                labels[j] = cluster_id
                members.append(j)
        clusters.append(members)

    noise = [i for i in noise if labels[i] == NOISE]
    logger.debug(
        "DBSCAN found %d clusters and %d noise points", len(clusters), len(noise)
    )
    return labels, {
        "clusters": clusters,
        "noise": noise,
        "cluster_count": len(clusters),
    }


def dbscan(
    records: Sequence[Student],
    features: Sequence[Feature],
    epsilon: Optional[float] = None,
    min_points: Optional[int] = None,
) -> DensityClusterResult:
    """Run DBSCAN over *features* extracted from *records*."""
    X = feature_matrix(records, features)
    labels, info = dbscan_points(X, epsilon, min_points)
    return DensityClusterResult(
        clusters=[[records[i] for i in members] for members in info["clusters"]],
        noise=[records[i] for i in info["noise"]],
        cluster_count=info["cluster_count"],
        labels=labels,
    )


# ------------------------------------------------------------------
# Quality metrics
# ------------------------------------------------------------------

def silhouette_score_precomputed(labels: np.ndarray, dist: np.ndarray) -> float:
    """
    Compute silhouette score using precomputed distance matrix.

    Silhouette score measures how well-separated clusters are.
    Higher is better (range [-1, 1]). Points alone in their cluster score 0.

    Args:
        labels: Cluster assignments
        dist: Precomputed distance matrix of shape (n_samples, n_samples)

    Returns:
        Mean silhouette score (0 for a single cluster)
    """
    labels = np.asarray(labels)
    n = len(labels)
    unique = np.unique(labels)
    if len(unique) < 2:
        return 0.0

    sil = np.zeros(n, dtype=np.float64)
    for i in range(n):
        same_mask = labels == labels[i]
        same_count = same_mask.sum()
        if same_count <= 1:
            continue
        a = dist[i, same_mask].sum() / (same_count - 1)
        b = min(
            dist[i, labels == c].mean() for c in unique if c != labels[i]
        )
        denom = max(a, b)
        sil[i] = (b - a) / denom if denom > 0 else 0.0
    return float(np.mean(sil))
