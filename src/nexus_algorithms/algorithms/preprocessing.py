"""
Feature and target scaling utilities.

Provides z-score normalisation of feature matrices and min-max scaling of
targets, with the fitted statistics kept so new inputs can be transformed
the same way and outputs mapped back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from .exceptions import EmptyDatasetError

Array2D = np.ndarray


@dataclass(frozen=True)
class ZScoreStats:
    """Per-feature mean and population standard deviation."""

    means: np.ndarray
    stds: np.ndarray


@dataclass(frozen=True)
class MinMaxStats:
    """Observed range of a target."""

    minimum: float
    maximum: float

    @property
    def span(self) -> float:
        return self.maximum - self.minimum


def zscore_fit(X: Array2D) -> ZScoreStats:
    """
    Fit per-column mean and standard deviation.

    Args:
        X: Input data of shape (n_samples, n_features)

    Returns:
        ZScoreStats with one mean and std per column

    Raises:
        EmptyDatasetError: If X has no rows
        ValueError: If X is not 2-D
    """
    X = np.asarray(X, dtype=np.float64)
    if X.ndim != 2:
        raise ValueError(f"Expected a 2-D feature matrix, got shape {X.shape}")
    if X.shape[0] == 0:
        raise EmptyDatasetError("Cannot fit normalisation on zero samples")
    return ZScoreStats(means=X.mean(axis=0), stds=X.std(axis=0))


def zscore_apply(X: Array2D, stats: ZScoreStats) -> Array2D:
    """Standardise X; columns with zero spread map to 0."""
    X = np.asarray(X, dtype=np.float64)
    safe = np.where(stats.stds == 0, 1.0, stats.stds)
    Z = (X - stats.means) / safe
    return np.where(stats.stds == 0, 0.0, Z)


def zscore_normalize(X: Array2D) -> Tuple[Array2D, ZScoreStats]:
    """Fit and apply z-score normalisation in one step."""
    stats = zscore_fit(X)
    return zscore_apply(X, stats), stats


def minmax_fit(values: Sequence[float]) -> MinMaxStats:
    arr = np.asarray(values, dtype=np.float64)
    if arr.size == 0:
        raise EmptyDatasetError("Cannot fit min-max scaling on zero values")
    return MinMaxStats(float(arr.min()), float(arr.max()))


def minmax_apply(values: Sequence[float], stats: MinMaxStats) -> np.ndarray:
    """Scale to [0, 1]; a zero span maps everything to 0."""
    arr = np.asarray(values, dtype=np.float64)
    if stats.span == 0:
        return np.zeros_like(arr)
    return (arr - stats.minimum) / stats.span


def minmax_invert(scaled, stats: MinMaxStats):
    """Map values from [0, 1] back to the original target scale."""
    return np.asarray(scaled, dtype=np.float64) * stats.span + stats.minimum
