"""
Descriptive statistics and correlation analysis.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from ..config import config
from ..records import Feature, Student, feature_matrix
from .exceptions import EmptyDatasetError


@dataclass(frozen=True)
class StatisticalSummary:
    """Descriptive statistics of a numeric sample (population moments)."""

    count: int
    sum: float
    mean: float
    median: float
    mode: List[float]
    variance: float
    standard_deviation: float
    min: float
    max: float
    range: float
    q1: float
    q3: float
    iqr: float
    skewness: float
    kurtosis: float
    outliers: List[float] = field(default_factory=list)


@dataclass(frozen=True)
class CorrelationPair:
    """A pair of features whose correlation passed the strength threshold."""

    feature1: str
    feature2: str
    correlation: float


@dataclass(frozen=True)
class CorrelationMatrix:
    """Pairwise Pearson correlations between named features."""

    features: List[str]
    matrix: np.ndarray
    strong_correlations: List[CorrelationPair]


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """
    Linearly interpolated percentile of an ascending sequence.

    The rank is ``p / 100 * (n - 1)``; fractional ranks interpolate between
    the neighbouring order statistics.
    """
    index = (p / 100.0) * (len(sorted_values) - 1)
    lower = int(np.floor(index))
    upper = int(np.ceil(index))
    if lower == upper:
        return float(sorted_values[lower])
    return float(
        sorted_values[lower] * (upper - index) + sorted_values[upper] * (index - lower)
    )


def find_modes(values: Sequence[float]) -> List[float]:
    """All values attaining the maximum frequency, in first-seen order."""
    counts = Counter(values)
    top = max(counts.values())
    return [float(v) for v, c in counts.items() if c == top]


def describe(values: Sequence[float]) -> StatisticalSummary:
    """
    Compute a full statistical summary of *values*.

    Variance and standard deviation use the population divisor ``n``.
    Skewness and kurtosis are the third and fourth standardised moments
    (kurtosis reported as excess, minus 3); both are 0 when the standard
    deviation is 0. Outliers lie outside ``[Q1 - 1.5 IQR, Q3 + 1.5 IQR]``.

    Args:
        values: Numeric sample

    Returns:
        StatisticalSummary

    Raises:
        EmptyDatasetError: If *values* is empty
    """
    if len(values) == 0:
        raise EmptyDatasetError("Cannot calculate statistics for an empty sequence")

    arr = np.asarray(values, dtype=np.float64)
    ordered = np.sort(arr)
    n = arr.size
    total = float(arr.sum())
    mean = total / n
    variance = float(np.mean((arr - mean) ** 2))
    std = float(np.sqrt(variance))

    if n % 2 == 0:
        median = float((ordered[n // 2 - 1] + ordered[n // 2]) / 2)
    else:
        median = float(ordered[n // 2])

    q1 = percentile(ordered, 25)
    q3 = percentile(ordered, 75)
    iqr = q3 - q1

    if std > 0:
        z = (arr - mean) / std
        skewness = float(np.mean(z ** 3))
        kurtosis = float(np.mean(z ** 4) - 3.0)
    else:
        skewness = 0.0
        kurtosis = 0.0

    lower_bound = q1 - 1.5 * iqr
    upper_bound = q3 + 1.5 * iqr
    outliers = [float(v) for v in ordered if v < lower_bound or v > upper_bound]

    return StatisticalSummary(
        count=n,
        sum=total,
        mean=mean,
        median=median,
        mode=find_modes(list(arr.tolist())),
        variance=variance,
        standard_deviation=std,
        min=float(ordered[0]),
        max=float(ordered[-1]),
        range=float(ordered[-1] - ordered[0]),
        q1=q1,
        q3=q3,
        iqr=iqr,
        skewness=skewness,
        kurtosis=kurtosis,
        outliers=outliers,
    )


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson correlation coefficient of two equal-length samples.

    Returns 0 when either sample has zero variance (or is empty).
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.shape != y.shape:
        raise ValueError(f"Samples must have equal length, got {x.size} and {y.size}")
    if x.size == 0 or np.ptp(x) == 0 or np.ptp(y) == 0:
        return 0.0
    xc = x - x.mean()
    yc = y - y.mean()
    denominator = np.sqrt(np.dot(xc, xc) * np.dot(yc, yc))
    if denominator == 0 or not np.isfinite(denominator):
        return 0.0
    return float(np.clip(np.dot(xc, yc) / denominator, -1.0, 1.0))


def correlation_from_columns(
    data: np.ndarray, names: Sequence[str], threshold: Optional[float] = None
) -> CorrelationMatrix:
    """
    Correlation matrix over the columns of an ``(n, d)`` array.

    The diagonal is fixed at 1. Pairs with ``|r| >= threshold`` are listed
    once each (upper triangle), strongest first.
    """
    if threshold is None:
        threshold = config.analytics.correlation_threshold
    data = np.asarray(data, dtype=np.float64)
    d = data.shape[1]
    if len(names) != d:
        raise ValueError(f"Expected {d} feature names, got {len(names)}")

    matrix = np.eye(d)
    for i in range(d):
        for j in range(i + 1, d):
            r = pearson_correlation(data[:, i], data[:, j])
            matrix[i, j] = r
            matrix[j, i] = r

    strong = [
        CorrelationPair(names[i], names[j], float(matrix[i, j]))
        for i in range(d)
        for j in range(i + 1, d)
        if abs(matrix[i, j]) >= threshold
    ]
    strong.sort(key=lambda pair: abs(pair.correlation), reverse=True)
    return CorrelationMatrix(features=list(names), matrix=matrix, strong_correlations=strong)


def correlation_matrix(
    records: Sequence[Student],
    features: Sequence[Feature],
    threshold: Optional[float] = None,
) -> CorrelationMatrix:
    """Pearson correlation between *features* extracted from *records*."""
    data = feature_matrix(records, features)
    return correlation_from_columns(data, [f.value for f in features], threshold)
