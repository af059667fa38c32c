"""
Time-series trend analysis for performance data.

Treats sample order as the x axis: fits a least-squares line, computes
moving averages, detects a seasonal period by autocorrelation, measures
volatility of period-over-period returns and extrapolates a forecast.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Literal, Optional, Sequence

import numpy as np

from ..config import config
from .exceptions import EmptyDatasetError
from .statistics import describe

SHORT_WINDOW = 7
LONG_WINDOW = 30

TrendDirection = Literal["increasing", "decreasing", "stable"]


@dataclass(frozen=True)
class PerformancePoint:
    """One dated observation of a performance metric."""

    date: date
    value: float


@dataclass(frozen=True)
class LinearFit:
    slope: float
    intercept: float
    r_squared: float

    @property
    def direction(self) -> TrendDirection:
        if self.slope > 0:
            return "increasing"
        if self.slope < 0:
            return "decreasing"
        return "stable"


@dataclass(frozen=True)
class Seasonality:
    period: int
    strength: float


@dataclass(frozen=True)
class TrendAnalysis:
    """Trend, smoothing, seasonality, volatility and forecast of a series."""

    trend: LinearFit
    short_moving_average: List[float]
    long_moving_average: List[float]
    seasonality: Seasonality
    volatility: float
    forecast: List[float]

    @property
    def direction(self) -> TrendDirection:
        return self.trend.direction


def linear_regression(x: Sequence[float], y: Sequence[float]) -> LinearFit:
    """
    Ordinary least-squares fit of ``y = slope * x + intercept``.

    Slope is 0 when x has no spread; r² is 0 when y has no variance.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    n = x.size
    if n == 0:
        raise EmptyDatasetError("Cannot fit a line to an empty series")

    x_mean = x.mean()
    y_mean = y.mean()
    sxx = float(np.sum((x - x_mean) ** 2))
    slope = float(np.sum((x - x_mean) * (y - y_mean)) / sxx) if sxx > 0 else 0.0
    intercept = float(y_mean - slope * x_mean)

    total_ss = float(np.sum((y - y_mean) ** 2))
    residual_ss = float(np.sum((y - (slope * x + intercept)) ** 2))
    r_squared = 1.0 - residual_ss / total_ss if total_ss > 0 else 0.0
    return LinearFit(slope, intercept, r_squared)


def moving_average(values: Sequence[float], window: int) -> List[float]:
    """Trailing mean over *window* values; empty until the window is full."""
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")
    arr = np.asarray(values, dtype=np.float64)
    if arr.size < window:
        return []
    kernel = np.ones(window) / window
    return np.convolve(arr, kernel, mode="valid").tolist()


def autocorrelation(values: Sequence[float], lag: int) -> float:
    """Lag autocorrelation normalised by the total sum of squares."""
    arr = np.asarray(values, dtype=np.float64)
    centered = arr - arr.mean()
    denominator = float(np.sum(centered ** 2))
    if denominator == 0:
        return 0.0
    numerator = float(np.sum(centered[:-lag] * centered[lag:])) if lag < arr.size else 0.0
    return numerator / denominator


def detect_seasonality(values: Sequence[float]) -> Seasonality:
    """
    Pick the period in ``2..n//2`` with the highest positive autocorrelation.

    Returns period 1 with strength 0 when no candidate correlates positively.
    """
    best_period = 1
    best_strength = 0.0
    for period in range(2, len(values) // 2 + 1):
        strength = autocorrelation(values, period)
        if strength > best_strength:
            best_strength = strength
            best_period = period
    return Seasonality(best_period, best_strength)


def volatility(values: Sequence[float]) -> float:
    """
    Population standard deviation of period-over-period relative returns.

    A return from a zero base counts as 0; fewer than two values give 0.
    """
    if len(values) < 2:
        return 0.0
    returns = []
    for prev, curr in zip(values[:-1], values[1:]):
        returns.append((curr - prev) / prev if prev != 0 else 0.0)
    return describe(returns).standard_deviation


def forecast(fit: LinearFit, n_observed: int, periods: int) -> List[float]:
    """Extrapolate the fitted line for *periods* steps past the last index."""
    last_index = n_observed - 1
    return [fit.slope * (last_index + i) + fit.intercept for i in range(1, periods + 1)]


def analyze_trends(
    values: Sequence[float], forecast_periods: Optional[int] = None
) -> TrendAnalysis:
    """
    Full trend analysis of a numeric series.

    Args:
        values: Observations in time order
        forecast_periods: Number of future periods to forecast
            (default from config)

    Returns:
        TrendAnalysis

    Raises:
        EmptyDatasetError: If *values* is empty
    """
    if len(values) == 0:
        raise EmptyDatasetError("Cannot analyze trends of an empty series")
    if forecast_periods is None:
        forecast_periods = config.analytics.forecast_periods
    if forecast_periods < 0:
        raise ValueError(f"forecast_periods must be >= 0, got {forecast_periods}")

    values = [float(v) for v in values]
    fit = linear_regression(range(len(values)), values)
    return TrendAnalysis(
        trend=fit,
        short_moving_average=moving_average(values, SHORT_WINDOW),
        long_moving_average=moving_average(values, LONG_WINDOW),
        seasonality=detect_seasonality(values),
        volatility=volatility(values),
        forecast=forecast(fit, len(values), forecast_periods),
    )


def analyze_performance_trends(
    points: Sequence[PerformancePoint], forecast_periods: Optional[int] = None
) -> TrendAnalysis:
    """Trend analysis of dated observations, taken in the order given."""
    return analyze_trends([p.value for p in points], forecast_periods)
