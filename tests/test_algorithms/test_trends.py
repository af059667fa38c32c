"""
Tests for time-series trend analysis.
"""

from datetime import date, timedelta

import pytest

from nexus_algorithms.algorithms.exceptions import EmptyDatasetError
from nexus_algorithms.algorithms.trends import (
    LONG_WINDOW,
    PerformancePoint,
    analyze_performance_trends,
    analyze_trends,
    autocorrelation,
    detect_seasonality,
    linear_regression,
    moving_average,
    volatility,
)


def test_linear_regression_exact_line():
    """Test an exact line is recovered with r² = 1."""
    fit = linear_regression([0, 1, 2, 3], [1, 3, 5, 7])
    assert fit.slope == pytest.approx(2.0)
    assert fit.intercept == pytest.approx(1.0)
    assert fit.r_squared == pytest.approx(1.0)
    assert fit.direction == "increasing"


def test_linear_regression_degenerate_inputs():
    """Test zero x-spread gives slope 0 and zero y-variance gives r² 0."""
    assert linear_regression([2, 2, 2], [1, 2, 3]).slope == 0.0
    flat = linear_regression([0, 1, 2], [4, 4, 4])
    assert flat.r_squared == 0.0
    assert flat.direction == "stable"


def test_moving_average():
    """Test trailing means and the not-enough-data case."""
    assert moving_average([1, 2, 3, 4], 2) == pytest.approx([1.5, 2.5, 3.5])
    assert moving_average([1, 2], 3) == []
    with pytest.raises(ValueError):
        moving_average([1, 2], 0)


def test_autocorrelation_alternating():
    """Test lag autocorrelation of an alternating series."""
    values = [1, 5] * 6
    assert autocorrelation(values, 1) == pytest.approx(-11 / 12)
    assert autocorrelation(values, 2) == pytest.approx(10 / 12)


def test_detect_seasonality_period_two():
    """Test the strongest positive lag is chosen."""
    season = detect_seasonality([1, 5] * 6)
    assert season.period == 2
    assert season.strength == pytest.approx(10 / 12)


def test_detect_seasonality_none():
    """Test a constant series reports period 1 with zero strength."""
    season = detect_seasonality([3.0] * 10)
    assert season.period == 1
    assert season.strength == 0.0


def test_volatility():
    """Test returns from a zero base count as 0."""
    assert volatility([0, 5, 10]) == pytest.approx(0.5)
    assert volatility([5]) == 0.0
    assert volatility([2, 2, 2]) == 0.0


def test_analyze_trends_increasing_series():
    """Test full analysis of a linear series."""
    values = list(range(1, 11))
    result = analyze_trends(values, forecast_periods=5)

    assert result.trend.slope == pytest.approx(1.0)
    assert result.trend.intercept == pytest.approx(1.0)
    assert result.direction == "increasing"
    assert result.short_moving_average == pytest.approx([4.0, 5.0, 6.0, 7.0])
    assert result.long_moving_average == []
    assert result.forecast == pytest.approx([11.0, 12.0, 13.0, 14.0, 15.0])
    assert result.volatility > 0


def test_analyze_trends_long_window():
    """Test the long moving average appears once enough data exists."""
    values = [float(i % 5) for i in range(LONG_WINDOW + 5)]
    result = analyze_trends(values)
    assert len(result.long_moving_average) == 6
    assert len(result.forecast) == 5


def test_analyze_trends_decreasing_and_zero_forecast():
    """Test a falling series and an empty forecast."""
    result = analyze_trends([9, 7, 5, 3], forecast_periods=0)
    assert result.direction == "decreasing"
    assert result.forecast == []


def test_analyze_trends_invalid_inputs():
    """Test empty series and negative forecast periods are rejected."""
    with pytest.raises(EmptyDatasetError):
        analyze_trends([])
    with pytest.raises(ValueError):
        analyze_trends([1, 2, 3], forecast_periods=-1)


def test_analyze_performance_trends_uses_point_order():
    """Test dated points are analysed in the order given."""
    start = date(2024, 1, 1)
    points = [PerformancePoint(start + timedelta(days=i), v) for i, v in enumerate([3.0, 3.2, 3.4])]
    result = analyze_performance_trends(points, forecast_periods=1)
    assert result.trend.slope == pytest.approx(0.2)
    assert result.forecast == pytest.approx([3.6])
