"""
Configuration management for Nexus Algorithms.

Loads default tuning parameters from environment variables (typically from a
.env file). Uses python-dotenv to load .env automatically.

Every algorithm accepts explicit arguments; the values here are only the
fallbacks used when a caller passes ``None``.

Usage:
    from nexus_algorithms.config import config

    threshold = config.search.fuzzy_threshold
    epsilon = config.analytics.dbscan_epsilon
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, TypeVar

from dotenv import load_dotenv

# Look for .env in project root (parent of src/)
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

T = TypeVar("T")


def _read_env(name: str, default: T, parse: Callable[[str], T]) -> T:
    """Read and parse an environment variable, falling back to *default*."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return parse(raw.strip())
    except ValueError as e:
        raise ValueError(
            f"Invalid value for {name}: {raw!r} ({e})"
        ) from e


def _check_unit_interval(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be within [0, 1], got {value}")


def _check_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ValueError(f"{name} must be > 0, got {value}")


@dataclass
class SearchConfig:
    """Defaults for the search engine."""
    fuzzy_threshold: float = 0.7
    weighted_threshold: float = 0.5

    def __post_init__(self):
        """Validate thresholds."""
        _check_unit_interval("fuzzy_threshold", self.fuzzy_threshold)
        _check_unit_interval("weighted_threshold", self.weighted_threshold)


@dataclass
class SortingConfig:
    """Defaults for the sort engine."""
    quicksort_threshold: int = 10
    bucket_count: int = 10

    def __post_init__(self):
        """Validate sizes."""
        _check_positive("quicksort_threshold", self.quicksort_threshold)
        _check_positive("bucket_count", self.bucket_count)


@dataclass
class AnalyticsConfig:
    """Defaults for the analytics engine."""
    correlation_threshold: float = 0.7
    kmeans_max_iterations: int = 100
    dbscan_epsilon: float = 0.5
    dbscan_min_points: int = 5
    forecast_periods: int = 5

    def __post_init__(self):
        """Validate analytics parameters."""
        _check_unit_interval("correlation_threshold", self.correlation_threshold)
        _check_positive("kmeans_max_iterations", self.kmeans_max_iterations)
        _check_positive("dbscan_epsilon", self.dbscan_epsilon)
        _check_positive("dbscan_min_points", self.dbscan_min_points)
        if self.forecast_periods < 0:
            raise ValueError(
                f"forecast_periods must be >= 0, got {self.forecast_periods}"
            )


class Config:
    """
    Algorithm configuration loaded from environment variables.

    Environment variables can be set:
    1. In a .env file in the project root
    2. In the system environment
    3. In a container/deployment environment
    """

    def __init__(self):
        """Load configuration from environment."""
        self.search = SearchConfig(
            fuzzy_threshold=_read_env("NEXUS_FUZZY_THRESHOLD", 0.7, float),
            weighted_threshold=_read_env("NEXUS_SEARCH_THRESHOLD", 0.5, float),
        )
        self.sorting = SortingConfig(
            quicksort_threshold=_read_env("NEXUS_QUICKSORT_THRESHOLD", 10, int),
            bucket_count=_read_env("NEXUS_BUCKET_COUNT", 10, int),
        )
        self.analytics = AnalyticsConfig(
            correlation_threshold=_read_env("NEXUS_CORRELATION_THRESHOLD", 0.7, float),
            kmeans_max_iterations=_read_env("NEXUS_KMEANS_MAX_ITERATIONS", 100, int),
            dbscan_epsilon=_read_env("NEXUS_DBSCAN_EPSILON", 0.5, float),
            dbscan_min_points=_read_env("NEXUS_DBSCAN_MIN_POINTS", 5, int),
            forecast_periods=_read_env("NEXUS_FORECAST_PERIODS", 5, int),
        )
        self.log_level = os.getenv("NEXUS_LOG_LEVEL", "INFO").upper()


# Global config instance
config = Config()
