"""
Tests for environment-driven configuration.
"""

import pytest

from nexus_algorithms.config import AnalyticsConfig, Config, SearchConfig, SortingConfig

ENV_VARS = [
    "NEXUS_FUZZY_THRESHOLD",
    "NEXUS_SEARCH_THRESHOLD",
    "NEXUS_QUICKSORT_THRESHOLD",
    "NEXUS_BUCKET_COUNT",
    "NEXUS_CORRELATION_THRESHOLD",
    "NEXUS_KMEANS_MAX_ITERATIONS",
    "NEXUS_DBSCAN_EPSILON",
    "NEXUS_DBSCAN_MIN_POINTS",
    "NEXUS_FORECAST_PERIODS",
    "NEXUS_LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every NEXUS_* variable for the duration of a test."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_config_defaults(clean_env):
    """Test defaults when no environment variables are set."""
    cfg = Config()
    assert cfg.search.fuzzy_threshold == 0.7
    assert cfg.search.weighted_threshold == 0.5
    assert cfg.sorting.quicksort_threshold == 10
    assert cfg.sorting.bucket_count == 10
    assert cfg.analytics.correlation_threshold == 0.7
    assert cfg.analytics.kmeans_max_iterations == 100
    assert cfg.analytics.dbscan_epsilon == 0.5
    assert cfg.analytics.dbscan_min_points == 5
    assert cfg.analytics.forecast_periods == 5
    assert cfg.log_level == "INFO"


def test_config_reads_environment(clean_env):
    """Test values are parsed from the environment."""
    clean_env.setenv("NEXUS_FUZZY_THRESHOLD", "0.8")
    clean_env.setenv("NEXUS_BUCKET_COUNT", "4")
    clean_env.setenv("NEXUS_DBSCAN_EPSILON", "1.25")
    clean_env.setenv("NEXUS_LOG_LEVEL", "debug")

    cfg = Config()
    assert cfg.search.fuzzy_threshold == 0.8
    assert cfg.sorting.bucket_count == 4
    assert cfg.analytics.dbscan_epsilon == 1.25
    assert cfg.log_level == "DEBUG"


def test_config_blank_value_uses_default(clean_env):
    """Test an empty variable falls back to the default."""
    clean_env.setenv("NEXUS_FORECAST_PERIODS", "  ")
    assert Config().analytics.forecast_periods == 5


def test_config_unparseable_value(clean_env):
    """Test a malformed number names the offending variable."""
    clean_env.setenv("NEXUS_QUICKSORT_THRESHOLD", "ten")
    with pytest.raises(ValueError, match="NEXUS_QUICKSORT_THRESHOLD"):
        Config()


def test_config_out_of_range_threshold(clean_env):
    """Test thresholds outside [0, 1] are rejected."""
    clean_env.setenv("NEXUS_SEARCH_THRESHOLD", "1.5")
    with pytest.raises(ValueError, match="weighted_threshold"):
        Config()


def test_section_validation():
    """Test dataclass sections validate directly."""
    with pytest.raises(ValueError):
        SearchConfig(fuzzy_threshold=-0.1)
    with pytest.raises(ValueError):
        SortingConfig(bucket_count=0)
    with pytest.raises(ValueError):
        AnalyticsConfig(forecast_periods=-1)
    with pytest.raises(ValueError):
        AnalyticsConfig(dbscan_min_points=0)
