"""
Algorithm Core Library - search, sort, analytics and prediction engines.

Every routine is a pure function over in-memory student records or numpy
arrays. The engines are independent of one another and share only the
record/feature extractors, the error types and configuration.
"""

from .exceptions import CycleError, EmptyDatasetError, SingularSystemError
from .search import (
    PrefixIndex,
    SearchCriteria,
    SearchHit,
    YearRange,
    boyer_moore_search,
    fuzzy_search,
    levenshtein_distance,
    relevance_search,
    weighted_search,
)
from .sorting import (
    SortKey,
    bucket_sort,
    hybrid_quicksort,
    multi_key_sort,
    radix_sort,
    run_merge_sort,
    topological_sort,
)
from .statistics import (
    CorrelationMatrix,
    CorrelationPair,
    StatisticalSummary,
    correlation_matrix,
    describe,
    pearson_correlation,
)
from .clustering import (
    ClusterResult,
    DensityClusterResult,
    dbscan,
    kmeans,
    silhouette_score_precomputed,
)
from .sweep import ClusterSweepConfig, ClusterSweepResult, run_cluster_sweep
from .trends import PerformancePoint, TrendAnalysis, analyze_performance_trends, analyze_trends
from .preprocessing import zscore_normalize
from .regression import Factor, PredictionResult, RidgeModel, predict_gpa, ridge_regression
from .decision_tree import TreeLeaf, TreeSplit, build_decision_tree, predict_tree
from .neural_network import NeuralNetwork, train_network
from .ensemble import EnsembleModel, create_ensemble, ensemble_predict, predict_gpa_ensemble

__all__ = [
    # Errors
    "CycleError",
    "EmptyDatasetError",
    "SingularSystemError",
    # Search
    "PrefixIndex",
    "SearchCriteria",
    "SearchHit",
    "YearRange",
    "boyer_moore_search",
    "fuzzy_search",
    "levenshtein_distance",
    "relevance_search",
    "weighted_search",
    # Sort
    "SortKey",
    "bucket_sort",
    "hybrid_quicksort",
    "multi_key_sort",
    "radix_sort",
    "run_merge_sort",
    "topological_sort",
    # Analytics
    "CorrelationMatrix",
    "CorrelationPair",
    "StatisticalSummary",
    "correlation_matrix",
    "describe",
    "pearson_correlation",
    "ClusterResult",
    "DensityClusterResult",
    "dbscan",
    "kmeans",
    "silhouette_score_precomputed",
    "ClusterSweepConfig",
    "ClusterSweepResult",
    "run_cluster_sweep",
    "PerformancePoint",
    "TrendAnalysis",
    "analyze_performance_trends",
    "analyze_trends",
    # Prediction
    "zscore_normalize",
    "Factor",
    "PredictionResult",
    "RidgeModel",
    "predict_gpa",
    "ridge_regression",
    "TreeLeaf",
    "TreeSplit",
    "build_decision_tree",
    "predict_tree",
    "NeuralNetwork",
    "train_network",
    "EnsembleModel",
    "create_ensemble",
    "ensemble_predict",
    "predict_gpa_ensemble",
]
