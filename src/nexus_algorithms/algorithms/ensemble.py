"""
Weighted ensemble of ridge regression, a decision tree and a neural network.
"""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Real
from typing import Optional, Sequence, Tuple

import numpy as np

from ..records import (
    DEFAULT_PREDICTION_FEATURES,
    Feature,
    Student,
    feature_labels,
    feature_matrix,
    feature_vector,
)
from ..utils.logging_config import get_logger
from .decision_tree import DecisionTree, build_decision_tree, predict_tree
from .neural_network import NeuralNetwork, train_network
from .regression import PredictionResult, RidgeModel, ridge_regression

logger = get_logger(__name__)

Array2D = np.ndarray

DEFAULT_WEIGHTS = (0.4, 0.3, 0.3)
ENSEMBLE_CONFIDENCE = 0.85
ENSEMBLE_MODEL_NAME = "Ensemble (Ridge + Tree + Neural)"


@dataclass(frozen=True)
class EnsembleModel:
    """Three fitted models and their blending weights (ridge, tree, network)."""

    ridge: RidgeModel
    tree: DecisionTree
    network: NeuralNetwork
    weights: Tuple[float, float, float] = DEFAULT_WEIGHTS

    def __post_init__(self):
        if len(self.weights) != 3:
            raise ValueError(f"Expected 3 ensemble weights, got {len(self.weights)}")


def _tree_value(prediction) -> float:
    # Leaves may hold non-numeric labels; those contribute nothing.
    if isinstance(prediction, Real) and not isinstance(prediction, bool):
        return float(prediction)
    return 0.0


def ensemble_predict(model: EnsembleModel, x: Sequence[float]) -> PredictionResult:
    """
    Weighted average of the three model predictions for one raw feature vector.

    The network output is mapped back to the target scale before blending.
    Factors come from the ridge model.
    """
    x = np.asarray(x, dtype=np.float64)
    predictions = (
        model.ridge.predict(x),
        _tree_value(predict_tree(model.tree, x)),
        model.network.predict(x),
    )
    blended = float(sum(w * p for w, p in zip(model.weights, predictions)))
    return PredictionResult(
        prediction=blended,
        confidence=ENSEMBLE_CONFIDENCE,
        factors=model.ridge.factors(),
        model=ENSEMBLE_MODEL_NAME,
    )


def create_ensemble(
    features: Array2D,
    targets: Sequence[float],
    feature_names: Optional[Sequence[str]] = None,
    seed: Optional[int] = 0,
) -> EnsembleModel:
    """
    Train the standard ensemble.

    Ridge with alpha=1, a depth-5 decision tree and an ``[8, 4]`` network
    trained for 500 epochs at learning rate 0.01.
    """
    X = np.asarray(features, dtype=np.float64)
    y = np.asarray(targets, dtype=np.float64)
    ridge = ridge_regression(X, y, alpha=1.0, feature_names=feature_names)
    tree = build_decision_tree(X, y.tolist(), max_depth=5)
    network = train_network(
        X, y, hidden_layers=(8, 4), learning_rate=0.01, epochs=500, seed=seed
    )
    logger.info("Ensemble trained on %d samples", X.shape[0])
    return EnsembleModel(ridge=ridge, tree=tree, network=network)


def predict_gpa_ensemble(
    students: Sequence[Student],
    target: Student,
    features: Sequence[Feature] = DEFAULT_PREDICTION_FEATURES,
    seed: Optional[int] = 0,
) -> PredictionResult:
    """
    Predict a student's GPA with the standard ensemble trained on *students*.

    Args:
        students: Training records (their ``gpa`` is the target)
        target: Record to predict for
        features: Feature extractors, in column order
        seed: Seed for the network's weight initialisation

    Returns:
        PredictionResult tagged with ``ENSEMBLE_MODEL_NAME``
    """
    X = feature_matrix(students, features)
    y = [s.gpa for s in students]
    model = create_ensemble(X, y, feature_labels(features), seed=seed)
    return ensemble_predict(model, feature_vector(target, features))
