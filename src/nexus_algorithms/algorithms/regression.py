"""
Ridge regression solved through the regularised normal equations.

Also defines the ``PredictionResult`` returned by every predictor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

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
from .exceptions import EmptyDatasetError, SingularSystemError

logger = get_logger(__name__)

Array2D = np.ndarray
PIVOT_TOLERANCE = 1e-12


@dataclass(frozen=True)
class Factor:
    """A named input and its importance to a model."""

    name: str
    importance: float


@dataclass(frozen=True)
class PredictionResult:
    """A scalar prediction with its confidence and ranked contributing factors."""

    prediction: float
    confidence: float
    factors: List[Factor] = field(default_factory=list)
    model: str = ""


@dataclass(frozen=True)
class RidgeModel:
    """
    Fitted ridge regression.

    Attributes:
        weights: Coefficients with the bias first, shape (n_features + 1,)
        alpha: L2 regularisation strength used for fitting
        confidence: ``max(0, 1 - MSE / var(targets))`` on the training data
        feature_names: Names for the non-bias coefficients
    """

    weights: np.ndarray
    alpha: float
    confidence: float
    feature_names: List[str] = field(default_factory=list)

    @property
    def bias(self) -> float:
        return float(self.weights[0])

    @property
    def coefficients(self) -> np.ndarray:
        return self.weights[1:]

    def predict(self, X):
        """Predict for one feature vector (returns float) or a matrix (returns array)."""
        X = np.asarray(X, dtype=np.float64)
        result = self.weights[0] + X @ self.weights[1:]
        return float(result) if X.ndim == 1 else result

    def factors(self) -> List[Factor]:
        """Inputs ranked by absolute coefficient, largest first."""
        names = self.feature_names or [f"Feature {i}" for i in range(len(self.coefficients))]
        ranked = [
            Factor(names[i] if i < len(names) else f"Feature {i}", float(abs(w)))
            for i, w in enumerate(self.coefficients)
        ]
        ranked.sort(key=lambda f: f.importance, reverse=True)
        return ranked


def solve_linear_system(A: Array2D, b: Sequence[float]) -> np.ndarray:
    """
    Solve ``A x = b`` by Gaussian elimination with partial pivoting.

    For each column the row with the largest-magnitude entry at or below
    the diagonal is swapped into place before eliminating the rows beneath
    it; the upper-triangular system is then solved by back substitution.

    Raises:
        ValueError: If the shapes do not describe a square system
        SingularSystemError: If a pivot is (numerically) zero
    """
    A = np.array(A, dtype=np.float64)
    b = np.array(b, dtype=np.float64)
    n = A.shape[0]
    if A.ndim != 2 or A.shape[1] != n or b.shape != (n,):
        raise ValueError(f"Expected a square system, got A{A.shape} and b{b.shape}")

    augmented = np.hstack([A, b[:, None]])
    for i in range(n):
        max_row = i + int(np.argmax(np.abs(augmented[i:, i])))
        if abs(augmented[max_row, i]) <= PIVOT_TOLERANCE:
            raise SingularSystemError(f"Matrix is singular (zero pivot in column {i})")
        if max_row != i:
            augmented[[i, max_row]] = augmented[[max_row, i]]

        for k in range(i + 1, n):
            factor = augmented[k, i] / augmented[i, i]
            augmented[k, i:] -= factor * augmented[i, i:]

    solution = np.zeros(n)
    for i in range(n - 1, -1, -1):
        solution[i] = (
            augmented[i, n] - np.dot(augmented[i, i + 1:n], solution[i + 1:])
        ) / augmented[i, i]
    return solution


def regression_confidence(
    X: Array2D, y: Sequence[float], weights: np.ndarray
) -> float:
    """``max(0, 1 - MSE / var(y))``; 0 when y has no variance."""
    X = np.asarray(X, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    predictions = weights[0] + X @ weights[1:]
    mse = float(np.mean((predictions - y) ** 2))
    variance = float(np.var(y))
    if variance == 0:
        return 0.0
    return max(0.0, 1.0 - mse / variance)


def ridge_regression(
    features: Array2D,
    targets: Sequence[float],
    alpha: float = 1.0,
    feature_names: Optional[Sequence[str]] = None,
) -> RidgeModel:
    """
    Fit ridge regression with a bias column.

    Prepends a column of ones, forms ``(X^T X + alpha I) w = X^T y`` and
    solves it with ``solve_linear_system``. The identity spans the bias
    column as well, so the bias is regularised like every other weight.

    Args:
        features: Input data of shape (n_samples, n_features)
        targets: Target values of shape (n_samples,)
        alpha: Regularisation strength (>= 0)
        feature_names: Optional names used by ``RidgeModel.factors``

    Returns:
        RidgeModel with bias-first weights and training confidence

    Raises:
        EmptyDatasetError: If there are no samples
        ValueError: If shapes disagree or alpha is negative
        SingularSystemError: If the system cannot be solved (e.g. alpha=0
            with collinear features)
    """
    X = np.asarray(features, dtype=np.float64)
    y = np.asarray(targets, dtype=np.float64)
    if X.ndim != 2:
        raise ValueError(f"features must be 2-D, got shape {X.shape}")
    if X.shape[0] == 0:
        raise EmptyDatasetError("Cannot fit a regression on zero samples")
    if y.shape != (X.shape[0],):
        raise ValueError(f"Expected {X.shape[0]} targets, got shape {y.shape}")
    if alpha < 0:
        raise ValueError(f"alpha must be >= 0, got {alpha}")

    X_bias = np.hstack([np.ones((X.shape[0], 1)), X])
    m = X_bias.shape[1]
    regularized = X_bias.T @ X_bias + alpha * np.eye(m)
    weights = solve_linear_system(regularized, X_bias.T @ y)

    confidence = regression_confidence(X, y, weights)
    logger.debug("Ridge fit on %d samples (alpha=%s, confidence=%.3f)", X.shape[0], alpha, confidence)
    return RidgeModel(
        weights=weights,
        alpha=alpha,
        confidence=confidence,
        feature_names=list(feature_names) if feature_names is not None else [],
    )


def predict_gpa(
    students: Sequence[Student],
    target: Student,
    alpha: float = 1.0,
    features: Sequence[Feature] = DEFAULT_PREDICTION_FEATURES,
) -> PredictionResult:
    """
    Predict a student's GPA from a ridge model trained on *students*.

    Args:
        students: Training records (their ``gpa`` is the target)
        target: Record to predict for
        alpha: Regularisation strength
        features: Feature extractors, in column order

    Returns:
        PredictionResult tagged "Ridge Regression"
    """
    X = feature_matrix(students, features)
    y = [s.gpa for s in students]
    model = ridge_regression(X, y, alpha, feature_labels(features))
    return PredictionResult(
        prediction=model.predict(feature_vector(target, features)),
        confidence=model.confidence,
        factors=model.factors(),
        model="Ridge Regression",
    )
