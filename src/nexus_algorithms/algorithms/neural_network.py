"""
Fully connected feed-forward network trained with online backpropagation.

Every layer, output included, uses the logistic sigmoid, so targets are
min-max scaled into [0, 1] for training and predictions are mapped back.
Inputs are z-score normalised with statistics fitted on the training set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from ..utils.logging_config import get_logger
from .exceptions import EmptyDatasetError
from .preprocessing import (
    MinMaxStats,
    ZScoreStats,
    minmax_apply,
    minmax_fit,
    minmax_invert,
    zscore_apply,
    zscore_fit,
)

logger = get_logger(__name__)

Array2D = np.ndarray
LOG_EVERY = 100


def sigmoid(z):
    return 1.0 / (1.0 + np.exp(-z))


@dataclass
class Layer:
    """Dense layer; ``weights`` has shape (n_outputs, n_inputs)."""

    weights: np.ndarray
    biases: np.ndarray

    def forward(self, inputs: np.ndarray) -> np.ndarray:
        return sigmoid(self.weights @ inputs + self.biases)


@dataclass
class NeuralNetwork:
    """
    Trained network plus the scaling needed to use it on raw inputs.

    Attributes:
        layers: Hidden layers followed by a single-unit output layer
        feature_stats: Z-score statistics of the training features
        target_stats: Min-max range of the training targets
        loss_history: Mean squared error (normalised scale) per epoch
    """

    layers: List[Layer]
    feature_stats: ZScoreStats
    target_stats: MinMaxStats
    loss_history: List[float] = field(default_factory=list)

    def forward(self, inputs: np.ndarray) -> List[np.ndarray]:
        """Activations of every layer, starting with the input itself."""
        activations = [np.asarray(inputs, dtype=np.float64)]
        for layer in self.layers:
            activations.append(layer.forward(activations[-1]))
        return activations

    def predict_normalized(self, x: Sequence[float]) -> float:
        """Output in [0, 1] for one raw feature vector."""
        z = zscore_apply(np.asarray(x, dtype=np.float64)[None, :], self.feature_stats)[0]
        return float(self.forward(z)[-1][0])

    def predict(self, x: Sequence[float]) -> float:
        """Prediction on the original target scale for one raw feature vector."""
        return float(minmax_invert(self.predict_normalized(x), self.target_stats))


def _init_layers(sizes: Sequence[int], rng: np.random.Generator) -> List[Layer]:
    return [
        Layer(
            weights=rng.uniform(-1.0, 1.0, size=(n_out, n_in)),
            biases=rng.uniform(-1.0, 1.0, size=n_out),
        )
        for n_in, n_out in zip(sizes[:-1], sizes[1:])
    ]


def _backward(
    network: NeuralNetwork, activations: List[np.ndarray], target: float, learning_rate: float
) -> None:
    """One gradient step; all deltas use the weights from before the update."""
    output = activations[-1]
    delta = (output - target) * output * (1.0 - output)
    deltas = [delta]
    for i in range(len(network.layers) - 1, 0, -1):
        a = activations[i]
        delta = (network.layers[i].weights.T @ delta) * a * (1.0 - a)
        deltas.append(delta)
    deltas.reverse()

    for layer, delta, inputs in zip(network.layers, deltas, activations[:-1]):
        layer.weights -= learning_rate * np.outer(delta, inputs)
        layer.biases -= learning_rate * delta


def train_network(
    features: Array2D,
    targets: Sequence[float],
    hidden_layers: Sequence[int] = (10, 5),
    learning_rate: float = 0.01,
    epochs: int = 1000,
    seed: Optional[int] = 0,
    rng: Optional[np.random.Generator] = None,
) -> NeuralNetwork:
    """
    Train a sigmoid network by per-sample gradient descent on squared error.

    Args:
        features: Input data of shape (n_samples, n_features)
        targets: Target values of shape (n_samples,)
        hidden_layers: Width of each hidden layer
        learning_rate: Step size
        epochs: Passes over the training set
        seed: Random seed for weight initialisation (ignored if rng given)
        rng: Optional numpy random generator

    Returns:
        NeuralNetwork with its scaling statistics and loss history

    Raises:
        EmptyDatasetError: If there are no samples
        ValueError: If shapes disagree or a hyperparameter is invalid
    """
    X = np.asarray(features, dtype=np.float64)
    y = np.asarray(targets, dtype=np.float64)
    if X.ndim != 2:
        raise ValueError(f"features must be 2-D, got shape {X.shape}")
    if X.shape[0] == 0:
        raise EmptyDatasetError("Cannot train a network on zero samples")
    if y.shape != (X.shape[0],):
        raise ValueError(f"Expected {X.shape[0]} targets, got shape {y.shape}")
    if any(width < 1 for width in hidden_layers):
        raise ValueError(f"Hidden layer widths must be >= 1, got {tuple(hidden_layers)}")
    if epochs < 0:
        raise ValueError(f"epochs must be >= 0, got {epochs}")
    if learning_rate <= 0:
        raise ValueError(f"learning_rate must be > 0, got {learning_rate}")

    if rng is None:
        rng = np.random.default_rng(seed)

    feature_stats = zscore_fit(X)
    target_stats = minmax_fit(y)
    X_norm = zscore_apply(X, feature_stats)
    y_norm = minmax_apply(y, target_stats)

    sizes = [X.shape[1], *hidden_layers, 1]
    network = NeuralNetwork(
        layers=_init_layers(sizes, rng),
        feature_stats=feature_stats,
        target_stats=target_stats,
    )

    for epoch in range(epochs):
        total_loss = 0.0
        for x, target in zip(X_norm, y_norm):
            activations = network.forward(x)
            total_loss += float((activations[-1][0] - target) ** 2)
            _backward(network, activations, target, learning_rate)
        mean_loss = total_loss / X.shape[0]
        network.loss_history.append(mean_loss)
        if epoch % LOG_EVERY == 0:
            logger.debug("Epoch %d, loss: %.6f", epoch, mean_loss)

    logger.info(
        "Trained network %s for %d epochs (final loss %s)",
        sizes,
        epochs,
        f"{network.loss_history[-1]:.6f}" if network.loss_history else "n/a",
    )
    return network
