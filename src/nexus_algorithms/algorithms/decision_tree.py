"""
Binary decision tree grown by information gain.

Thresholds are midpoints between consecutive distinct feature values.
Construction uses an explicit work list instead of recursion, so deep trees
cannot exhaust the interpreter stack.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Hashable, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..utils.logging_config import get_logger
from .exceptions import EmptyDatasetError

logger = get_logger(__name__)

Array2D = np.ndarray
MIN_GAIN = 1e-12


@dataclass(frozen=True)
class TreeLeaf:
    """Terminal node: majority target and the fraction of samples agreeing with it."""

    prediction: Any
    confidence: float
    n_samples: int = 0

    @property
    def is_leaf(self) -> bool:
        return True


@dataclass(frozen=True)
class TreeSplit:
    """Internal node: samples with ``x[feature_index] <= threshold`` go left."""

    feature_index: int
    threshold: float
    left: "DecisionTree"
    right: "DecisionTree"
    gain: float = 0.0

    @property
    def is_leaf(self) -> bool:
        return False


DecisionTree = Union[TreeLeaf, TreeSplit]


@dataclass(frozen=True)
class Split:
    feature_index: int
    threshold: float
    gain: float


def entropy(targets: Sequence[Hashable]) -> float:
    """Shannon entropy (bits) of the label distribution."""
    total = len(targets)
    if total == 0:
        return 0.0
    result = 0.0
    for count in Counter(targets).values():
        p = count / total
        result -= p * math.log2(p)
    return result


def majority_class(targets: Sequence[Hashable]) -> Tuple[Any, float]:
    """Most frequent target (first seen wins ties) and its share."""
    counts = Counter(targets)
    label, count = counts.most_common(1)[0]
    return label, count / len(targets)


def information_gain(
    column: np.ndarray, targets: Sequence[Hashable], threshold: float
) -> float:
    """Entropy reduction from splitting *column* at *threshold*."""
    left = [t for v, t in zip(column, targets) if v <= threshold]
    right = [t for v, t in zip(column, targets) if v > threshold]
    n = len(targets)
    weighted = (len(left) / n) * entropy(left) + (len(right) / n) * entropy(right)
    return entropy(targets) - weighted


def find_best_split(X: Array2D, targets: Sequence[Hashable]) -> Optional[Split]:
    """
    Best (feature, threshold) pair by information gain.

    Returns None when no candidate improves on the parent entropy.
    Earlier features and lower thresholds win ties.
    """
    best: Optional[Split] = None
    for feature_index in range(X.shape[1]):
        column = X[:, feature_index]
        unique = np.unique(column)
        for lo, hi in zip(unique[:-1], unique[1:]):
            threshold = float((lo + hi) / 2)
            gain = information_gain(column, targets, threshold)
            if gain > MIN_GAIN and (best is None or gain > best.gain):
                best = Split(feature_index, threshold, gain)
    return best


def _leaf(targets: Sequence[Hashable]) -> TreeLeaf:
    label, purity = majority_class(targets)
    return TreeLeaf(prediction=label, confidence=purity, n_samples=len(targets))


def build_decision_tree(
    features: Array2D, targets: Sequence[Hashable], max_depth: int = 10
) -> DecisionTree:
    """
    Grow a decision tree.

    A node becomes a leaf when it reaches *max_depth*, when its targets are
    all identical, or when no split has positive information gain.

    Args:
        features: Input data of shape (n_samples, n_features)
        targets: Hashable labels, one per sample
        max_depth: Maximum depth (0 gives a single leaf)

    Returns:
        Root node of the tree

    Raises:
        EmptyDatasetError: If there are no samples
        ValueError: If shapes disagree or max_depth is negative
    """
    X = np.asarray(features, dtype=np.float64)
    targets = list(targets)
    if X.ndim != 2:
        raise ValueError(f"features must be 2-D, got shape {X.shape}")
    if X.shape[0] == 0:
        raise EmptyDatasetError("Cannot build a decision tree from zero samples")
    if len(targets) != X.shape[0]:
        raise ValueError(f"Expected {X.shape[0]} targets, got {len(targets)}")
    if max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {max_depth}")

    # Pass 1: expand nodes top-down. Children are always appended after
    # their parent, so pass 2 can assemble frozen nodes bottom-up.
    plan: List[Dict[str, Any]] = [{"indices": np.arange(X.shape[0]), "depth": 0}]
    work = [0]
    while work:
        node_id = work.pop()
        entry = plan[node_id]
        idx = entry["indices"]
        node_targets = [targets[i] for i in idx]

        if entry["depth"] >= max_depth or len(set(node_targets)) <= 1:
            continue
        split = find_best_split(X[idx], node_targets)
        if split is None:
            continue

        mask = X[idx, split.feature_index] <= split.threshold
        entry["split"] = split
        entry["left"] = len(plan)
        plan.append({"indices": idx[mask], "depth": entry["depth"] + 1})
        entry["right"] = len(plan)
        plan.append({"indices": idx[~mask], "depth": entry["depth"] + 1})
        work.extend([entry["left"], entry["right"]])

    nodes: List[Optional[DecisionTree]] = [None] * len(plan)
    for node_id in range(len(plan) - 1, -1, -1):
        entry = plan[node_id]
        split = entry.get("split")
        if split is None:
            nodes[node_id] = _leaf([targets[i] for i in entry["indices"]])
        else:
            nodes[node_id] = TreeSplit(
                feature_index=split.feature_index,
                threshold=split.threshold,
                left=nodes[entry["left"]],
                right=nodes[entry["right"]],
                gain=split.gain,
            )

    logger.debug("Decision tree built with %d nodes", len(plan))
    return nodes[0]


def predict_tree(tree: DecisionTree, x: Sequence[float]) -> Any:
    """Walk the tree for one feature vector and return the leaf prediction."""
    node = tree
    while isinstance(node, TreeSplit):
        node = node.left if x[node.feature_index] <= node.threshold else node.right
    return node.prediction


def tree_depth(tree: DecisionTree) -> int:
    """Length of the longest root-to-leaf path (a lone leaf has depth 0)."""
    deepest = 0
    stack = [(tree, 0)]
    while stack:
        node, depth = stack.pop()
        if isinstance(node, TreeSplit):
            stack.append((node.left, depth + 1))
            stack.append((node.right, depth + 1))
        else:
            deepest = max(deepest, depth)
    return deepest


def count_leaves(tree: DecisionTree) -> int:
    leaves = 0
    stack = [tree]
    while stack:
        node = stack.pop()
        if isinstance(node, TreeSplit):
            stack.extend((node.left, node.right))
        else:
            leaves += 1
    return leaves
