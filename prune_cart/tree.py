"""
Dict-node decision trees and weakest-link cost-complexity pruning.

Trees are nested dicts. Leaves have ``"type": "leaf"``; internal nodes have
``"type": "split"`` with ``feature_idx``, ``threshold``, ``left`` and
``right``. Every node, internal or not, carries the prediction it would
make as a leaf (``value`` for regression, ``proba`` for classification),
its training sample count and its resubstitution risk ``risk``: node
impurity weighted by the node's share of the training samples.
"""

import copy
from typing import Any, Optional, Tuple

import numpy as np
from sklearn.utils.validation import check_array

from ._types import Task
from .pruning_path import PruningPath

# Relative to the root risk: absorbs rounding when an effective alpha is
# compared with the alpha it was computed as
_ALPHA_RTOL = 1e-12


def tree_from_sklearn(estimator, task: Task) -> dict:
    """
    Convert a fitted scikit-learn decision tree into dict nodes.

    Parameters
    ----------
    estimator
        Fitted ``DecisionTreeRegressor`` or ``DecisionTreeClassifier``.
    task
        ``"regression"`` or ``"classification"``.

    Returns
    -------
    dict
        Root node of the converted tree.
    """
    t = estimator.tree_
    total_weight = float(t.weighted_n_node_samples[0])

    def build(node_id: int, depth: int) -> dict:
        node = {
            "depth": depth,
            "n_samples": int(t.n_node_samples[node_id]),
            "risk": float(t.impurity[node_id] * t.weighted_n_node_samples[node_id] / total_weight),
        }
        if task == "regression":
            node["value"] = float(t.value[node_id, 0, 0])
        else:
            # Older scikit-learn stores class counts, newer stores fractions
            counts = np.asarray(t.value[node_id, 0, :], dtype=float)
            node["proba"] = counts / counts.sum()

        left_id = t.children_left[node_id]
        if left_id == -1:
            node["type"] = "leaf"
            return node

        node["type"] = "split"
        node["feature_idx"] = int(t.feature[node_id])
        node["threshold"] = float(t.threshold[node_id])
        node["left"] = build(int(left_id), depth + 1)
        node["right"] = build(int(t.children_right[node_id]), depth + 1)
        return node

    return build(0, 0)


def count_leaves(node: dict) -> int:
    """Count the leaves below ``node``."""
    if node["type"] == "leaf":
        return 1
    return count_leaves(node["left"]) + count_leaves(node["right"])


def _copy_node(node: dict, drop: tuple = ("left", "right")) -> dict:
    """Copy a node's own fields without its children."""
    return copy.deepcopy({k: v for k, v in node.items() if k not in drop})


def _collapse(node: dict) -> dict:
    """Turn an internal node into a leaf keeping its own prediction."""
    leaf = _copy_node(node, drop=("left", "right", "feature_idx", "threshold"))
    leaf["type"] = "leaf"
    return leaf


def _prune_recursive(node: dict, ccp_alpha: float, tol: float) -> Tuple[dict, float, int]:
    """Return (pruned copy, risk of the pruned subtree, its leaf count)."""
    if node["type"] == "leaf":
        return _copy_node(node), node["risk"], 1

    left, left_risk, left_leaves = _prune_recursive(node["left"], ccp_alpha, tol)
    right, right_risk, right_leaves = _prune_recursive(node["right"], ccp_alpha, tol)
    branch_risk = left_risk + right_risk
    n_leaves = left_leaves + right_leaves

    effective_alpha = (node["risk"] - branch_risk) / (n_leaves - 1)
    if effective_alpha <= ccp_alpha + tol:
        return _collapse(node), node["risk"], 1

    pruned = _copy_node(node)
    pruned["left"] = left
    pruned["right"] = right
    return pruned, branch_risk, n_leaves


def cost_complexity_prune(root: dict, ccp_alpha: float) -> dict:
    """
    Prune a tree at complexity parameter ``ccp_alpha``.

    Works bottom-up: once both children are pruned, a node is collapsed when
    its effective alpha ``(R(t) - R(T_t)) / (|leaves(T_t)| - 1)`` does not
    exceed ``ccp_alpha``. The result is the smallest subtree minimising
    ``R(T) + ccp_alpha * |leaves(T)|``, so pruning twice at the same alpha
    changes nothing. The input is left untouched.

    The comparison tolerance scales with the root risk, so the result does
    not depend on the units of the response.
    """
    tol = _ALPHA_RTOL * max(root["risk"], np.finfo(float).tiny)
    pruned, _, _ = _prune_recursive(root, ccp_alpha, tol)
    return pruned


def _min_effective_alpha(node: dict) -> Tuple[float, float, int]:
    """Return (weakest-link alpha, subtree risk, leaf count) for ``node``."""
    if node["type"] == "leaf":
        return np.inf, node["risk"], 1

    left_alpha, left_risk, left_leaves = _min_effective_alpha(node["left"])
    right_alpha, right_risk, right_leaves = _min_effective_alpha(node["right"])
    branch_risk = left_risk + right_risk
    n_leaves = left_leaves + right_leaves
    own_alpha = (node["risk"] - branch_risk) / (n_leaves - 1)
    return min(own_alpha, left_alpha, right_alpha), branch_risk, n_leaves


def weakest_link_sequence(root: dict) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute the cost-complexity pruning sequence of a tree.

    Returns
    -------
    ccp_alphas : np.ndarray
        Strictly increasing complexity parameters, starting at 0.
    n_leaves : np.ndarray
        Leaf count of the tree pruned at each parameter; the last entry is 1.
    """
    current = cost_complexity_prune(root, 0.0)
    alphas = [0.0]
    sizes = [count_leaves(current)]

    while sizes[-1] > 1:
        alpha, _, _ = _min_effective_alpha(current)
        alpha = max(float(alpha), 0.0)
        current = cost_complexity_prune(current, alpha)
        alphas.append(alpha)
        sizes.append(count_leaves(current))

    return np.asarray(alphas, dtype=float), np.asarray(sizes, dtype=int)


class GrownTree:
    """
    A fitted decision tree stored as dict nodes.

    Parameters
    ----------
    root
        Root node.
    task
        ``"regression"`` or ``"classification"``.
    classes
        Class labels in the order of ``proba`` entries (classification only).
    n_features_in
        Number of features seen at fit time.
    feature_names_in
        Column names seen at fit time, or None if trained on a plain array.
    pruning_path
        Pruning path of the oversized tree this tree belongs to.
    ccp_alpha
        Complexity parameter the tree is pruned at.
    """

    def __init__(
        self,
        root: dict,
        task: Task,
        n_features_in: int,
        pruning_path: PruningPath,
        classes: Optional[np.ndarray] = None,
        feature_names_in: Optional[np.ndarray] = None,
        ccp_alpha: float = 0.0,
    ):
        self.root = root
        self.task = task
        self.classes_ = classes
        self.n_features_in_ = n_features_in
        self.feature_names_in_ = feature_names_in
        self.pruning_path = pruning_path
        self.ccp_alpha = ccp_alpha

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(task={self.task!r}, ccp_alpha={self.ccp_alpha!r}, "
            f"n_leaves={self.count_leaves()})"
        )

    def count_leaves(self) -> int:
        """Count the number of leaf nodes in the tree."""
        return count_leaves(self.root)

    def predict(self, X) -> np.ndarray:
        """Predict targets for samples in X."""
        # Split thresholds were learned on float32 features
        X = check_array(X, dtype=np.float32)
        leaves = [self._leaf_for(x) for x in X]

        if self.task == "regression":
            return np.array([leaf["value"] for leaf in leaves], dtype=float)
        return self.classes_[[int(np.argmax(leaf["proba"])) for leaf in leaves]]

    def predict_proba(self, X) -> np.ndarray:
        """Predict class probabilities for classification trees."""
        if self.task != "classification":
            raise ValueError("predict_proba is only available for classification tasks")
        X = check_array(X, dtype=np.float32)
        return np.vstack([self._leaf_for(x)["proba"] for x in X])

    def _leaf_for(self, x) -> dict:
        node = self.root
        while node["type"] != "leaf":
            node = node["left"] if x[node["feature_idx"]] <= node["threshold"] else node["right"]
        return node

    def structure(self, node: Optional[dict] = None) -> Any:
        """Nested tuple of the split structure, for comparing trees."""
        if node is None:
            node = self.root
        if node["type"] == "leaf":
            return ("leaf",)
        return (
            node["feature_idx"],
            node["threshold"],
            self.structure(node["left"]),
            self.structure(node["right"]),
        )


class OversizedTree(GrownTree):
    """Unpruned tree grown with loose stopping rules, never modified after growth."""


class PrunedTree(GrownTree):
    """Tree obtained by cost-complexity pruning of an :class:`OversizedTree`."""
