"""
CVPrunedTree: CART with cross-validated cost-complexity pruning.

Grows an oversized tree, scores its pruning path by k-fold
cross-validation, selects a complexity parameter under an explicit
tie-break policy and keeps only the pruned tree.
"""

import time
from typing import Literal, Optional

from sklearn.base import BaseEstimator
from sklearn.metrics import accuracy_score, r2_score

from ._types import SelectionPolicy, TreeGrowerProtocol
from .evaluation import check_schema
from .grower import OversizedTreeGrower
from .selection import SELECTION_POLICIES, prune_at, select_optimal_complexity


class CVPrunedTree(BaseEstimator):
    """
    Decision tree pruned at a cross-validated complexity parameter.

    Parameters
    ----------
    task : {'regression', 'classification'}
        Type of response.
    selection_policy : {'min_error', 'first_min', 'one_se'}
        How the complexity parameter is chosen from the scored path; see
        :func:`prune_cart.select_optimal_complexity`.
    se_factor : float
        Tolerance band, in standard errors, for the ``'one_se'`` policy.
    min_samples_split, min_samples_leaf, min_impurity_decrease, max_depth
        Stopping rules of the oversized tree.
    n_folds : int
        Cross-validation folds.
    max_alphas : int or None
        Maximum number of candidates on the pruning path.
    random_state : int or None
        Seed for tree growing and fold assignment.

    Attributes
    ----------
    tree_ : PrunedTree
        The selected pruned tree.
    path_ : PruningPath
        Cross-validated pruning path of the oversized tree.
    ccp_alpha_ : float
        Selected complexity parameter.
    classes_ : ndarray or None
        Class labels (classification only).
    n_features_in_ : int
        Number of features seen during fit.
    fit_time_sec_ : float
        Wall-clock time of the last fit.
    """

    def __init__(
        self,
        task: Literal["regression", "classification"] = "regression",
        selection_policy: SelectionPolicy = "min_error",
        se_factor: float = 1.0,
        min_samples_split: int = 20,
        min_samples_leaf: int = 7,
        min_impurity_decrease: float = 0.0,
        max_depth: Optional[int] = 30,
        n_folds: int = 10,
        max_alphas: Optional[int] = None,
        random_state: Optional[int] = None,
    ):
        self.task = task
        self.selection_policy = selection_policy
        self.se_factor = se_factor
        self.min_samples_split = min_samples_split
        self.min_samples_leaf = min_samples_leaf
        self.min_impurity_decrease = min_impurity_decrease
        self.max_depth = max_depth
        self.n_folds = n_folds
        self.max_alphas = max_alphas
        self.random_state = random_state
        self._check_config()

        # Initialize fitted attributes
        self.tree_ = None
        self.path_ = None
        self.ccp_alpha_ = None
        self.classes_ = None
        self.fit_time_sec_ = None

    def _check_config(self):
        if self.task not in ("regression", "classification"):
            raise ValueError("task must be 'regression' or 'classification'.")
        if self.selection_policy not in SELECTION_POLICIES:
            raise ValueError(f"selection_policy must be one of {SELECTION_POLICIES}")

    def _make_grower(self) -> TreeGrowerProtocol:
        return OversizedTreeGrower(
            task=self.task,
            min_samples_split=self.min_samples_split,
            min_samples_leaf=self.min_samples_leaf,
            min_impurity_decrease=self.min_impurity_decrease,
            max_depth=self.max_depth,
            n_folds=self.n_folds,
            max_alphas=self.max_alphas,
            random_state=self.random_state,
        )

    def fit(self, X, y):
        """Grow, cross-validate and prune a tree on the training data."""
        self._check_config()
        start_time = time.time()
        # Column names from an earlier fit must not outlive a refit on a plain array
        if hasattr(self, "feature_names_in_"):
            del self.feature_names_in_

        oversized, path = self._make_grower().grow_oversized_tree(X, y)
        self.ccp_alpha_ = select_optimal_complexity(
            path, policy=self.selection_policy, se_factor=self.se_factor
        )
        # The oversized tree is only needed to extract the pruned one
        self.tree_ = prune_at(oversized, self.ccp_alpha_)
        self.path_ = path
        self.classes_ = self.tree_.classes_
        self.n_features_in_ = self.tree_.n_features_in_
        if self.tree_.feature_names_in_ is not None:
            self.feature_names_in_ = self.tree_.feature_names_in_

        self.fit_time_sec_ = time.time() - start_time
        return self

    def predict(self, X):
        """Predict targets for samples in X."""
        if self.tree_ is None:
            raise ValueError("Tree not fitted yet")
        check_schema(self.tree_, X)
        return self.tree_.predict(X)

    def predict_proba(self, X):
        """Predict class probabilities for classification tasks."""
        if self.task != "classification":
            raise ValueError("predict_proba is only available for classification tasks")
        if self.tree_ is None:
            raise ValueError("Tree not fitted yet")
        check_schema(self.tree_, X)
        return self.tree_.predict_proba(X)

    def score(self, X, y):
        """Return the mean accuracy (classification) or R² (regression)."""
        y_pred = self.predict(X)

        if self.task == "regression":
            return r2_score(y, y_pred)
        else:
            return accuracy_score(y, y_pred)

    def count_leaves(self):
        """Count the number of leaf nodes in the pruned tree."""
        if self.tree_ is None:
            return 0
        return self.tree_.count_leaves()

    @property
    def cp_table_(self):
        """Pruning path as a DataFrame, marking the selected row."""
        if self.path_ is None:
            raise ValueError("Tree not fitted yet")
        table = self.path_.to_frame()
        table["selected"] = table["ccp_alpha"] == self.ccp_alpha_
        return table
