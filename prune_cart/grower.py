"""
OversizedTreeGrower: grows a deliberately large CART tree and scores its
cost-complexity pruning path by k-fold cross-validation.

Tree growing is delegated to scikit-learn's ``DecisionTreeRegressor`` /
``DecisionTreeClassifier``; the fitted tree is converted to dict nodes so
that every fold tree can be pruned at the exact alphas of the full tree.
"""

import logging
import time
from typing import Literal, Optional, Tuple

import numpy as np
from sklearn.base import BaseEstimator
from sklearn.metrics import accuracy_score, mean_squared_error
from sklearn.model_selection import KFold, StratifiedKFold
from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor
from sklearn.utils.validation import check_X_y

from .pruning_path import PruningPath
from .tree import (
    GrownTree,
    OversizedTree,
    cost_complexity_prune,
    tree_from_sklearn,
    weakest_link_sequence,
)

logger = logging.getLogger(__name__)


class OversizedTreeGrower(BaseEstimator):
    """
    Grow an oversized tree and compute its cross-validated pruning path.

    Parameters
    ----------
    task : {'regression', 'classification'}
        Type of response.
    min_samples_split : int
        Minimum number of samples a node needs before a split is attempted.
    min_samples_leaf : int
        Minimum number of samples in each leaf.
    min_impurity_decrease : float
        A split is only made if it decreases weighted impurity by at least
        this much.
    max_depth : int or None
        Maximum depth of the oversized tree.
    n_folds : int
        Number of cross-validation folds used to score the path.
    max_alphas : int or None
        Granularity of the path: if the pruning sequence is longer, it is
        subsampled evenly to this many candidates, always keeping the
        unpruned and root-only ends.
    shuffle : bool
        Shuffle samples before splitting into folds.
    random_state : int or None
        Seed for tree growing and fold assignment.
    """

    def __init__(
        self,
        task: Literal["regression", "classification"] = "regression",
        min_samples_split: int = 20,
        min_samples_leaf: int = 7,
        min_impurity_decrease: float = 0.0,
        max_depth: Optional[int] = 30,
        n_folds: int = 10,
        max_alphas: Optional[int] = None,
        shuffle: bool = True,
        random_state: Optional[int] = None,
    ):
        self.task = task
        self.min_samples_split = min_samples_split
        self.min_samples_leaf = min_samples_leaf
        self.min_impurity_decrease = min_impurity_decrease
        self.max_depth = max_depth
        self.n_folds = n_folds
        self.max_alphas = max_alphas
        self.shuffle = shuffle
        self.random_state = random_state
        self._check_config()

    def _check_config(self):
        if self.task not in ("regression", "classification"):
            raise ValueError("task must be 'regression' or 'classification'.")
        if self.n_folds < 2:
            raise ValueError("n_folds must be at least 2 to estimate a standard error")
        if self.max_alphas is not None and self.max_alphas < 2:
            raise ValueError("max_alphas must be None or at least 2")
        if self.min_impurity_decrease < 0:
            raise ValueError("min_impurity_decrease must be non-negative")

    def grow_oversized_tree(self, X, y) -> Tuple[OversizedTree, PruningPath]:
        """
        Grow the oversized tree on ``(X, y)`` and score its pruning path.

        Parameters
        ----------
        X : array-like or DataFrame of shape (n_samples, n_features)
            Training features. Column names of a DataFrame become the
            tree's feature schema.
        y : array-like of shape (n_samples,)
            Training responses.

        Returns
        -------
        tree : OversizedTree
            The unpruned tree.
        path : PruningPath
            Candidate subtrees with cross-validated error estimates.
        """
        self._check_config()
        start_time = time.time()
        columns = getattr(X, "columns", None)
        feature_names = None
        if columns is not None:
            feature_names = np.asarray([str(c) for c in columns], dtype=object)
        X, y = check_X_y(X, y, accept_sparse=False)

        full = self._make_cart().fit(X, y)
        root = tree_from_sklearn(full, self.task)
        alphas, n_leaves = weakest_link_sequence(root)
        alphas, n_leaves = self._thin_path(alphas, n_leaves)
        logger.info(
            "Grew oversized tree with %d leaves; pruning path has %d candidates",
            n_leaves[0],
            len(alphas),
        )

        fold_errors = self._cross_validate(X, y, alphas)
        cv_error = fold_errors.mean(axis=0)
        cv_std_error = fold_errors.std(axis=0, ddof=1) / np.sqrt(self.n_folds)

        path = PruningPath.from_arrays(alphas, n_leaves, cv_error, cv_std_error)
        tree = OversizedTree(
            root,
            task=self.task,
            n_features_in=X.shape[1],
            pruning_path=path,
            classes=full.classes_ if self.task == "classification" else None,
            feature_names_in=feature_names,
            ccp_alpha=0.0,
        )
        logger.debug("Pruning path computed in %.3fs", time.time() - start_time)
        return tree, path

    # ========================================================================
    # INTERNAL METHODS
    # ========================================================================

    def _make_cart(self):
        params = dict(
            min_samples_split=self.min_samples_split,
            min_samples_leaf=self.min_samples_leaf,
            min_impurity_decrease=self.min_impurity_decrease,
            max_depth=self.max_depth,
            random_state=self.random_state,
        )
        if self.task == "classification":
            return DecisionTreeClassifier(criterion="gini", **params)
        return DecisionTreeRegressor(criterion="squared_error", **params)

    def _thin_path(self, alphas: np.ndarray, n_leaves: np.ndarray):
        """Subsample the path to at most ``max_alphas`` candidates."""
        if self.max_alphas is None or alphas.size <= self.max_alphas:
            return alphas, n_leaves
        idx = np.unique(np.linspace(0, alphas.size - 1, self.max_alphas, dtype=int))
        return alphas[idx], n_leaves[idx]

    def _make_folds(self):
        random_state = self.random_state if self.shuffle else None
        if self.task == "classification":
            return StratifiedKFold(
                n_splits=self.n_folds, shuffle=self.shuffle, random_state=random_state
            )
        return KFold(n_splits=self.n_folds, shuffle=self.shuffle, random_state=random_state)

    def _cross_validate(self, X: np.ndarray, y: np.ndarray, alphas: np.ndarray) -> np.ndarray:
        """Return an (n_folds, n_alphas) array of held-out errors."""
        fold_errors = np.zeros((self.n_folds, alphas.size))

        for k, (tr, va) in enumerate(self._make_folds().split(X, y)):
            fold_cart = self._make_cart().fit(X[tr], y[tr])
            fold_root = tree_from_sklearn(fold_cart, self.task)
            classes = fold_cart.classes_ if self.task == "classification" else None

            for j, alpha in enumerate(alphas):
                fold_tree = GrownTree(
                    cost_complexity_prune(fold_root, float(alpha)),
                    task=self.task,
                    n_features_in=X.shape[1],
                    pruning_path=PruningPath(),
                    classes=classes,
                )
                y_hat = fold_tree.predict(X[va])
                if self.task == "regression":
                    fold_errors[k, j] = mean_squared_error(y[va], y_hat)
                else:
                    fold_errors[k, j] = 1.0 - accuracy_score(y[va], y_hat)

            logger.debug("Fold %d/%d: %d training samples", k + 1, self.n_folds, len(tr))

        return fold_errors
