# evaluation.py
import numpy as np
from typing import Dict

from sklearn.metrics import accuracy_score, mean_squared_error

from .exceptions import SchemaMismatchError
from .selection import prune_at
from .tree import GrownTree


# -------------------------------
# Schema checks
# -------------------------------
def check_schema(tree: GrownTree, X) -> None:
    """
    Verify that ``X`` has the features ``tree`` was trained on.

    When the tree was trained on a DataFrame its column names must match in
    name and order; otherwise only the number of features is compared.
    """
    columns = getattr(X, "columns", None)
    if tree.feature_names_in_ is not None and columns is not None:
        expected = [str(c) for c in tree.feature_names_in_]
        got = [str(c) for c in columns]
        if got != expected:
            missing = sorted(set(expected) - set(got))
            unexpected = sorted(set(got) - set(expected))
            raise SchemaMismatchError(
                f"Feature columns do not match training schema "
                f"(missing={missing}, unexpected={unexpected}, expected order={expected})"
            )

    n_features = np.shape(X)[1] if np.ndim(X) == 2 else None
    if n_features != tree.n_features_in_:
        raise SchemaMismatchError(
            f"X has {n_features} features, but the tree was trained on {tree.n_features_in_}"
        )


# -------------------------------
# Test-set error
# -------------------------------
def evaluate(tree: GrownTree, X_test, y_test) -> float:
    """
    Test-set error of a (pruned) tree.

    Parameters
    ----------
    tree : GrownTree
        Fitted tree, usually the result of :func:`prune_cart.prune_at`.
    X_test : array-like or DataFrame of shape (n_samples, n_features)
        Test features, with the same schema as the training data.
    y_test : array-like of shape (n_samples,)
        True responses.

    Returns
    -------
    error : float
        Mean squared error for regression trees, misclassification rate for
        classification trees.

    Raises
    ------
    SchemaMismatchError
        If the test features do not match the training schema, or X_test
        and y_test differ in length.
    ValueError
        If the test set is empty.
    """
    check_schema(tree, X_test)
    y_test = np.asarray(y_test).ravel()
    if len(y_test) != np.shape(X_test)[0]:
        raise SchemaMismatchError(
            f"X_test has {np.shape(X_test)[0]} rows but y_test has {len(y_test)}"
        )
    if len(y_test) == 0:
        raise ValueError("Cannot evaluate on an empty test set")

    y_pred = tree.predict(X_test)

    if tree.task == "regression":
        return float(mean_squared_error(y_test, y_pred))
    return float(1.0 - accuracy_score(y_test, y_pred))


def evaluate_path(tree: GrownTree, X_test, y_test) -> Dict[float, float]:
    """
    Test-set error of ``tree`` pruned at every complexity parameter on its path.

    Returns
    -------
    errors : dict[float, float]
        Complexity parameter -> test error, in path order.
    """
    check_schema(tree, X_test)
    return {
        alpha: evaluate(prune_at(tree, alpha), X_test, y_test)
        for alpha in tree.pruning_path.complexity_parameters
    }
