"""Unit tests for test-set evaluation and schema checks."""

import numpy as np
import pandas as pd
import pytest

from prune_cart import (
    OversizedTree,
    OversizedTreeGrower,
    SchemaMismatchError,
    evaluate,
    evaluate_path,
    prune_at,
)


@pytest.fixture
def toy_tree(toy_root, toy_path):
    return OversizedTree(toy_root, task="regression", n_features_in=2, pruning_path=toy_path)


@pytest.fixture
def frame_tree():
    rng = np.random.RandomState(3)
    X = pd.DataFrame(rng.normal(size=(120, 3)), columns=["lstat", "rm", "age"])
    y = 2 * X["lstat"] - X["rm"] + rng.normal(scale=0.1, size=120)
    tree, _ = OversizedTreeGrower(n_folds=3, random_state=0).grow_oversized_tree(X, y)
    return tree, X, y


def test_regression_mse_exact(toy_tree):
    X = np.array([[0.0, 0.0], [1.0, -1.0], [1.0, 1.0]])
    y = np.array([1.0, 2.0, 5.0])
    # residuals 0, 0, 2
    assert evaluate(toy_tree, X, y) == pytest.approx(4.0 / 3.0)


def test_pruned_tree_error(toy_tree):
    X = np.array([[0.0, 0.0], [1.0, -1.0], [1.0, 1.0]])
    y = np.array([1.0, 2.0, 3.0])
    assert evaluate(toy_tree, X, y) == pytest.approx(0.0)
    # pruned at 0.1 the right subtree predicts 2.5 for both samples
    assert evaluate(prune_at(toy_tree, 0.1), X, y) == pytest.approx(0.5 / 3.0)


def test_classification_error_rate_bounds(classification_split):
    X_tr, X_te, y_tr, y_te = classification_split
    tree, path = OversizedTreeGrower(
        task="classification", n_folds=5, random_state=0
    ).grow_oversized_tree(X_tr, y_tr)
    for alpha in path.complexity_parameters:
        err = evaluate(prune_at(tree, alpha), X_te, y_te)
        assert 0.0 <= err <= 1.0


def test_classification_error_on_training_data(classification_split):
    X_tr, _, y_tr, _ = classification_split
    tree, _ = OversizedTreeGrower(
        task="classification", n_folds=5, random_state=0
    ).grow_oversized_tree(X_tr, y_tr)
    err = evaluate(tree, X_tr[:50], y_tr[:50])
    assert 0.0 <= err <= 1.0


def test_regression_error_nonnegative(regression_split):
    X_tr, X_te, y_tr, y_te = regression_split
    tree, _ = OversizedTreeGrower(n_folds=5, random_state=0).grow_oversized_tree(X_tr, y_tr)
    assert evaluate(tree, X_tr[:50], y_tr[:50]) >= 0.0
    assert evaluate(tree, X_te, y_te) >= 0.0


def test_wrong_feature_count_raises(toy_tree):
    with pytest.raises(SchemaMismatchError, match="features"):
        evaluate(toy_tree, np.zeros((3, 3)), np.zeros(3))


def test_one_dimensional_features_raise(toy_tree):
    with pytest.raises(SchemaMismatchError):
        evaluate(toy_tree, np.zeros(3), np.zeros(3))


def test_length_mismatch_raises(toy_tree):
    with pytest.raises(SchemaMismatchError, match="rows"):
        evaluate(toy_tree, np.zeros((3, 2)), np.zeros(4))


def test_empty_test_set_raises(toy_tree):
    with pytest.raises(ValueError, match="empty"):
        evaluate(toy_tree, np.zeros((0, 2)), np.zeros(0))


def test_dataframe_columns_checked(frame_tree):
    tree, X, y = frame_tree
    assert evaluate(tree, X, y) >= 0.0

    with pytest.raises(SchemaMismatchError, match="missing"):
        evaluate(tree, X.rename(columns={"age": "tax"}), y)
    with pytest.raises(SchemaMismatchError):
        evaluate(tree, X[["rm", "lstat", "age"]], y)


def test_dataframe_trained_tree_accepts_plain_arrays(frame_tree):
    tree, X, y = frame_tree
    assert evaluate(tree, X.to_numpy(), y.to_numpy()) == pytest.approx(evaluate(tree, X, y))


def test_evaluate_path_covers_every_candidate(toy_tree):
    X = np.array([[0.0, 0.0], [1.0, -1.0], [1.0, 1.0]])
    y = np.array([1.0, 2.0, 3.0])
    errors = evaluate_path(toy_tree, X, y)
    assert list(errors) == list(toy_tree.pruning_path.complexity_parameters)
    assert errors[0.0] == pytest.approx(0.0)
    assert errors[toy_tree.pruning_path.max_complexity] == pytest.approx(2.0 / 3.0)
