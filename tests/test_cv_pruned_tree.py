"""Tests for the CVPrunedTree estimator."""

import numpy as np
import pandas as pd
import pytest
from sklearn.base import clone
from sklearn.model_selection import cross_val_score
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from prune_cart import CVPrunedTree, PrunedTree, SchemaMismatchError


def test_fit_predict_regression(regression_split):
    X_tr, X_te, y_tr, _ = regression_split
    model = CVPrunedTree(n_folds=5, random_state=0).fit(X_tr, y_tr)

    assert isinstance(model.tree_, PrunedTree)
    assert model.ccp_alpha_ in model.path_.complexity_parameters
    assert model.tree_.ccp_alpha == model.ccp_alpha_
    assert model.predict(X_te).shape == (len(X_te),)
    assert model.fit_time_sec_ >= 0
    assert model.n_features_in_ == X_tr.shape[1]
    assert model.count_leaves() >= 1


def test_fit_predict_classification(classification_split):
    X_tr, X_te, y_tr, y_te = classification_split
    model = CVPrunedTree(task="classification", n_folds=5, random_state=0).fit(X_tr, y_tr)

    proba = model.predict_proba(X_te)
    assert proba.shape == (len(X_te), 2)
    np.testing.assert_allclose(proba.sum(axis=1), 1.0)
    assert set(model.predict(X_te)) <= set(model.classes_)
    assert 0.0 <= model.score(X_te, y_te) <= 1.0


def test_pruned_tree_no_larger_than_unpruned(regression_split):
    X_tr, _, y_tr, _ = regression_split
    model = CVPrunedTree(n_folds=5, random_state=0).fit(X_tr, y_tr)
    assert model.count_leaves() <= model.path_[0].tree_size


def test_one_se_gives_simpler_tree(regression_split):
    X_tr, _, y_tr, _ = regression_split
    min_err = CVPrunedTree(n_folds=5, random_state=0).fit(X_tr, y_tr)
    one_se = CVPrunedTree(selection_policy="one_se", n_folds=5, random_state=0).fit(X_tr, y_tr)

    assert one_se.ccp_alpha_ >= min_err.ccp_alpha_
    assert one_se.count_leaves() <= min_err.count_leaves()


def test_cp_table_marks_selection(regression_split):
    X_tr, _, y_tr, _ = regression_split
    model = CVPrunedTree(n_folds=5, random_state=0).fit(X_tr, y_tr)
    table = model.cp_table_

    assert isinstance(table, pd.DataFrame)
    assert table["selected"].sum() == 1
    row = table[table["selected"]].iloc[0]
    assert row["ccp_alpha"] == model.ccp_alpha_
    assert row["cv_error"] == table["cv_error"].min()


def test_predict_before_fit_raises():
    model = CVPrunedTree()
    with pytest.raises(ValueError, match="not fitted"):
        model.predict(np.zeros((2, 3)))
    with pytest.raises(ValueError, match="not fitted"):
        _ = model.cp_table_
    assert model.count_leaves() == 0


def test_predict_proba_regression_raises(regression_split):
    X_tr, X_te, y_tr, _ = regression_split
    model = CVPrunedTree(n_folds=3, random_state=0).fit(X_tr, y_tr)
    with pytest.raises(ValueError, match="only available for classification"):
        model.predict_proba(X_te)


def test_dataframe_schema_enforced():
    rng = np.random.RandomState(1)
    X = pd.DataFrame(rng.normal(size=(150, 3)), columns=["price", "income", "advertising"])
    y = 3 * X["price"] + rng.normal(size=150)
    model = CVPrunedTree(n_folds=3, random_state=0).fit(X, y)

    assert list(model.feature_names_in_) == ["price", "income", "advertising"]
    with pytest.raises(SchemaMismatchError):
        model.predict(X.drop(columns="advertising"))


def test_refit_on_array_drops_column_names():
    rng = np.random.RandomState(2)
    X = pd.DataFrame(rng.normal(size=(120, 3)), columns=["a", "b", "c"])
    y = 2 * X["a"] + rng.normal(size=120)
    model = CVPrunedTree(n_folds=3, random_state=0).fit(X, y)
    assert list(model.feature_names_in_) == ["a", "b", "c"]

    model.fit(X.to_numpy(), y.to_numpy())
    assert not hasattr(model, "feature_names_in_")
    assert model.tree_.feature_names_in_ is None
    assert model.predict(X.to_numpy()).shape == (120,)


@pytest.mark.parametrize(
    "kwargs, match",
    [
        ({"task": "survival"}, "task must be"),
        ({"selection_policy": "which_min"}, "selection_policy"),
    ],
)
def test_invalid_configuration(kwargs, match):
    with pytest.raises(ValueError, match=match):
        CVPrunedTree(**kwargs)


@pytest.mark.parametrize(
    "kwargs, match",
    [
        ({"task": "survival"}, "task must be"),
        ({"selection_policy": "which_min"}, "selection_policy"),
        ({"n_folds": 1}, "n_folds"),
    ],
)
def test_invalid_configuration_set_after_construction(regression_split, kwargs, match):
    X_tr, _, y_tr, _ = regression_split
    model = CVPrunedTree(n_folds=3).set_params(**kwargs)
    with pytest.raises(ValueError, match=match):
        model.fit(X_tr, y_tr)


def test_sklearn_compatibility(regression_split):
    """Test sklearn API compatibility."""
    X_tr, _, y_tr, _ = regression_split

    model = CVPrunedTree(n_folds=3, random_state=0)
    assert clone(model).get_params() == model.get_params()

    scores = cross_val_score(model, X_tr, y_tr, cv=3, scoring="r2")
    assert len(scores) == 3

    pipe = Pipeline([("scaler", StandardScaler()), ("model", CVPrunedTree(n_folds=3))])
    pipe.fit(X_tr, y_tr)
    assert pipe.predict(X_tr).shape == y_tr.shape
