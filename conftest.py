"""Shared fixtures for the prune_cart test suite."""
from __future__ import annotations

import pytest
from sklearn.datasets import make_classification, make_regression
from sklearn.model_selection import train_test_split

from prune_cart import PruningPath


def _toy_root() -> dict:
    """
    Three-leaf regression tree with hand-picked risks.

    The right subtree has effective alpha 0.1; once it is collapsed the
    root's effective alpha is 0.2, so the pruning sequence is
    alphas [0, 0.1, 0.2] with sizes [3, 2, 1].
    """
    return {
        "type": "split",
        "feature_idx": 0,
        "threshold": 0.5,
        "value": 2.0,
        "risk": 1.0,
        "n_samples": 30,
        "depth": 0,
        "left": {"type": "leaf", "value": 1.0, "risk": 0.3, "n_samples": 10, "depth": 1},
        "right": {
            "type": "split",
            "feature_idx": 1,
            "threshold": 0.0,
            "value": 2.5,
            "risk": 0.5,
            "n_samples": 20,
            "depth": 1,
            "left": {"type": "leaf", "value": 2.0, "risk": 0.2, "n_samples": 10, "depth": 2},
            "right": {"type": "leaf", "value": 3.0, "risk": 0.2, "n_samples": 10, "depth": 2},
        },
    }


@pytest.fixture
def toy_root():
    return _toy_root()


@pytest.fixture
def toy_path():
    return PruningPath.from_arrays(
        [0.0, 0.1, 0.2], [3, 2, 1], [0.30, 0.25, 0.50], [0.02, 0.02, 0.05]
    )


@pytest.fixture
def regression_split():
    X, y = make_regression(n_samples=300, n_features=5, n_informative=3, noise=10.0, random_state=0)
    return train_test_split(X, y, test_size=0.3, random_state=0)


@pytest.fixture
def classification_split():
    X, y = make_classification(
        n_samples=300, n_features=6, n_informative=3, n_classes=2, random_state=0
    )
    return train_test_split(X, y, test_size=0.3, random_state=0, stratify=y)

