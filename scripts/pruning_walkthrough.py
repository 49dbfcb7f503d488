"""
pruning_walkthrough.py
======================
Grow an oversized CART tree, cross-validate its cost-complexity pruning
path, pick a complexity parameter under each selection policy and compare
the pruned trees on a held-out test set.

Datasets (bundled with scikit-learn, no download needed):
- diabetes      : regression, disease progression after one year
- breast_cancer : classification, malignant vs benign

Usage:
    python pruning_walkthrough.py --dataset diabetes --folds 10 --output prune_results
"""

import os
import json
import logging
import argparse
import pandas as pd
from typing import Dict, Tuple

from sklearn.datasets import load_breast_cancer, load_diabetes
from sklearn.model_selection import train_test_split

from prune_cart import (
    SELECTION_POLICIES,
    OversizedTreeGrower,
    evaluate,
    evaluate_path,
    prune_at,
    select_optimal_complexity,
)

logger = logging.getLogger("pruning_walkthrough")


# ============================================================================
# DATASETS
# ============================================================================

def load_dataset(name: str) -> Tuple[pd.DataFrame, pd.Series, str]:
    """Return features, response and task for a bundled dataset."""
    if name == "diabetes":
        bunch = load_diabetes(as_frame=True)
        return bunch.data, bunch.target, "regression"
    if name == "breast_cancer":
        bunch = load_breast_cancer(as_frame=True)
        return bunch.data, bunch.target, "classification"
    raise ValueError(f"Unknown dataset: {name}")


DATASETS = ("diabetes", "breast_cancer")


# ============================================================================
# WORKFLOW
# ============================================================================

def run_walkthrough(
    dataset: str = "diabetes",
    folds: int = 10,
    test_size: float = 0.5,
    seed: int = 1,
    se_factor: float = 1.0,
    output_dir: str = None,
) -> Dict[str, Dict[str, float]]:
    """Run the grow / select / prune / evaluate workflow and return per-policy results."""
    X, y, task = load_dataset(dataset)
    stratify = y if task == "classification" else None
    X_tr, X_te, y_tr, y_te = train_test_split(
        X, y, test_size=test_size, random_state=seed, stratify=stratify
    )
    logger.info("%s: %d training rows, %d test rows", dataset, len(X_tr), len(X_te))

    grower = OversizedTreeGrower(task=task, n_folds=folds, random_state=seed)
    tree, path = grower.grow_oversized_tree(X_tr, y_tr)

    cp_table = path.to_frame()
    cp_table["test_error"] = list(evaluate_path(tree, X_te, y_te).values())
    print(f"\n=== {dataset}: cost-complexity pruning path ({folds}-fold CV) ===")
    print(cp_table.to_string(index=False, float_format=lambda v: f"{v:.5g}"))

    metric = "mse" if task == "regression" else "error_rate"
    results = {}
    print(f"\n=== {dataset}: selected subtrees ===")
    for policy in SELECTION_POLICIES:
        alpha = select_optimal_complexity(path, policy=policy, se_factor=se_factor)
        pruned = prune_at(tree, alpha)
        err = evaluate(pruned, X_te, y_te)
        results[policy] = {"ccp_alpha": alpha, "n_leaves": pruned.count_leaves(), metric: err}
        print(f"{policy:10s}: ccp_alpha={alpha:.5g}, leaves={pruned.count_leaves():3d}, "
              f"test {metric}={err:.4f}")

    unpruned_err = evaluate(tree, X_te, y_te)
    results["unpruned"] = {"ccp_alpha": 0.0, "n_leaves": tree.count_leaves(), metric: unpruned_err}
    print(f"{'unpruned':10s}: leaves={tree.count_leaves():3d}, test {metric}={unpruned_err:.4f}")

    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        cp_table.to_csv(os.path.join(output_dir, f"{dataset}_cp_table.csv"), index=False)
        with open(os.path.join(output_dir, f"{dataset}_selection.json"), "w") as fh:
            json.dump(results, fh, indent=2)
        logger.info("Wrote results to %s", output_dir)

    return results


# ============================================================================
# CLI
# ============================================================================

if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Cross-validated cost-complexity pruning walkthrough"
    )
    parser.add_argument("--dataset", choices=DATASETS, default="diabetes", help="Dataset to use")
    parser.add_argument("--folds", type=int, default=10, help="Cross-validation folds")
    parser.add_argument("--test-size", type=float, default=0.5, help="Held-out fraction")
    parser.add_argument("--se-factor", type=float, default=1.0, help="Band for the 1-SE policy")
    parser.add_argument("--seed", type=int, default=1, help="Random seed for reproducibility")
    parser.add_argument("--output", type=str, default=None, help="Output directory for results")
    parser.add_argument("--verbose", action="store_true", help="Log fold progress")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    run_walkthrough(
        dataset=args.dataset,
        folds=args.folds,
        test_size=args.test_size,
        seed=args.seed,
        se_factor=args.se_factor,
        output_dir=args.output,
    )
