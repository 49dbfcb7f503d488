"""
Complexity-parameter selection and pruning.

The selector reads a scored pruning path, picks one complexity parameter
under an explicit policy, and asks the tree model for the subtree pruned at
that parameter.
"""

import logging
import math
import numbers
from typing import Sequence, Union

from ._types import SelectionPolicy
from .exceptions import EmptyPathError, InvalidParameterError
from .pruning_path import CandidateSubtree, PruningPath
from .tree import GrownTree, PrunedTree, cost_complexity_prune

logger = logging.getLogger(__name__)

SELECTION_POLICIES = ("min_error", "first_min", "one_se")


def _as_path(path: Union[PruningPath, Sequence[CandidateSubtree]]) -> PruningPath:
    if isinstance(path, PruningPath):
        return path
    return PruningPath(path)


def _min_error_candidate(path: PruningPath) -> CandidateSubtree:
    """Minimum-error candidate; ties go to the smallest tree."""
    best_error = min(c.estimated_error for c in path)
    tied = [c for c in path if c.estimated_error == best_error]
    return min(tied, key=lambda c: (c.tree_size, -c.complexity_parameter))


def _first_min_candidate(path: PruningPath) -> CandidateSubtree:
    """First minimum-error candidate in path order."""
    best = path[0]
    for candidate in path:
        if candidate.estimated_error < best.estimated_error:
            best = candidate
    return best


def _one_se_candidate(path: PruningPath, se_factor: float) -> CandidateSubtree:
    """Largest complexity parameter within ``se_factor`` standard errors of the minimum."""
    best = _min_error_candidate(path)
    threshold = best.estimated_error + se_factor * best.error_std_error
    viable = [c for c in path if c.estimated_error <= threshold]
    return max(viable, key=lambda c: c.complexity_parameter)


def select_optimal_complexity(
    path: Union[PruningPath, Sequence[CandidateSubtree]],
    policy: SelectionPolicy = "min_error",
    se_factor: float = 1.0,
) -> float:
    """
    Choose the complexity parameter minimising estimated prediction error.

    Parameters
    ----------
    path
        Scored pruning path, or any sequence of :class:`CandidateSubtree`.
    policy : {'min_error', 'first_min', 'one_se'}
        How to resolve the choice:

        - ``'min_error'``: minimum estimated error; among ties the smallest
          tree.
        - ``'first_min'``: the first minimum in path order (increasing
          complexity parameter), i.e. the largest tree among ties.
        - ``'one_se'``: the largest complexity parameter whose estimated
          error is within ``se_factor`` standard errors of the minimum.
    se_factor
        Width of the tolerance band for ``'one_se'``, in standard errors.

    Returns
    -------
    float
        The complexity parameter of the selected candidate, taken verbatim
        from the path.

    Raises
    ------
    EmptyPathError
        If the path has no candidates.
    ValueError
        If ``policy`` is unknown or ``se_factor`` is negative.
    """
    if policy not in SELECTION_POLICIES:
        raise ValueError(f"policy must be one of {SELECTION_POLICIES}, got {policy!r}")
    if not se_factor >= 0:
        raise ValueError(f"se_factor must be non-negative, got {se_factor!r}")

    path = _as_path(path)
    if len(path) == 0:
        raise EmptyPathError("Cannot select a complexity parameter from an empty pruning path")

    if policy == "min_error":
        chosen = _min_error_candidate(path)
    elif policy == "first_min":
        chosen = _first_min_candidate(path)
    else:
        chosen = _one_se_candidate(path, se_factor)

    logger.info(
        "Selected ccp_alpha=%.6g (%d leaves, cv error %.6g) with policy %s",
        chosen.complexity_parameter,
        chosen.tree_size,
        chosen.estimated_error,
        policy,
    )
    return chosen.complexity_parameter


def prune_at(tree: GrownTree, complexity_parameter: float) -> PrunedTree:
    """
    Return ``tree`` pruned at ``complexity_parameter``.

    The input tree is not modified; the result owns its own nodes and keeps
    the pruning path of ``tree`` so it can be pruned again.

    Raises
    ------
    InvalidParameterError
        If the parameter is negative, NaN, or exceeds the largest complexity
        parameter on the tree's pruning path.
    """
    path = tree.pruning_path
    if not isinstance(complexity_parameter, numbers.Real) or math.isnan(complexity_parameter):
        raise InvalidParameterError(
            f"complexity_parameter must be a number, got {complexity_parameter!r}"
        )
    if complexity_parameter < 0:
        raise InvalidParameterError(
            f"complexity_parameter must be non-negative, got {complexity_parameter}"
        )
    if len(path) == 0:
        raise InvalidParameterError("Tree has an empty pruning path; no pruning level is defined")
    if complexity_parameter > path.max_complexity:
        raise InvalidParameterError(
            f"complexity_parameter {complexity_parameter} exceeds the largest value on the "
            f"pruning path ({path.max_complexity})"
        )

    root = cost_complexity_prune(tree.root, float(complexity_parameter))
    pruned = PrunedTree(
        root,
        task=tree.task,
        n_features_in=tree.n_features_in_,
        pruning_path=path,
        classes=tree.classes_,
        feature_names_in=tree.feature_names_in_,
        ccp_alpha=float(complexity_parameter),
    )
    logger.debug(
        "Pruned tree at ccp_alpha=%.6g: %d -> %d leaves",
        complexity_parameter,
        tree.count_leaves(),
        pruned.count_leaves(),
    )
    return pruned
