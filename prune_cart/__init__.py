"""Public package exports for prune_cart."""

from .estimator import CVPrunedTree
from .evaluation import evaluate, evaluate_path
from .exceptions import (
    EmptyPathError,
    InvalidParameterError,
    PruneCartError,
    SchemaMismatchError,
)
from .grower import OversizedTreeGrower
from .pruning_path import CandidateSubtree, PruningPath
from .selection import SELECTION_POLICIES, prune_at, select_optimal_complexity
from .tree import GrownTree, OversizedTree, PrunedTree

__all__ = [
    # Selector
    "select_optimal_complexity",
    "prune_at",
    "evaluate",
    "evaluate_path",
    "SELECTION_POLICIES",
    # Data model
    "CandidateSubtree",
    "PruningPath",
    "GrownTree",
    "OversizedTree",
    "PrunedTree",
    # Tree growing and the composed estimator
    "OversizedTreeGrower",
    "CVPrunedTree",
    # Errors
    "PruneCartError",
    "EmptyPathError",
    "InvalidParameterError",
    "SchemaMismatchError",
]

__version__ = "0.1.0"
