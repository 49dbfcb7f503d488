"""
Pruning path data model.

A pruning path is the discrete sequence of nested subtrees produced by
cost-complexity pruning of one oversized tree, each scored by a
cross-validated error estimate.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence, Union, overload

import pandas as pd


@dataclass(frozen=True)
class CandidateSubtree:
    """One step of a cost-complexity pruning path."""

    complexity_parameter: float
    tree_size: int
    estimated_error: float
    error_std_error: float

    def __post_init__(self):
        if not math.isfinite(self.complexity_parameter) or self.complexity_parameter < 0:
            raise ValueError(
                f"complexity_parameter must be a finite non-negative number, "
                f"got {self.complexity_parameter!r}"
            )
        if int(self.tree_size) != self.tree_size or self.tree_size < 1:
            raise ValueError(f"tree_size must be a positive integer, got {self.tree_size!r}")
        if not self.estimated_error >= 0:
            raise ValueError(
                f"estimated_error must be non-negative, got {self.estimated_error!r}"
            )
        if not self.error_std_error >= 0:
            raise ValueError(
                f"error_std_error must be non-negative, got {self.error_std_error!r}"
            )
        # Normalise numpy scalars so candidates compare and hash as plain numbers
        object.__setattr__(self, "complexity_parameter", float(self.complexity_parameter))
        object.__setattr__(self, "tree_size", int(self.tree_size))
        object.__setattr__(self, "estimated_error", float(self.estimated_error))
        object.__setattr__(self, "error_std_error", float(self.error_std_error))


class PruningPath(Sequence[CandidateSubtree]):
    """
    Immutable, ordered sequence of :class:`CandidateSubtree`.

    Candidates are kept in increasing order of complexity parameter, which
    makes tree sizes non-increasing along the path. Input in any other order
    (an rpart cp table lists the largest parameter first) is sorted on
    construction.

    Parameters
    ----------
    candidates
        Candidate subtrees of a single oversized tree. May be empty.

    Raises
    ------
    ValueError
        If two candidates share a complexity parameter, or if a larger
        parameter corresponds to a larger tree.
    """

    __slots__ = ("_candidates",)

    def __init__(self, candidates: Iterable[CandidateSubtree] = ()):
        ordered = sorted(candidates, key=lambda c: (c.complexity_parameter, -c.tree_size))

        for prev, curr in zip(ordered, ordered[1:]):
            if curr.complexity_parameter == prev.complexity_parameter:
                raise ValueError(
                    f"Duplicate complexity parameter {curr.complexity_parameter} in pruning path"
                )
            if curr.tree_size > prev.tree_size:
                raise ValueError(
                    "Pruning path is not monotone: complexity parameter "
                    f"{curr.complexity_parameter} has {curr.tree_size} leaves but "
                    f"{prev.complexity_parameter} has only {prev.tree_size}"
                )

        self._candidates = tuple(ordered)

    @classmethod
    def from_arrays(cls, ccp_alphas, n_leaves, cv_errors, cv_std_errors) -> "PruningPath":
        """Build a path from parallel arrays, as produced by the tree grower."""
        lengths = {len(ccp_alphas), len(n_leaves), len(cv_errors), len(cv_std_errors)}
        if len(lengths) != 1:
            raise ValueError("Pruning path arrays must all have the same length")
        return cls(
            CandidateSubtree(a, s, e, se)
            for a, s, e, se in zip(ccp_alphas, n_leaves, cv_errors, cv_std_errors)
        )

    @overload
    def __getitem__(self, index: int) -> CandidateSubtree: ...

    @overload
    def __getitem__(self, index: slice) -> "PruningPath": ...

    def __getitem__(self, index: Union[int, slice]):
        if isinstance(index, slice):
            return PruningPath(self._candidates[index])
        return self._candidates[index]

    def __len__(self) -> int:
        return len(self._candidates)

    def __iter__(self) -> Iterator[CandidateSubtree]:
        return iter(self._candidates)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PruningPath):
            return NotImplemented
        return self._candidates == other._candidates

    def __hash__(self) -> int:
        return hash(self._candidates)

    def __repr__(self) -> str:
        return f"PruningPath({list(self._candidates)!r})"

    @property
    def complexity_parameters(self) -> tuple:
        """Complexity parameters in path order."""
        return tuple(c.complexity_parameter for c in self._candidates)

    @property
    def max_complexity(self) -> float:
        """Largest complexity parameter on the path."""
        if not self._candidates:
            raise ValueError("Empty pruning path has no complexity range")
        return self._candidates[-1].complexity_parameter

    def to_frame(self) -> pd.DataFrame:
        """
        Return the path as a cp table.

        Returns
        -------
        pd.DataFrame
            One row per candidate with columns ``ccp_alpha``, ``n_leaves``,
            ``cv_error`` and ``cv_std_error``.
        """
        return pd.DataFrame(
            {
                "ccp_alpha": [c.complexity_parameter for c in self._candidates],
                "n_leaves": [c.tree_size for c in self._candidates],
                "cv_error": [c.estimated_error for c in self._candidates],
                "cv_std_error": [c.error_std_error for c in self._candidates],
            }
        )
