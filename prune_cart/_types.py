"""Type definitions and protocols for prune_cart."""

from typing import TYPE_CHECKING, Any, Literal, Protocol

from numpy.typing import NDArray

if TYPE_CHECKING:
    from .pruning_path import PruningPath
    from .tree import OversizedTree


class TreeGrowerProtocol(Protocol):
    """Capability interface of a tree-growing collaborator."""

    def grow_oversized_tree(
        self, X: NDArray[Any], y: NDArray[Any]
    ) -> "tuple[OversizedTree, PruningPath]":
        """
        Grow an oversized tree and compute its cross-validated pruning path.

        Parameters
        ----------
        X
            Training feature matrix.
        y
            Training targets.

        Returns
        -------
        tuple[OversizedTree, PruningPath]
            The unpruned tree and its scored pruning path.
        """
        ...


# Type aliases for better readability
Task = Literal["regression", "classification"]
SelectionPolicy = Literal["min_error", "first_min", "one_se"]
