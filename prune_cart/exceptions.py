"""Exception types raised by prune_cart."""


class PruneCartError(Exception):
    """Base class for all prune_cart errors."""


class EmptyPathError(PruneCartError, ValueError):
    """Raised when selection is requested on a pruning path with no candidates."""


class InvalidParameterError(PruneCartError, ValueError):
    """Raised when a complexity parameter lies outside the range of the pruning path."""


class SchemaMismatchError(PruneCartError, ValueError):
    """Raised when evaluation data does not match the features a tree was trained on."""
