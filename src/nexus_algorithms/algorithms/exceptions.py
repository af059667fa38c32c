"""
Error types raised by the algorithm library.

All of them subclass ``ValueError`` so callers that already guard parameter
validation with ``except ValueError`` keep working, while callers that need
to tell the cases apart can catch the specific type.
"""

from typing import Iterable, Tuple


class EmptyDatasetError(ValueError):
    """Raised when a computation needs at least one value and got none."""


class CycleError(ValueError):
    """Raised when a prerequisite graph contains a cycle."""

    def __init__(self, remaining: Iterable[str]):
        self.remaining: Tuple[str, ...] = tuple(remaining)
        super().__init__(
            "Prerequisite graph contains a cycle; unresolved nodes: "
            + ", ".join(self.remaining)
        )


class SingularSystemError(ValueError):
    """Raised when Gaussian elimination meets a zero pivot."""
