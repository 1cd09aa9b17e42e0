"""Error types raised by the workspace index."""

from __future__ import annotations


class WorkspaceIndexError(Exception):
    """Base class for workspace index errors."""


class EmbeddingError(WorkspaceIndexError):
    """The embedding model failed to load or to embed a text."""


class StorageError(WorkspaceIndexError):
    """The vector store is unavailable or a read/write failed."""


class DimensionMismatchError(StorageError):
    """A vector does not match the dimensionality already stored."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Embedding dimension {actual} does not match stored dimension {expected}")
        self.expected = expected
        self.actual = actual


class UnsupportedEnvironmentError(WorkspaceIndexError):
    """The host cannot provide a capability the caller asked for."""
