"""Local semantic index of a source workspace."""

from .core import CodeChunk, ScoredChunk, WorkspaceFile, chunk_code
from .errors import (
    DimensionMismatchError,
    EmbeddingError,
    StorageError,
    UnsupportedEnvironmentError,
    WorkspaceIndexError,
)
from .indexing import WorkspaceIndexer, index_workspace, sync_workspace
from .search import WorkspaceSearcher, search_workspace

__version__ = "0.1.0"

__all__ = [
    "CodeChunk",
    "ScoredChunk",
    "WorkspaceFile",
    "chunk_code",
    "DimensionMismatchError",
    "EmbeddingError",
    "StorageError",
    "UnsupportedEnvironmentError",
    "WorkspaceIndexError",
    "WorkspaceIndexer",
    "index_workspace",
    "sync_workspace",
    "WorkspaceSearcher",
    "search_workspace",
]
