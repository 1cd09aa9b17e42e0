"""Indexing functionality for workspace_index."""

from .files import collect_workspace_files, iter_files
from .indexer import WorkspaceIndexer, index_workspace
from .sync import is_workspace_indexed, sync_workspace

__all__ = [
    "WorkspaceIndexer",
    "collect_workspace_files",
    "index_workspace",
    "is_workspace_indexed",
    "iter_files",
    "sync_workspace",
]
