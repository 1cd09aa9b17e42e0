"""Semantic search over the workspace index."""

from .base import Searcher
from .searcher import WorkspaceSearcher, format_hit, search_workspace

__all__ = [
    "Searcher",
    "WorkspaceSearcher",
    "format_hit",
    "search_workspace",
]
