"""Searcher Interface."""

from __future__ import annotations

from typing import List

from ..core.models import ScoredChunk


class Searcher:
    """Abstract base class for semantic search."""

    def search(self, query: str, limit: int = 3) -> List[ScoredChunk]:
        """Search for code chunks semantically similar to query.

        Args:
            query: Search query text
            limit: Number of results to return

        Returns:
            List of ScoredChunk sorted by descending score
        """
        raise NotImplementedError
