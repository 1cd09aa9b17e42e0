"""Abstract vector storage interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Sequence

import numpy as np

from ..core.models import CodeChunk, ScoredChunk
from ..core.similarity import cosine_scores, rank
from ..errors import DimensionMismatchError


class VectorStore(ABC):
    """Abstract base class for vector storage backends.

    A store holds one workspace snapshot. Ids are assigned on insert and
    are never reused while the store is open.
    """

    @abstractmethod
    def clear(self) -> None:
        """Delete every stored chunk. Safe to call on an empty store."""
        pass

    @abstractmethod
    def insert(self, chunk: CodeChunk) -> int:
        """Append one chunk and return its new id."""
        pass

    @abstractmethod
    def count(self) -> int:
        """Number of stored chunks."""
        pass

    @abstractmethod
    def search(self, query_embedding: Sequence[float], limit: int) -> List[ScoredChunk]:
        """Return the ``limit`` chunks most similar to ``query_embedding``."""
        pass

    def exists(self) -> bool:
        """Check if the store has data."""
        return self.count() > 0

    def close(self) -> None:
        """Release backend resources."""
        pass


def rank_chunks(
    query_embedding: Sequence[float],
    chunks: List[CodeChunk],
    limit: int,
) -> List[ScoredChunk]:
    """Full linear scan shared by all backends.

    ``chunks`` must carry ids and embeddings of equal length.
    """
    if limit < 1 or not chunks:
        return []

    dim = len(chunks[0].embedding)
    if len(query_embedding) != dim:
        raise DimensionMismatchError(expected=dim, actual=len(query_embedding))

    matrix = np.asarray([c.embedding for c in chunks], dtype=np.float64)
    scores = cosine_scores(query_embedding, matrix)
    by_id: Dict[int, CodeChunk] = {c.id: c for c in chunks}
    return [
        ScoredChunk(chunk=by_id[chunk_id], score=score)
        for chunk_id, score in rank([c.id for c in chunks], scores, limit)
    ]
