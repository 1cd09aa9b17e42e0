"""Semantic search functionality."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..core import Embedder, make_embedder
from ..core.models import ScoredChunk
from ..storage import VectorStore, make_vector_store
from .base import Searcher

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 3


class WorkspaceSearcher(Searcher):
    """Embeds the raw query and ranks stored chunks against it.

    Embedding and storage errors propagate unchanged.
    """

    def __init__(self, embedder: Embedder, store: VectorStore) -> None:
        self.embedder = embedder
        self.store = store

    def search(self, query: str, limit: int = DEFAULT_LIMIT) -> List[ScoredChunk]:
        qv = self.embedder.embed(query)
        hits = self.store.search(qv, limit)
        logger.debug(f"Query {query[:60]!r}: {len(hits)} hits")
        return hits


def search_workspace(
    query: str,
    cfg: Dict,
    limit: Optional[int] = None,
    embedder: Optional[Embedder] = None,
    store: Optional[VectorStore] = None,
) -> List[ScoredChunk]:
    if limit is None:
        limit = int(cfg.get("search", {}).get("top_k", DEFAULT_LIMIT))
    searcher = WorkspaceSearcher(
        embedder=embedder or make_embedder(cfg),
        store=store or make_vector_store(cfg),
    )
    return searcher.search(query, limit)


def format_hit(hit: ScoredChunk, max_chars: int = 1200) -> str:
    snippet = hit.content
    if len(snippet) > max_chars:
        snippet = snippet[:max_chars] + "\n…(truncated)…\n"
    meta = hit.metadata
    header = f"{hit.score:0.4f}  {hit.file_path}:{meta.start_line}-{meta.end_line}"
    return header + "\n" + snippet.rstrip() + "\n"
