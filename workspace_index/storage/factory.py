"""Factory for creating vector store instances."""

from __future__ import annotations

from typing import Dict

from .base import VectorStore
from .qdrant import QdrantVectorStore
from .sqlite import SqliteVectorStore


def make_vector_store(cfg: Dict) -> VectorStore:
    vector_store_cfg = cfg.get("vector_store", {})
    backend = str(vector_store_cfg.get("backend", "sqlite")).strip().lower()

    if backend == "sqlite":
        return SqliteVectorStore(path=vector_store_cfg.get("path") or ":memory:")

    if backend == "qdrant":
        qdrant_cfg = vector_store_cfg.get("qdrant", {})
        return QdrantVectorStore(
            path=qdrant_cfg.get("path") or ":memory:",
            collection_name=qdrant_cfg.get("collection", "workspace_chunks"),
        )

    raise ValueError(f"Invalid vector_store.backend: {backend!r}")
