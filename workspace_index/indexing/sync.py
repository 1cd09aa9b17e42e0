"""Full workspace sync: collect files, clear the store, rebuild the index."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, Optional

from ..core import Embedder, LineChunker, make_embedder
from ..core.models import IndexStats
from ..storage import VectorStore, make_vector_store
from .base import ProgressCallback
from .files import collect_workspace_files
from .indexer import WorkspaceIndexer

logger = logging.getLogger(__name__)


def sync_workspace(
    root: Path,
    cfg: Dict,
    on_progress: Optional[ProgressCallback] = None,
    embedder: Optional[Embedder] = None,
    store: Optional[VectorStore] = None,
    indexer: Optional[WorkspaceIndexer] = None,
    cancel_event: Optional[threading.Event] = None,
) -> IndexStats:
    """Replace the stored snapshot with a fresh index of ``root``.

    Files are collected before anything is deleted. A failing ``clear()``
    propagates so no index is built on top of stale chunks.
    """
    if indexer is None:
        window = int(cfg.get("chunking", {}).get("window_lines", 50))
        indexer = WorkspaceIndexer(
            embedder=embedder or make_embedder(cfg),
            store=store or make_vector_store(cfg),
            chunker=LineChunker(window=window),
        )

    files = collect_workspace_files(Path(root), cfg)
    indexer.store.clear()
    logger.info(f"Syncing {len(files)} files from {root}")
    return indexer.index(files, on_progress=on_progress, cancel_event=cancel_event)


def is_workspace_indexed(store: VectorStore) -> bool:
    """True once any workspace has been indexed into ``store``."""
    return store.count() > 0
