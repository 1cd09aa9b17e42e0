"""Workspace indexing: chunk, embed and store every file."""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from ..core import Chunker, Embedder, LineChunker, make_embedder
from ..core.models import IndexingProgress, IndexStats, WorkspaceFile
from ..storage import VectorStore, make_vector_store
from .base import Indexer, ProgressCallback

logger = logging.getLogger(__name__)

COMPLETE = "Complete"
CANCELLED = "Cancelled"

FileLike = Union[WorkspaceFile, Mapping[str, Any]]


def _as_workspace_file(item: FileLike) -> WorkspaceFile:
    if isinstance(item, WorkspaceFile):
        return item
    return WorkspaceFile(path=str(item["path"]), content=str(item["content"]))


class WorkspaceIndexer(Indexer):
    """Populates a vector store from ``{path, content}`` pairs.

    The indexer neither filters nor clears: callers choose the files and
    decide whether the store is emptied first. A chunk that fails to embed or
    store is logged and skipped.
    """

    def __init__(
        self,
        embedder: Embedder,
        store: VectorStore,
        chunker: Optional[Chunker] = None,
    ) -> None:
        self.embedder = embedder
        self.store = store
        self.chunker = chunker or LineChunker()
        self._active_cancel: Optional[threading.Event] = None

    def cancel(self) -> None:
        """Stop the running index before its next file."""
        if self._active_cancel is not None:
            self._active_cancel.set()

    def _index_file(self, f: WorkspaceFile, stats: IndexStats) -> None:
        for chunk in self.chunker.chunk(f.content, f.path):
            try:
                chunk.embedding = self.embedder.embed(chunk.content)
                self.store.insert(chunk)
                stats.chunks_indexed += 1
            except Exception as e:
                stats.chunks_failed += 1
                logger.warning(
                    f"Failed to index chunk {f.path}:{chunk.metadata.start_line}-{chunk.metadata.end_line}: {e}",
                    exc_info=True,
                )

    def index(
        self,
        files: Sequence[FileLike],
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> IndexStats:
        cancel_event = cancel_event or threading.Event()
        self._active_cancel = cancel_event

        workspace = [_as_workspace_file(f) for f in files]
        stats = IndexStats(files_total=len(workspace))

        def emit(current_file: str) -> None:
            if on_progress is not None:
                on_progress(IndexingProgress(
                    total_files=stats.files_total,
                    processed_files=stats.files_processed,
                    current_file=current_file,
                ))

        try:
            for f in workspace:
                if cancel_event.is_set():
                    stats.cancelled = True
                    break
                emit(f.path)
                self._index_file(f, stats)
                stats.files_processed += 1
                logger.debug(f"Indexed {f.path} ({stats.files_processed}/{stats.files_total})")
        finally:
            self._active_cancel = None

        if stats.cancelled:
            logger.info(f"Indexing cancelled after {stats.files_processed}/{stats.files_total} files")
            emit(CANCELLED)
        else:
            emit(COMPLETE)

        logger.info(
            f"Indexed {stats.chunks_indexed} chunks from {stats.files_processed} files"
            f" ({stats.chunks_failed} failed)"
        )
        return stats


def index_workspace(
    files: Sequence[FileLike],
    cfg: Dict,
    on_progress: Optional[ProgressCallback] = None,
    embedder: Optional[Embedder] = None,
    store: Optional[VectorStore] = None,
) -> IndexStats:
    """Index files into the configured store (Wrapper)."""
    window = int(cfg.get("chunking", {}).get("window_lines", 50))
    indexer = WorkspaceIndexer(
        embedder=embedder or make_embedder(cfg),
        store=store or make_vector_store(cfg),
        chunker=LineChunker(window=window),
    )
    return indexer.index(files, on_progress=on_progress)
