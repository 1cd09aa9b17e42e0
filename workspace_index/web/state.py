"""Per-app workspace state shared by the routes."""

from __future__ import annotations

import dataclasses
import threading
from typing import Any, Dict, Optional

from fastapi import Request

from ..core import Embedder
from ..core.models import IndexingProgress, IndexStats
from ..indexing import WorkspaceIndexer
from ..search import WorkspaceSearcher
from ..storage import VectorStore


class IndexJob:
    """Status of the single index run allowed per process."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.status = "idle"  # idle, indexing, indexed, cancelled, error
        self.progress: Optional[IndexingProgress] = None
        self.stats: Optional[IndexStats] = None
        self.error: Optional[str] = None
        self.cancel_event = threading.Event()

    @property
    def running(self) -> bool:
        return self.status == "indexing"

    def start(self) -> bool:
        """Mark a run as started; False if one is already running."""
        with self._lock:
            if self.status == "indexing":
                return False
            self.status = "indexing"
            self.progress = None
            self.stats = None
            self.error = None
            self.cancel_event = threading.Event()
            return True

    def update(self, progress: IndexingProgress) -> None:
        with self._lock:
            self.progress = progress

    def finish(self, stats: IndexStats) -> None:
        with self._lock:
            self.stats = stats
            self.status = "cancelled" if stats.cancelled else "indexed"

    def fail(self, message: str) -> None:
        with self._lock:
            self.error = message
            self.status = "error"

    def cancel(self) -> bool:
        with self._lock:
            if self.status != "indexing":
                return False
            self.cancel_event.set()
            return True

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "status": self.status,
                "progress": self.progress.to_dict() if self.progress else None,
                "stats": dataclasses.asdict(self.stats) if self.stats else None,
                "error": self.error,
            }


@dataclasses.dataclass
class WorkspaceState:
    cfg: Dict
    embedder: Embedder
    store: VectorStore
    indexer: WorkspaceIndexer
    searcher: WorkspaceSearcher
    job: IndexJob = dataclasses.field(default_factory=IndexJob)


def get_state(request: Request) -> WorkspaceState:
    return request.app.state.workspace
