"""Indexer Interface."""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from ..core.models import IndexingProgress, IndexStats, WorkspaceFile

ProgressCallback = Callable[[IndexingProgress], None]


class Indexer:
    """Abstract base class for workspace indexing."""

    def index(
        self,
        files: Sequence[WorkspaceFile],
        on_progress: Optional[ProgressCallback] = None,
    ) -> IndexStats:
        raise NotImplementedError
