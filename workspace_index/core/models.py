"""Data models for workspace_index."""

from __future__ import annotations

import dataclasses
import enum
from typing import Any, Dict, List, Optional


class ChunkType(str, enum.Enum):
    """Kind of source region a chunk covers."""

    BLOCK = "block"
    FUNCTION = "function"
    CLASS = "class"
    GLOBAL = "global"


@dataclasses.dataclass
class ChunkMetadata:
    """Position and classification of a chunk inside its file."""

    start_line: int
    end_line: int
    language: str
    type: ChunkType = ChunkType.BLOCK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_line": self.start_line,
            "end_line": self.end_line,
            "language": self.language,
            "type": self.type.value,
        }


@dataclasses.dataclass
class CodeChunk:
    """Represents a code chunk with metadata and embedding.

    ``id`` is assigned by the vector store on insert.
    """

    file_path: str
    content: str
    metadata: ChunkMetadata
    embedding: List[float] = dataclasses.field(default_factory=list)
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "file_path": self.file_path,
            "content": self.content,
            "embedding": list(self.embedding),
            "metadata": self.metadata.to_dict(),
        }


@dataclasses.dataclass
class ScoredChunk:
    """A stored chunk annotated with its similarity to a query."""

    chunk: CodeChunk
    score: float

    @property
    def id(self) -> Optional[int]:
        return self.chunk.id

    @property
    def file_path(self) -> str:
        return self.chunk.file_path

    @property
    def content(self) -> str:
        return self.chunk.content

    @property
    def metadata(self) -> ChunkMetadata:
        return self.chunk.metadata

    def to_dict(self) -> Dict[str, Any]:
        data = self.chunk.to_dict()
        data["score"] = self.score
        return data


@dataclasses.dataclass(frozen=True)
class WorkspaceFile:
    """A file handed to the indexer: relative path plus text content."""

    path: str
    content: str


@dataclasses.dataclass(frozen=True)
class IndexingProgress:
    """Progress event emitted by the indexer."""

    total_files: int
    processed_files: int
    current_file: str

    def to_dict(self, camel_case: bool = False) -> Dict[str, Any]:
        if camel_case:
            return {
                "totalFiles": self.total_files,
                "processedFiles": self.processed_files,
                "currentFile": self.current_file,
            }
        return dataclasses.asdict(self)


@dataclasses.dataclass
class IndexStats:
    """Summary of one index run."""

    files_total: int = 0
    files_processed: int = 0
    chunks_indexed: int = 0
    chunks_failed: int = 0
    cancelled: bool = False
