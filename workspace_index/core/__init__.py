"""Core functionality for workspace_index."""

from .models import (
    ChunkMetadata,
    ChunkType,
    CodeChunk,
    IndexingProgress,
    IndexStats,
    ScoredChunk,
    WorkspaceFile,
)
from .chunking import Chunker, LineChunker, chunk_code, language_for_path
from .embeddings import Embedder, SentenceTransformersEmbedder, get_shared_embedder, make_embedder
from .similarity import cosine_similarity

__all__ = [
    "ChunkMetadata",
    "ChunkType",
    "CodeChunk",
    "IndexingProgress",
    "IndexStats",
    "ScoredChunk",
    "WorkspaceFile",
    "Chunker",
    "LineChunker",
    "chunk_code",
    "language_for_path",
    "Embedder",
    "SentenceTransformersEmbedder",
    "get_shared_embedder",
    "make_embedder",
    "cosine_similarity",
]
