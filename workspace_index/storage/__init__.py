"""Vector storage backends (local SQLite and embedded Qdrant)."""

from .base import VectorStore
from .factory import make_vector_store
from .qdrant import QdrantVectorStore
from .sqlite import SqliteVectorStore

__all__ = [
    "VectorStore",
    "QdrantVectorStore",
    "SqliteVectorStore",
    "make_vector_store",
]
