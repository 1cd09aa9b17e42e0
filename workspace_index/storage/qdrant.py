"""Qdrant vector store running in local embedded mode."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from qdrant_client import QdrantClient
from qdrant_client.models import Distance, PointStruct, VectorParams

from ..core.models import ChunkMetadata, ChunkType, CodeChunk, ScoredChunk
from ..errors import DimensionMismatchError, StorageError
from .base import VectorStore, rank_chunks

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"
SCROLL_BATCH = 256


class QdrantVectorStore(VectorStore):
    """Chunks stored as points of a local Qdrant collection.

    Qdrant runs in-process on a local folder (or in memory); there is no
    server. Point ids are integers handed out by this store.
    """

    def __init__(self, path: str = MEMORY_PATH, collection_name: str = "workspace_chunks"):
        self.path = path
        self.collection_name = collection_name
        self._client: Optional[QdrantClient] = None
        self._lock = threading.RLock()
        self._dim: Optional[int] = None
        self._next_id: Optional[int] = None

    @property
    def client(self) -> QdrantClient:
        if self._client is None:
            try:
                if self.path == MEMORY_PATH:
                    self._client = QdrantClient(location=MEMORY_PATH)
                else:
                    Path(self.path).expanduser().mkdir(parents=True, exist_ok=True)
                    self._client = QdrantClient(path=str(Path(self.path).expanduser()))
            except Exception as e:
                raise StorageError(f"Could not open Qdrant storage at {self.path}: {e}") from e
        return self._client

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to {action} in collection '{self.collection_name}': {e}") from e

    def _collection_exists(self) -> bool:
        return self.client.collection_exists(collection_name=self.collection_name)

    def _get_collection_vector_dim(self) -> Optional[int]:
        if self._dim is None and self._collection_exists():
            info = self.client.get_collection(collection_name=self.collection_name)
            self._dim = info.config.params.vectors.size
        return self._dim

    def _ensure_collection(self, vector_dim: int) -> None:
        # Vectors are stored as given; ranking normalises them client-side.
        self.client.create_collection(
            collection_name=self.collection_name,
            vectors_config=VectorParams(size=vector_dim, distance=Distance.DOT),
        )
        self._dim = vector_dim

    def _scroll(self, with_vectors: bool) -> Iterator:
        offset = None
        while True:
            points, next_offset = self.client.scroll(
                collection_name=self.collection_name,
                limit=SCROLL_BATCH,
                offset=offset,
                with_payload=with_vectors,
                with_vectors=with_vectors,
            )
            yield from points
            if next_offset is None:
                break
            offset = next_offset

    def _seed_next_id(self) -> int:
        if not self._collection_exists():
            return 1
        highest = 0
        for point in self._scroll(with_vectors=False):
            highest = max(highest, int(point.id))
        return highest + 1

    def clear(self) -> None:
        with self._lock, self._guard("clear points"):
            if self._collection_exists():
                self.client.delete_collection(collection_name=self.collection_name)
                logger.info(f"Deleted collection '{self.collection_name}'")
            self._dim = None

    def insert(self, chunk: CodeChunk) -> int:
        vector = [float(x) for x in chunk.embedding]
        if not vector:
            raise StorageError(f"Chunk {chunk.file_path}:{chunk.metadata.start_line} has no embedding")

        with self._lock, self._guard("insert point"):
            existing_dim = self._get_collection_vector_dim()
            if existing_dim is None:
                self._ensure_collection(vector_dim=len(vector))
            elif existing_dim != len(vector):
                raise DimensionMismatchError(expected=existing_dim, actual=len(vector))

            if self._next_id is None:
                self._next_id = self._seed_next_id()
            point_id = self._next_id

            self.client.upsert(
                collection_name=self.collection_name,
                points=[
                    PointStruct(
                        id=point_id,
                        vector=vector,
                        payload={
                            "file_path": chunk.file_path,
                            "content": chunk.content,
                            "start_line": chunk.metadata.start_line,
                            "end_line": chunk.metadata.end_line,
                            "language": chunk.metadata.language,
                            "type": chunk.metadata.type.value,
                        },
                    )
                ],
            )
            self._next_id = point_id + 1

        chunk.id = point_id
        return point_id

    def count(self) -> int:
        with self._guard("count points"):
            if not self._collection_exists():
                return 0
            return self.client.count(collection_name=self.collection_name, exact=True).count

    def all_chunks(self) -> List[CodeChunk]:
        """Every stored chunk, ordered by id."""
        with self._guard("load points"):
            if not self._collection_exists():
                return []
            chunks = []
            for point in self._scroll(with_vectors=True):
                payload = point.payload
                chunks.append(
                    CodeChunk(
                        id=int(point.id),
                        file_path=payload["file_path"],
                        content=payload["content"],
                        embedding=list(point.vector),
                        metadata=ChunkMetadata(
                            start_line=payload["start_line"],
                            end_line=payload["end_line"],
                            language=payload["language"],
                            type=ChunkType(payload.get("type", ChunkType.BLOCK.value)),
                        ),
                    )
                )
        chunks.sort(key=lambda c: c.id)
        return chunks

    def search(self, query_embedding: Sequence[float], limit: int) -> List[ScoredChunk]:
        if limit < 1:
            return []
        return rank_chunks(query_embedding, self.all_chunks(), limit)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
