"""SQLite vector store backed by SQLAlchemy."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

import numpy as np
from sqlalchemy import Column, DateTime, Integer, LargeBinary, String, Text, create_engine, delete, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..core.models import ChunkMetadata, ChunkType, CodeChunk, ScoredChunk
from ..errors import DimensionMismatchError, StorageError
from .base import VectorStore, rank_chunks
from .migrations import upgrade_schema

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"

Base = declarative_base()


class ChunkRow(Base):
    """Stored chunk. The table itself is created by the schema revisions."""

    __tablename__ = "chunks"

    id = Column(Integer, primary_key=True)
    file_path = Column(String(1024), nullable=False)
    content = Column(Text, nullable=False)
    start_line = Column(Integer, nullable=False)
    end_line = Column(Integer, nullable=False)
    language = Column(String(64), nullable=False)
    chunk_type = Column(String(32), nullable=False, default=ChunkType.BLOCK.value)
    embedding = Column(LargeBinary, nullable=False)  # float32 bytes
    embedding_dim = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


def _row_to_chunk(row: ChunkRow) -> CodeChunk:
    return CodeChunk(
        id=row.id,
        file_path=row.file_path,
        content=row.content,
        embedding=np.frombuffer(row.embedding, dtype=np.float32).tolist(),
        metadata=ChunkMetadata(
            start_line=row.start_line,
            end_line=row.end_line,
            language=row.language,
            type=ChunkType(row.chunk_type),
        ),
    )


def _create_engine(path: str) -> Engine:
    if path == MEMORY_PATH:
        return create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    db_path = Path(path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})


class SqliteVectorStore(VectorStore):
    """Chunks in a local SQLite file, ranked by a full cosine scan.

    The database is opened and migrated on first use, so a store pointing at
    an unusable location only fails once an operation is attempted.
    """

    def __init__(self, path: str = MEMORY_PATH) -> None:
        self.path = path
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self._lock = threading.Lock()
        self._dim: Optional[int] = None

    def _ensure_session_factory(self) -> sessionmaker:
        factory = self._session_factory
        if factory is not None:
            return factory
        with self._lock:
            if self._session_factory is None:
                try:
                    engine = _create_engine(self.path)
                    upgrade_schema(engine)
                except (SQLAlchemyError, OSError, RuntimeError) as e:
                    raise StorageError(f"Could not open index at {self.path}: {e}") from e
                # The factory is the readiness flag checked without the lock.
                self._engine = engine
                self._session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
                logger.debug(f"Opened chunk store at {self.path}")
            return self._session_factory

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        session = self._ensure_session_factory()()
        try:
            yield session
            session.commit()
        except StorageError:
            session.rollback()
            raise
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Failed to {action}: {e}") from e
        finally:
            session.close()

    def clear(self) -> None:
        with self._session("clear chunks") as session:
            removed = session.execute(delete(ChunkRow)).rowcount
        self._dim = None
        logger.info(f"Cleared {removed} chunks from {self.path}")

    def _stored_dim(self, session: Session) -> Optional[int]:
        if self._dim is None:
            self._dim = session.execute(select(ChunkRow.embedding_dim).limit(1)).scalar()
        return self._dim

    def insert(self, chunk: CodeChunk) -> int:
        vec = np.asarray(chunk.embedding, dtype=np.float32).reshape(-1)
        if vec.size == 0:
            raise StorageError(f"Chunk {chunk.file_path}:{chunk.metadata.start_line} has no embedding")

        with self._session("insert chunk") as session:
            expected = self._stored_dim(session)
            if expected is not None and expected != vec.size:
                raise DimensionMismatchError(expected=expected, actual=int(vec.size))

            row = ChunkRow(
                file_path=chunk.file_path,
                content=chunk.content,
                start_line=chunk.metadata.start_line,
                end_line=chunk.metadata.end_line,
                language=chunk.metadata.language,
                chunk_type=chunk.metadata.type.value,
                embedding=vec.tobytes(),
                embedding_dim=int(vec.size),
            )
            session.add(row)
            session.flush()
            new_id = row.id

        self._dim = int(vec.size)
        chunk.id = new_id
        return new_id

    def count(self) -> int:
        with self._session("count chunks") as session:
            return int(session.execute(select(func.count(ChunkRow.id))).scalar() or 0)

    def all_chunks(self) -> List[CodeChunk]:
        """Every stored chunk in insertion order."""
        with self._session("load chunks") as session:
            rows = session.execute(select(ChunkRow).order_by(ChunkRow.id)).scalars().all()
            return [_row_to_chunk(r) for r in rows]

    def search(self, query_embedding: Sequence[float], limit: int) -> List[ScoredChunk]:
        if limit < 1:
            return []
        return rank_chunks(query_embedding, self.all_chunks(), limit)

    def close(self) -> None:
        with self._lock:
            engine = self._engine
            self._session_factory = None
            self._engine = None
        if engine is not None:
            engine.dispose()
