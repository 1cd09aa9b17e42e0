"""Tests for the vector store backends."""

from __future__ import annotations

import math
import threading
import time
from pathlib import Path

import pytest
from sqlalchemy import inspect

from conftest import make_chunk
from workspace_index.storage import sqlite as sqlite_module
from workspace_index.core.models import ChunkMetadata, ChunkType, CodeChunk
from workspace_index.errors import DimensionMismatchError, StorageError
from workspace_index.storage import QdrantVectorStore, SqliteVectorStore, make_vector_store
from workspace_index.storage.migrations import SCHEMA_VERSION, current_version


class TestVectorStoreContract:
    """Behaviour shared by every backend (``store`` is parametrised)."""

    def test_empty_store(self, store):
        assert store.count() == 0
        assert not store.exists()
        assert store.search([1.0, 0.0], 3) == []

    def test_insert_assigns_increasing_ids(self, store):
        first = make_chunk([1.0, 0.0])
        second = make_chunk([0.0, 1.0])
        id1 = store.insert(first)
        id2 = store.insert(second)
        assert id2 > id1
        assert first.id == id1
        assert second.id == id2
        assert store.count() == 2
        assert store.exists()

    def test_self_query_ranks_first(self, store):
        vectors = [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.6, 0.8, 0.0]]
        for i, v in enumerate(vectors):
            store.insert(make_chunk(v, file_path=f"f{i}.py"))

        hits = store.search([0.6, 0.8, 0.0], 1)
        assert hits[0].file_path == "f2.py"
        assert hits[0].score == pytest.approx(1.0, abs=1e-5)

    def test_ordering(self, store):
        store.insert(make_chunk([0.0, 1.0, 0.0], file_path="c.py"))
        store.insert(make_chunk([1.0, 0.0, 0.0], file_path="a.py"))
        store.insert(make_chunk([1.0, 1.0, 0.0], file_path="b.py"))

        hits = store.search([1.0, 0.0, 0.0], 3)
        assert [h.file_path for h in hits] == ["a.py", "b.py", "c.py"]
        assert hits[0].score == pytest.approx(1.0, abs=1e-5)
        assert hits[1].score == pytest.approx(1 / math.sqrt(2), abs=1e-5)
        assert hits[2].score == pytest.approx(0.0, abs=1e-5)

    def test_ties_prefer_earlier_insert(self, store):
        first = store.insert(make_chunk([1.0, 0.0], file_path="first.py"))
        second = store.insert(make_chunk([1.0, 0.0], file_path="second.py"))
        hits = store.search([1.0, 0.0], 2)
        assert [h.id for h in hits] == [first, second]

    def test_limit(self, store):
        for i in range(5):
            store.insert(make_chunk([1.0, float(i)]))
        assert len(store.search([1.0, 0.0], 3)) == 3
        assert len(store.search([1.0, 0.0], 10)) == 5
        assert store.search([1.0, 0.0], 0) == []

    def test_unnormalised_vectors_use_cosine(self, store):
        store.insert(make_chunk([10.0, 0.0]))
        hits = store.search([0.5, 0.0], 1)
        assert hits[0].score == pytest.approx(1.0, abs=1e-5)

    def test_zero_vector_ranks_last(self, store):
        store.insert(make_chunk([-1.0, 0.0], file_path="opposite.py"))
        store.insert(make_chunk([0.0, 0.0], file_path="zero.py"))
        store.insert(make_chunk([0.0, 1.0], file_path="orthogonal.py"))
        store.insert(make_chunk([-1.0, -0.1], file_path="nearly_opposite.py"))
        hits = store.search([1.0, 0.0], 4)
        assert [h.file_path for h in hits] == ["orthogonal.py", "nearly_opposite.py", "opposite.py", "zero.py"]
        assert hits[-1].score == -1.0

    def test_metadata_round_trip(self, store):
        chunk = CodeChunk(
            file_path="src/app.ts",
            content="export const x = 1;",
            embedding=[1.0, 0.0],
            metadata=ChunkMetadata(start_line=51, end_line=100, language="ts", type=ChunkType.BLOCK),
        )
        store.insert(chunk)
        hit = store.search([1.0, 0.0], 1)[0]
        assert hit.file_path == "src/app.ts"
        assert hit.content == "export const x = 1;"
        assert hit.metadata == chunk.metadata
        assert hit.to_dict()["score"] == hit.score

    def test_clear_is_idempotent(self, store):
        store.insert(make_chunk([1.0, 0.0]))
        store.clear()
        assert store.count() == 0
        store.clear()
        assert store.count() == 0
        assert store.search([1.0, 0.0], 3) == []

    def test_ids_not_reused_after_clear(self, store):
        before = store.insert(make_chunk([1.0, 0.0]))
        store.clear()
        after = store.insert(make_chunk([1.0, 0.0]))
        assert after > before

    def test_clear_allows_new_dimension(self, store):
        store.insert(make_chunk([1.0, 0.0]))
        store.clear()
        store.insert(make_chunk([1.0, 0.0, 0.0]))
        assert store.count() == 1

    def test_insert_dimension_mismatch(self, store):
        store.insert(make_chunk([1.0, 0.0]))
        with pytest.raises(DimensionMismatchError) as exc_info:
            store.insert(make_chunk([1.0, 0.0, 0.0]))
        assert exc_info.value.expected == 2
        assert exc_info.value.actual == 3
        assert store.count() == 1

    def test_search_dimension_mismatch(self, store):
        store.insert(make_chunk([1.0, 0.0]))
        with pytest.raises(StorageError):
            store.search([1.0, 0.0, 0.0], 1)

    def test_missing_embedding_rejected(self, store):
        with pytest.raises(StorageError):
            store.insert(make_chunk([]))


class TestSqliteVectorStore:
    def test_persists_across_instances(self, tmp_path: Path):
        path = str(tmp_path / "index.db")
        store = SqliteVectorStore(path)
        store.insert(make_chunk([1.0, 0.0], file_path="kept.py"))
        store.close()

        reopened = SqliteVectorStore(path)
        assert reopened.count() == 1
        assert reopened.search([1.0, 0.0], 1)[0].file_path == "kept.py"
        reopened.close()

    def test_ids_not_reused_across_reopen(self, tmp_path: Path):
        path = str(tmp_path / "index.db")
        store = SqliteVectorStore(path)
        first = store.insert(make_chunk([1.0, 0.0]))
        store.clear()
        store.close()

        reopened = SqliteVectorStore(path)
        assert reopened.insert(make_chunk([1.0, 0.0])) > first
        reopened.close()

    def test_creates_parent_directories(self, tmp_path: Path):
        path = tmp_path / "nested" / "dir" / "index.db"
        store = SqliteVectorStore(str(path))
        assert store.count() == 0
        assert path.exists()
        store.close()

    def test_schema_is_migrated(self, sqlite_store):
        sqlite_store.count()
        engine = sqlite_store._engine
        assert current_version(engine) == SCHEMA_VERSION
        indexes = {ix["name"] for ix in inspect(engine).get_indexes("chunks")}
        assert "idx_chunks_file_path" in indexes

    def test_newer_schema_is_rejected(self, tmp_path: Path):
        path = tmp_path / "index.db"
        store = SqliteVectorStore(str(path))
        store.count()
        with store._engine.begin() as conn:
            conn.exec_driver_sql(f"PRAGMA user_version = {SCHEMA_VERSION + 1}")
        store.close()

        with pytest.raises(StorageError):
            SqliteVectorStore(str(path)).count()

    def test_unavailable_location(self, tmp_path: Path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file")
        store = SqliteVectorStore(str(blocker / "index.db"))
        with pytest.raises(StorageError):
            store.insert(make_chunk([1.0, 0.0]))
        with pytest.raises(StorageError):
            store.clear()

    def test_concurrent_first_use(self, tmp_path: Path, monkeypatch):
        real_sessionmaker = sqlite_module.sessionmaker

        def slow_sessionmaker(*args, **kwargs):
            time.sleep(0.05)
            return real_sessionmaker(*args, **kwargs)

        monkeypatch.setattr(sqlite_module, "sessionmaker", slow_sessionmaker)
        store = SqliteVectorStore(str(tmp_path / "index.db"))
        results, errors = [], []

        def worker():
            try:
                results.append(store.count())
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        store.close()

        assert errors == []
        assert results == [0] * 8

    def test_reopens_after_close(self, tmp_path: Path):
        store = SqliteVectorStore(str(tmp_path / "index.db"))
        store.insert(make_chunk([1.0, 0.0]))
        store.close()
        store.close()
        assert store.count() == 1
        store.close()

    def test_all_chunks_in_insert_order(self, sqlite_store):
        for name in ("a.py", "b.py", "c.py"):
            sqlite_store.insert(make_chunk([1.0, 0.0], file_path=name))
        assert [c.file_path for c in sqlite_store.all_chunks()] == ["a.py", "b.py", "c.py"]


class TestQdrantVectorStore:
    def test_persists_across_instances(self, tmp_path: Path):
        path = str(tmp_path / "qdrant")
        store = QdrantVectorStore(path)
        first = store.insert(make_chunk([1.0, 0.0], file_path="kept.py"))
        store.close()

        reopened = QdrantVectorStore(path)
        assert reopened.count() == 1
        assert reopened.search([1.0, 0.0], 1)[0].file_path == "kept.py"
        assert reopened.insert(make_chunk([0.0, 1.0])) > first
        reopened.close()

    def test_collection_name(self, qdrant_store):
        qdrant_store.insert(make_chunk([1.0, 0.0]))
        assert qdrant_store.client.collection_exists("workspace_chunks")

    def test_unavailable_location(self, tmp_path: Path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file")
        store = QdrantVectorStore(str(blocker / "qdrant"))
        with pytest.raises(StorageError):
            store.count()


class TestMakeVectorStore:
    def test_sqlite_default(self, cfg):
        store = make_vector_store(cfg)
        assert isinstance(store, SqliteVectorStore)
        assert store.path == cfg["vector_store"]["path"]

    def test_qdrant(self, cfg):
        cfg["vector_store"]["backend"] = "qdrant"
        store = make_vector_store(cfg)
        assert isinstance(store, QdrantVectorStore)
        assert store.collection_name == "workspace_chunks"

    def test_unknown_backend(self, cfg):
        cfg["vector_store"]["backend"] = "pinecone"
        with pytest.raises(ValueError):
            make_vector_store(cfg)
