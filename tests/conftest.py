"""Shared test fixtures for workspace_index."""

from __future__ import annotations

import zlib
from pathlib import Path
from typing import Iterable, List

import numpy as np
import pytest

from workspace_index.core.embeddings import Embedder, l2_normalize
from workspace_index.core.models import ChunkMetadata, CodeChunk
from workspace_index.errors import EmbeddingError
from workspace_index.storage import QdrantVectorStore, SqliteVectorStore


class FakeEmbedder(Embedder):
    """Deterministic bag-of-words embedder.

    Each whitespace token is hashed into one of ``dim`` buckets. Texts that
    contain any of ``fail_on`` raise ``EmbeddingError``.
    """

    def __init__(self, dim: int = 32, fail_on: Iterable[str] = ()) -> None:
        self.dim = dim
        self.fail_on = list(fail_on)
        self.calls: List[str] = []

    @property
    def dimension(self) -> int:
        return self.dim

    def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        for marker in self.fail_on:
            if marker in text:
                raise EmbeddingError(f"cannot embed text containing {marker!r}")
        vec = np.zeros(self.dim, dtype=np.float32)
        for token in text.split():
            vec[zlib.crc32(token.encode("utf-8")) % self.dim] += 1.0
        if not vec.any():
            vec[0] = 1.0
        return l2_normalize(vec).tolist()


def make_chunk(embedding, file_path: str = "a.py", content: str = "x", start: int = 1) -> CodeChunk:
    return CodeChunk(
        file_path=file_path,
        content=content,
        embedding=list(embedding),
        metadata=ChunkMetadata(start_line=start, end_line=start, language="py"),
    )


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def sqlite_store():
    store = SqliteVectorStore(":memory:")
    yield store
    store.close()


@pytest.fixture
def qdrant_store():
    store = QdrantVectorStore(":memory:")
    yield store
    store.close()


@pytest.fixture(params=["sqlite", "qdrant"])
def store(request):
    """Every vector store backend, in memory."""
    if request.param == "sqlite":
        s = SqliteVectorStore(":memory:")
    else:
        s = QdrantVectorStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def cfg(tmp_path: Path, monkeypatch) -> dict:
    """Config with the index home redirected into ``tmp_path``."""
    from workspace_index.config import load_config

    for var in ("WORKSPACE_INDEX_BACKEND", "WORKSPACE_INDEX_MODEL", "WORKSPACE_INDEX_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("WORKSPACE_INDEX_HOME", str(tmp_path / "home"))
    return load_config()


@pytest.fixture
def tmp_workspace(tmp_path: Path) -> Path:
    """A small source tree with files that should and should not be indexed."""
    root = tmp_path / "workspace"
    (root / "src").mkdir(parents=True)
    (root / "src" / "auth.py").write_text(
        "def login(user, password):\n    return check_password(user, password)\n"
    )
    (root / "src" / "app.ts").write_text("export function render() {\n  return 1;\n}\n")
    (root / "main.go").write_text("package main\n\nfunc main() {}\n")

    (root / "README.md").write_text("# Not code\n")
    (root / "node_modules" / "lib").mkdir(parents=True)
    (root / "node_modules" / "lib" / "index.js").write_text("module.exports = {};\n")
    (root / ".git").mkdir()
    (root / ".git" / "hooks.py").write_text("print('hidden')\n")
    (root / ".hidden").mkdir()
    (root / ".hidden" / "secret.py").write_text("TOKEN = 1\n")
    (root / "src" / "blob.py").write_bytes(b"abc\x00def\n")
    return root
