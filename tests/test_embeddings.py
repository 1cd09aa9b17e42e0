"""Tests for the embedding layer."""

from __future__ import annotations

import os
import threading
import time

import numpy as np
import pytest

from workspace_index.core.embeddings import (
    SentenceTransformersEmbedder,
    get_shared_embedder,
    l2_normalize,
    make_embedder,
)
from workspace_index.errors import EmbeddingError


class StubModel:
    """Stands in for a loaded SentenceTransformer."""

    def __init__(self, dim: int = 4, fail: bool = False) -> None:
        self.dim = dim
        self.fail = fail
        self.encoded = []

    def get_sentence_embedding_dimension(self) -> int:
        return self.dim

    def encode(self, text, **kwargs):
        if self.fail:
            raise RuntimeError("encode exploded")
        self.encoded.append(text)
        vec = np.zeros(self.dim, dtype=np.float32)
        vec[0], vec[1] = 3.0, 4.0
        return vec


class CountingLoader:
    def __init__(self, model=None, delay: float = 0.0) -> None:
        self.model = model or StubModel()
        self.delay = delay
        self.calls = 0

    def __call__(self, model_name: str):
        self.calls += 1
        time.sleep(self.delay)
        return self.model


class TestL2Normalize:
    def test_unit_length(self):
        assert np.linalg.norm(l2_normalize([3.0, 4.0])) == pytest.approx(1.0)

    def test_zero_vector_unchanged(self):
        assert l2_normalize([0.0, 0.0]).tolist() == [0.0, 0.0]


class TestSentenceTransformersEmbedder:
    def test_model_not_loaded_until_first_embed(self):
        loader = CountingLoader()
        emb = SentenceTransformersEmbedder("stub", loader=loader)
        assert not emb.loaded
        assert emb.dimension is None
        assert loader.calls == 0

        emb.embed("hello")
        assert emb.loaded
        assert emb.dimension == 4

    def test_embedding_is_unit_length(self):
        emb = SentenceTransformersEmbedder("stub", loader=CountingLoader())
        vec = emb.embed("function login() {}")
        assert len(vec) == 4
        assert float(np.linalg.norm(vec)) == pytest.approx(1.0, abs=1e-6)

    def test_text_passed_through_verbatim(self):
        model = StubModel()
        emb = SentenceTransformersEmbedder("stub", loader=CountingLoader(model))
        emb.embed("  raw query\n")
        assert model.encoded == ["  raw query\n"]

    def test_model_loaded_once(self):
        loader = CountingLoader()
        emb = SentenceTransformersEmbedder("stub", loader=loader)
        for text in ("a", "b", "c"):
            emb.embed(text)
        assert loader.calls == 1

    def test_concurrent_first_use_loads_once(self):
        loader = CountingLoader(delay=0.05)
        emb = SentenceTransformersEmbedder("stub", loader=loader)
        results = []

        def worker():
            results.append(emb.embed("text"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert loader.calls == 1
        assert len(results) == 8

    def test_load_failure_raises_embedding_error(self):
        def broken_loader(model_name):
            raise OSError("no network")

        emb = SentenceTransformersEmbedder("stub", loader=broken_loader)
        with pytest.raises(EmbeddingError, match="no network"):
            emb.embed("text")
        assert not emb.loaded

    def test_encode_failure_raises_embedding_error(self):
        emb = SentenceTransformersEmbedder("stub", loader=CountingLoader(StubModel(fail=True)))
        with pytest.raises(EmbeddingError):
            emb.embed("text")

    def test_embed_batch_preserves_order(self):
        model = StubModel()
        emb = SentenceTransformersEmbedder("stub", loader=CountingLoader(model))
        out = emb.embed_batch(["one", "two", "three"])
        assert len(out) == 3
        assert model.encoded == ["one", "two", "three"]


class TestMakeEmbedder:
    def test_shared_per_model(self, cfg):
        assert make_embedder(cfg) is make_embedder(cfg)
        assert make_embedder(cfg) is get_shared_embedder(cfg["embedding"]["sentence_transformers_model"])

    def test_does_not_load_model(self, cfg):
        cfg["embedding"]["sentence_transformers_model"] = "not-loaded-model"
        assert not make_embedder(cfg).loaded

    def test_unknown_backend(self, cfg):
        cfg["embedding"]["backend"] = "openai"
        with pytest.raises(ValueError):
            make_embedder(cfg)


@pytest.mark.skipif(
    not os.getenv("WORKSPACE_INDEX_REAL_MODEL"),
    reason="set WORKSPACE_INDEX_REAL_MODEL=1 to download and run the real model",
)
def test_real_minilm_embedding():
    emb = SentenceTransformersEmbedder()
    vec = emb.embed("def add(a, b): return a + b")
    assert len(vec) == 384
    assert float(np.linalg.norm(vec)) == pytest.approx(1.0, abs=1e-4)
