"""Embedding models for semantic search."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from ..errors import EmbeddingError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "sentence-transformers/all-MiniLM-L6-v2"


def l2_normalize(vec: Any) -> np.ndarray:
    """Scale ``vec`` to unit length; a zero vector is returned unchanged."""
    arr = np.asarray(vec, dtype=np.float32).reshape(-1)
    norm = float(np.linalg.norm(arr))
    if norm > 0:
        arr = arr / norm
    return arr.astype(np.float32)


class Embedder:
    """Abstract base class for embedding models."""

    @property
    def dimension(self) -> Optional[int]:
        """Output dimensionality, if known."""
        return None

    def embed(self, text: str) -> List[float]:
        """Embed a single text into a unit-length vector."""
        raise NotImplementedError

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """Embed multiple texts; output ``i`` belongs to input ``i``."""
        return [self.embed(text) for text in texts]


class SentenceTransformersEmbedder(Embedder):
    """Embedder using SentenceTransformers library.

    The model is loaded on first use and kept for the life of the process.
    Concurrent first callers wait on the same load instead of starting their
    own.
    """

    def __init__(
        self,
        model_name: str = DEFAULT_MODEL,
        device: Optional[str] = None,
        loader: Optional[Callable[[str], Any]] = None,
    ) -> None:
        self.model_name = model_name
        self.device = device
        self._loader = loader or self._load_sentence_transformer
        self._model = None
        self._lock = threading.Lock()

    def _load_sentence_transformer(self, model_name: str):
        from sentence_transformers import SentenceTransformer  # type: ignore

        return SentenceTransformer(model_name, device=self.device)

    @property
    def loaded(self) -> bool:
        return self._model is not None

    @property
    def dimension(self) -> Optional[int]:
        if self._model is None:
            return None
        return self._model.get_sentence_embedding_dimension()

    def get_model(self):
        """Return the model handle, loading it on the first call."""
        model = self._model
        if model is not None:
            return model

        with self._lock:
            if self._model is None:
                logger.info(f"Loading embedding model {self.model_name}")
                try:
                    self._model = self._loader(self.model_name)
                except Exception as e:
                    raise EmbeddingError(
                        f"Could not load embedding model {self.model_name!r}: {e}"
                    ) from e
                logger.info(f"Embedding model {self.model_name} loaded")
            return self._model

    def embed(self, text: str) -> List[float]:
        """Embed text using mean-pooled SentenceTransformers output."""
        model = self.get_model()
        try:
            arr = model.encode(
                text,
                normalize_embeddings=True,
                show_progress_bar=False,
                convert_to_numpy=True,
            )
        except Exception as e:
            raise EmbeddingError(f"Embedding failed: {e}") from e
        return l2_normalize(arr).tolist()


_SHARED: Dict[str, SentenceTransformersEmbedder] = {}
_SHARED_LOCK = threading.Lock()


def get_shared_embedder(model_name: str = DEFAULT_MODEL) -> SentenceTransformersEmbedder:
    """Process-wide embedder for ``model_name`` (one instance per model)."""
    with _SHARED_LOCK:
        embedder = _SHARED.get(model_name)
        if embedder is None:
            embedder = SentenceTransformersEmbedder(model_name)
            _SHARED[model_name] = embedder
        return embedder


def make_embedder(cfg: Dict) -> Embedder:
    """Create embedder from config.

    Args:
        cfg: Configuration dictionary

    Returns:
        The shared Embedder for the configured model. The model itself is
        not loaded until the first embedding is requested.

    Raises:
        ValueError: If the configured backend is not supported
    """
    emb_cfg = cfg.get("embedding", {})
    backend = str(emb_cfg.get("backend", "sentence_transformers")).strip().lower()
    if backend != "sentence_transformers":
        raise ValueError(f"Invalid embedding.backend: {backend!r}")

    model_name = emb_cfg.get("sentence_transformers_model", DEFAULT_MODEL)
    return get_shared_embedder(model_name)
