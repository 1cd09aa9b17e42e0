"""Cosine similarity ranking."""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

# Score given to any pair where either vector has zero norm: the lowest cosine value.
ZERO_NORM_SCORE = -1.0


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """dot(a, b) / (||a|| * ||b||), or ``ZERO_NORM_SCORE`` for a zero vector."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValueError(f"Vectors have different shapes: {va.shape} vs {vb.shape}")
    denom = float(np.linalg.norm(va)) * float(np.linalg.norm(vb))
    if denom == 0.0:
        return ZERO_NORM_SCORE
    return float(np.dot(va, vb) / denom)


def cosine_scores(query: Sequence[float], matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of ``query`` against every row of ``matrix``."""
    q = np.asarray(query, dtype=np.float64)
    m = np.asarray(matrix, dtype=np.float64)
    if m.size == 0:
        return np.zeros((0,), dtype=np.float64)

    q_norm = float(np.linalg.norm(q))
    row_norms = np.linalg.norm(m, axis=1)
    denom = row_norms * q_norm
    dots = m @ q

    scores = np.full(dots.shape, ZERO_NORM_SCORE, dtype=np.float64)
    nonzero = denom > 0
    scores[nonzero] = dots[nonzero] / denom[nonzero]
    return scores


def rank(ids: Sequence[int], scores: np.ndarray, limit: int) -> List[Tuple[int, float]]:
    """Top ``limit`` (id, score) pairs: score descending, lower id first on ties."""
    if limit < 1 or len(ids) == 0:
        return []
    id_arr = np.asarray(ids, dtype=np.int64)
    # lexsort sorts by the last key first
    order = np.lexsort((id_arr, -scores))
    return [(int(id_arr[i]), float(scores[i])) for i in order[:limit]]
