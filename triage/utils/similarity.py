"""
Similarity utilities — cosine similarity for nearest-neighbor search.
"""

from typing import Sequence

import numpy as np


def cosine_similarity(v1: Sequence[float], v2: Sequence[float]) -> float:
    """Compute cosine similarity between two vectors. Zero norm gives 0.0."""
    if len(v1) == 0 or len(v2) == 0:
        return 0.0
    v1 = np.asarray(v1, dtype=np.float64)
    v2 = np.asarray(v2, dtype=np.float64)
    dot_product = np.dot(v1, v2)
    norm_product = np.linalg.norm(v1) * np.linalg.norm(v2)
    return float(dot_product / norm_product) if norm_product > 0 else 0.0


def cosine_similarities(query: Sequence[float], matrix: np.ndarray) -> np.ndarray:
    """
    Cosine similarity of one vector against every row of a matrix.

    Rows (or a query) with zero norm score 0.0 instead of NaN.
    """
    q = np.asarray(query, dtype=np.float64)
    m = np.asarray(matrix, dtype=np.float64)
    if m.size == 0:
        return np.zeros(m.shape[0] if m.ndim == 2 else 0, dtype=np.float64)
    dots = m @ q
    norms = np.linalg.norm(m, axis=1) * np.linalg.norm(q)
    out = np.zeros_like(dots)
    np.divide(dots, norms, out=out, where=norms > 0)
    return out
