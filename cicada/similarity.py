"""Cosine similarity over fixed-dimension embeddings."""

from typing import Optional, Sequence

import numpy as np

from .errors import DimensionMismatch


def cosine_similarity(
    a: Sequence[float],
    b: Sequence[float],
    passage_id: Optional[str] = None,
) -> float:
    """
    Cosine similarity of two equal-length vectors.

    A zero-norm operand yields 0.0 so thresholding stays well-defined.

    Raises:
        DimensionMismatch: if the vectors differ in length
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise DimensionMismatch(va.size, vb.size, passage_id=passage_id)

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    score = float(np.dot(va, vb) / (norm_a * norm_b))
    # Rounding can push identical vectors just past 1.0
    return max(-1.0, min(1.0, score))
