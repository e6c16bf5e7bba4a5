"""
Vector similarity helpers for semantic search.
"""

from typing import Optional, Sequence

import numpy as np


def _as_vector(values: Optional[Sequence[float]]) -> Optional[np.ndarray]:
    """Convert input to a 1-D float array, or None if that is not possible."""
    if values is None:
        return None
    try:
        vector = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError):
        return None
    if vector.ndim != 1 or vector.size == 0:
        return None
    return vector


def cosine_similarity(a: Optional[Sequence[float]], b: Optional[Sequence[float]]) -> float:
    """
    Compute cosine similarity between two vectors.

    Args:
        a: First vector.
        b: Second vector.

    Returns:
        Dot product divided by the product of magnitudes, in [-1, 1].
        0.0 when either vector is missing, empty, non-numeric, of a
        different length than the other, or has zero magnitude.
    """
    vec_a = _as_vector(a)
    vec_b = _as_vector(b)

    if vec_a is None or vec_b is None or vec_a.shape != vec_b.shape:
        return 0.0

    norm_a = np.linalg.norm(vec_a)
    norm_b = np.linalg.norm(vec_b)

    if norm_a == 0 or norm_b == 0 or not np.isfinite(norm_a * norm_b):
        return 0.0

    score = float(np.dot(vec_a, vec_b) / (norm_a * norm_b))
    if not np.isfinite(score):
        return 0.0
    return score


if __name__ == "__main__":
    print(cosine_similarity([1.0, 0.0], [1.0, 0.0]))
    print(cosine_similarity([1.0, 0.0], [0.0, 1.0]))
    print(cosine_similarity([1.0, 2.0], [1.0]))
    print(cosine_similarity([0.0, 0.0], [1.0, 1.0]))
