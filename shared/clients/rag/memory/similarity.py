"""Cosine scoring and stable top-k selection for the in-process store."""

from typing import Sequence

import numpy as np

from shared.errors import DimensionMismatch


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity dot(a, b) / (|a| * |b|).

    Returns 0.0 when either vector has zero magnitude.

    Raises:
        DimensionMismatch: If the vectors differ in length.
    """
    vec_a = np.asarray(a, dtype=np.float64)
    vec_b = np.asarray(b, dtype=np.float64)
    if vec_a.shape != vec_b.shape:
        raise DimensionMismatch(expected=vec_a.shape[0], actual=vec_b.shape[0])

    norm_a = np.linalg.norm(vec_a)
    norm_b = np.linalg.norm(vec_b)
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(np.dot(vec_a, vec_b) / (norm_a * norm_b))


def top_k(query: Sequence[float], candidates: Sequence[Sequence[float]], k: int) -> list[tuple[int, float]]:
    """Score every candidate against the query and keep the k best.

    Ties keep the candidates' original order.

    Args:
        query: The query vector.
        candidates: Candidate vectors, all of the query's dimensionality.
        k: Maximum number of results.

    Returns:
        list[tuple[int, float]]: (candidate index, cosine score), best first.

    Raises:
        DimensionMismatch: If a candidate's length differs from the query's.
    """
    if k <= 0 or len(candidates) == 0:
        return []

    q = np.asarray(query, dtype=np.float64)
    for candidate in candidates:
        if len(candidate) != q.shape[0]:
            raise DimensionMismatch(expected=len(candidate), actual=q.shape[0])
    matrix = np.asarray(candidates, dtype=np.float64)

    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(q)
    dots = matrix @ q
    scores = np.divide(dots, norms, out=np.zeros_like(dots), where=norms != 0)

    order = np.argsort(-scores, kind="stable")[:k]
    return [(int(i), float(scores[i])) for i in order]
