"""Cosine-similarity scoring and stable top-K selection.

Pure functions over plain vectors; no I/O.  Used by the retrieval service to
rank stored template embeddings against a query embedding.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import NamedTuple

import numpy as np

DEFAULT_TOP_K = 5


class ScoredId(NamedTuple):
    id: str
    score: float


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of *a* and *b* over their overlapping index range.

    Vectors of different length are truncated to ``min(len(a), len(b))``
    rather than rejected.  If either (truncated) vector has zero magnitude the
    similarity is ``0.0``, which keeps placeholder vectors at the bottom of a
    ranking instead of producing NaN.
    """
    length = min(len(a), len(b))
    if length == 0:
        return 0.0

    va = np.asarray(a[:length], dtype=np.float64)
    vb = np.asarray(b[:length], dtype=np.float64)

    mag_a = float(np.dot(va, va))
    mag_b = float(np.dot(vb, vb))
    if mag_a == 0.0 or mag_b == 0.0:
        return 0.0

    return float(np.dot(va, vb) / (np.sqrt(mag_a) * np.sqrt(mag_b)))


def rank_top_k(
    query: Sequence[float],
    vectors: Mapping[str, Sequence[float]],
    top_k: int = DEFAULT_TOP_K,
) -> list[ScoredId]:
    """Return the *top_k* ids of *vectors* most similar to *query*.

    Args:
        query: Query embedding.
        vectors: Mapping of id → embedding.  Iteration order is the
            tie-break: equal scores keep their relative input order.
        top_k: Maximum number of results.  Values ``<= 0`` yield ``[]``.

    Returns:
        ``ScoredId`` tuples in non-increasing score order, length
        ``min(top_k, len(vectors))``.
    """
    if top_k <= 0 or not vectors:
        return []

    scored = [ScoredId(vid, cosine_similarity(query, vec)) for vid, vec in vectors.items()]
    # sorted() is stable, including with reverse=True
    scored.sort(key=lambda item: item.score, reverse=True)
    return scored[:top_k]
