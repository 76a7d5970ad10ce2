"""Similarity ranking: score, threshold, stable sort, truncate."""

from typing import List, Sequence

from .models import Passage, ScoredResult
from .similarity import cosine_similarity


def rank_candidates(
    query_embedding: Sequence[float],
    candidates: Sequence[Passage],
    top_k: int,
    min_score: float,
) -> List[ScoredResult]:
    """
    Rank candidates by cosine similarity to the query.

    Candidates scoring below ``min_score`` are dropped. Ties keep input
    order. A candidate with the wrong dimension aborts the whole ranking.

    Raises:
        DimensionMismatch: if any candidate embedding differs in length
    """
    if top_k == 0 or not candidates:
        return []

    scored = []
    for passage in candidates:
        score = cosine_similarity(query_embedding, passage.embedding, passage_id=passage.id)
        if score >= min_score:
            scored.append(ScoredResult(passage=passage, score=score))

    # list.sort is stable, including with reverse=True
    scored.sort(key=lambda r: r.score, reverse=True)
    return scored[:top_k]
