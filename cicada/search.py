"""Search pipeline: filter, rank, cite, group and flag evidence."""

import logging
from typing import List, Sequence

from .citations import citation_for
from .embeddings import BaseEmbeddingProvider
from .errors import IncompleteCitation
from .filters import filter_candidates
from .grouping import group_by_episode
from .models import Citation, Passage, RejectedResult, ScoredResult, SearchOptions, SearchResponse
from .ranking import rank_candidates
from .storage import PassageStore

logger = logging.getLogger(__name__)


def cite_results(results: Sequence[ScoredResult]):
    """
    Cite each result, dropping the ones that cannot be cited.

    Returns the kept results, their citations (index-aligned) and the
    rejected results.
    """
    kept: List[ScoredResult] = []
    citations: List[Citation] = []
    rejected: List[RejectedResult] = []
    for result in results:
        try:
            citation = citation_for(result)
        except IncompleteCitation as e:
            logger.warning("Rejected passage %s: %s", result.passage.id, e.message)
            rejected.append(RejectedResult(result=result, missing_fields=e.missing_fields))
            continue
        kept.append(result)
        citations.append(citation)
    return kept, citations, rejected


def run_search(
    query_embedding: Sequence[float],
    candidates: Sequence[Passage],
    options: SearchOptions,
    group: bool = False,
) -> SearchResponse:
    """Run the retrieval pipeline over an already-loaded candidate set."""
    filtered = filter_candidates(candidates, options)
    ranked = rank_candidates(query_embedding, filtered, options.top_k, options.min_score)
    results, citations, rejected = cite_results(ranked)

    return SearchResponse(
        results=results,
        citations=citations,
        has_direct_evidence=len(citations) > 0,
        groups=group_by_episode(results) if group else None,
        rejected=rejected,
    )


class SearchEngine:
    """Loads candidates from the store and runs the retrieval pipeline."""

    def __init__(self, embedder: BaseEmbeddingProvider, store: PassageStore):
        self.embedder = embedder
        self.store = store

    def search_vector(
        self,
        query_embedding: Sequence[float],
        options: SearchOptions,
        group: bool = False,
    ) -> SearchResponse:
        candidates = self.store.list_passages(options.episode_filter)
        return run_search(query_embedding, candidates, options, group=group)

    def search(
        self,
        query: str,
        options: SearchOptions,
        group: bool = False,
    ) -> SearchResponse:
        """Embed the query, then search. Provider errors propagate unchanged."""
        query_embedding = self.embedder.embed_query(query)
        response = self.search_vector(query_embedding, options, group=group)

        logger.info(
            "Semantic search completed: query=%r results=%d episodes=%s",
            query[:50],
            len(response.results),
            sorted(options.episode_filter) if options.episode_filter is not None else None,
        )
        return response
