"""Main CICADA retrieval engine facade."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from .config import CicadaConfig
from .embeddings import BaseEmbeddingProvider, create_embedding_provider
from .evidence import apply_evidence_gate
from .models import Answer, Citation, EpisodeGroups, SearchOptions, SearchResponse
from .search import SearchEngine
from .storage import FilePassageStore, PassageStore

logger = logging.getLogger(__name__)


class AnswerGenerator(ABC):
    """Produces answer text for a query from its citations (an external LLM)."""

    @abstractmethod
    def generate(
        self,
        query: str,
        citations: List[Citation],
        groups: Optional[EpisodeGroups],
    ) -> str:
        """Return natural-language answer text."""


class Cicada:
    """Semantic retrieval over embedded script passages with evidence gating."""

    def __init__(
        self,
        config: Optional[CicadaConfig] = None,
        *,
        embedder: Optional[BaseEmbeddingProvider] = None,
        store: Optional[PassageStore] = None,
    ):
        self.config = config or CicadaConfig()
        self.embedder = embedder or create_embedding_provider(
            self.config.embedding_provider, self.config.embedding_model
        )
        self.store = store or FilePassageStore(self.config.data_dir)
        self.search_engine = SearchEngine(self.embedder, self.store)

    def _options(self, options: Optional[SearchOptions]) -> SearchOptions:
        return options if options is not None else self.config.default_options()

    def search(
        self,
        query: str,
        options: Optional[SearchOptions] = None,
        *,
        group: bool = False,
    ) -> SearchResponse:
        """
        Search for passages relevant to a text query.

        Args:
            query: Query text, embedded with the configured provider
            options: Ranking limits and filters (config defaults if None)
            group: Also return results grouped by episode

        Returns:
            SearchResponse with ranked results, citations and evidence flag

        Raises:
            ProviderError: if the query could not be embedded
            DimensionMismatch: if the corpus and query dimensions differ
        """
        return self.search_engine.search(query, self._options(options), group=group)

    def search_vector(
        self,
        query_embedding: Sequence[float],
        options: Optional[SearchOptions] = None,
        *,
        group: bool = False,
    ) -> SearchResponse:
        """Search with a precomputed query embedding."""
        return self.search_engine.search_vector(query_embedding, self._options(options), group=group)

    def answer(
        self,
        query: str,
        generator: AnswerGenerator,
        options: Optional[SearchOptions] = None,
    ) -> Answer:
        """
        Search, generate an answer from the citations, and gate it.

        Answers without citations always lead with the inference marker.
        """
        response = self.search(query, options, group=True)
        text = generator.generate(query, response.citations, response.groups)
        outcome = apply_evidence_gate(response.citations, text)

        logger.info(
            "Answer produced: citations=%d direct_evidence=%s",
            len(response.citations),
            outcome.has_direct_evidence,
        )
        return Answer(
            content=outcome.text,
            citations=response.citations,
            has_direct_evidence=outcome.has_direct_evidence,
            marker_conflict=outcome.marker_conflict,
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get engine statistics."""
        counts = self.store.count_by_episode()
        return {
            "passages": sum(counts.values()),
            "episodes": counts,
            "data_dir": self.config.data_dir,
            "embedding_provider": self.config.embedding_provider,
            "embedding_model": self.config.embedding_model,
            "embedding_dim": self.config.embedding_dim,
            "cache": self.embedder.cache.stats(),
        }


def create_cicada(
    data_dir: str = "data",
    *,
    embedding_provider: str = "openai",
    embedding_model: str = "text-embedding-3-small",
    **provider_kwargs,
) -> Cicada:
    """
    Create a Cicada instance backed by a file passage store.

    Example:
        >>> cicada = create_cicada("./data")
        >>> response = cicada.search("Who is Rena?")
    """
    config = CicadaConfig(
        embedding_provider=embedding_provider,
        embedding_model=embedding_model,
        data_dir=data_dir,
    )
    embedder = create_embedding_provider(embedding_provider, embedding_model, **provider_kwargs)
    return Cicada(config, embedder=embedder)
