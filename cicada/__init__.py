"""
CICADA - Semantic Retrieval Engine for Script Passages

Selects, ranks, filters, groups and cites the script passages most relevant
to a query embedding, and flags answers that have no direct evidence.

Pipeline:
- Candidate filtering by episode, character, chapter and metadata
- Exact cosine-similarity ranking with a score threshold and top-k cut
- Stable ordering for equal scores
- Grouping of ranked results by episode
- Citation validation (incomplete passages are rejected, never blanked)
- Evidence gate that marks uncited answers as inference

Collaborators (embedding provider, passage store, answer generator) are
injected into the engine, so every piece can be exercised with test doubles.
"""

from .config import CicadaConfig
from .errors import (
    CicadaError,
    DimensionMismatch,
    IncompleteCitation,
    InvalidSearchOptions,
    ProviderError,
)
from .models import (
    Answer,
    Citation,
    Passage,
    ScoredResult,
    SearchOptions,
    SearchResponse,
)
from .similarity import cosine_similarity
from .filters import filter_candidates
from .ranking import rank_candidates
from .grouping import group_by_episode
from .citations import citation_for, format_citation, format_search_results
from .evidence import INFERENCE_MARKER, apply_evidence_gate, has_inference_marker
from .embeddings import (
    BaseEmbeddingProvider,
    EmbeddingCache,
    EmbeddingProvider,
    HuggingFaceEmbedding,
    JinaEmbedding,
    create_embedding_provider,
)
from .storage import FilePassageStore, InMemoryPassageStore, PassageStore
from .search import SearchEngine, run_search
from .engine import AnswerGenerator, Cicada, create_cicada

__version__ = "1.0.0"
__all__ = [
    # Core
    "CicadaConfig",
    "Cicada",
    "create_cicada",
    "SearchEngine",
    "run_search",
    "AnswerGenerator",
    # Models
    "Passage",
    "SearchOptions",
    "ScoredResult",
    "Citation",
    "SearchResponse",
    "Answer",
    # Pipeline stages
    "cosine_similarity",
    "filter_candidates",
    "rank_candidates",
    "group_by_episode",
    "format_citation",
    "citation_for",
    "format_search_results",
    "INFERENCE_MARKER",
    "apply_evidence_gate",
    "has_inference_marker",
    # Errors
    "CicadaError",
    "DimensionMismatch",
    "IncompleteCitation",
    "InvalidSearchOptions",
    "ProviderError",
    # Embeddings
    "BaseEmbeddingProvider",
    "EmbeddingCache",
    "EmbeddingProvider",
    "HuggingFaceEmbedding",
    "JinaEmbedding",
    "create_embedding_provider",
    # Stores
    "PassageStore",
    "InMemoryPassageStore",
    "FilePassageStore",
]
