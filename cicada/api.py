"""FastAPI REST API wrapper for the CICADA retrieval engine."""

from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .config import CicadaConfig
from .engine import Cicada
from .errors import CicadaError, InvalidSearchOptions, ProviderError
from .log import configure_logging
from .models import SearchOptions, SearchResponse


# ============ Request/Response Models ============

class SearchRequest(BaseModel):
    """Request body for search."""
    query: str = Field(..., min_length=1, description="Search query")
    top_k: Optional[int] = Field(default=None, ge=0, le=100, description="Number of results")
    min_score: Optional[float] = Field(default=None, ge=-1.0, le=1.0, description="Similarity threshold")
    episode_ids: Optional[List[str]] = Field(default=None, description="Restrict to these episodes")
    character: Optional[str] = Field(default=None, description="Only passages featuring this character")
    chapter_id: Optional[str] = Field(default=None, description="Restrict to one chapter")
    metadata: Optional[Dict[str, str]] = Field(default=None, description="Metadata equality filters")
    group_by_episode: bool = Field(default=False, description="Also return results grouped by episode")


class CitationItem(BaseModel):
    episodeId: str
    episodeName: str
    chapterId: str
    messageId: int
    speaker: Optional[str] = None
    textENG: str
    textJPN: Optional[str] = None


class SearchResultItem(BaseModel):
    """Single ranked passage."""
    id: str
    ref: str
    score: float
    citation: CitationItem


class SearchResponseModel(BaseModel):
    results: List[SearchResultItem]
    groups: Optional[Dict[str, List[str]]] = None
    has_direct_evidence: bool
    rejected: int
    query: str
    count: int


class StatsResponse(BaseModel):
    passages: int
    episodes: Dict[str, int]
    data_dir: str
    embedding_provider: str
    embedding_model: str
    embedding_dim: int
    cache: Dict[str, Any]


def _to_response_model(query: str, response: SearchResponse) -> SearchResponseModel:
    items = [
        SearchResultItem(
            id=result.passage.id,
            ref=result.ref,
            score=result.score,
            citation=CitationItem(**citation.to_dict()),
        )
        for result, citation in zip(response.results, response.citations)
    ]
    groups = None
    if response.groups is not None:
        groups = {
            episode_id: [r.passage.id for r in results]
            for episode_id, results in response.groups.items()
        }
    return SearchResponseModel(
        results=items,
        groups=groups,
        has_direct_evidence=response.has_direct_evidence,
        rejected=len(response.rejected),
        query=query,
        count=len(items),
    )


# ============ App Factory ============

def create_app(
    engine: Optional[Cicada] = None,
    config: Optional[CicadaConfig] = None,
) -> FastAPI:
    """
    Create a FastAPI app wrapping a Cicada instance.

    Args:
        engine: Prebuilt engine; when None one is built from ``config`` on startup
        config: Engine configuration (environment-derived if None)
    """
    state: Dict[str, Optional[Cicada]] = {"engine": engine}

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg = config or CicadaConfig.from_env()
        configure_logging(cfg.log_level)
        if state["engine"] is None:
            state["engine"] = Cicada(cfg)
        yield

    app = FastAPI(
        title="CICADA Retrieval API",
        description="Semantic search over the script with citations and evidence flags",
        version="1.0.0",
        lifespan=lifespan,
    )

    def get_engine() -> Cicada:
        if state["engine"] is None:
            raise HTTPException(status_code=503, detail="Engine not initialized")
        return state["engine"]

    @app.exception_handler(CicadaError)
    async def cicada_error_handler(request: Request, exc: CicadaError):
        if isinstance(exc, InvalidSearchOptions):
            status_code = 400
        elif isinstance(exc, ProviderError):
            status_code = 502
        else:
            status_code = 500
        return JSONResponse(
            status_code=status_code,
            content={
                "code": exc.code,
                "message": exc.user_message,
                "retryable": exc.retryable,
            },
        )

    # ============ Endpoints ============

    @app.post("/search", response_model=SearchResponseModel, tags=["Search"])
    def search(request: SearchRequest):
        """
        Search for script passages relevant to the query.

        Results carry complete citations; `has_direct_evidence` is false
        when nothing relevant was found.
        """
        cicada = get_engine()
        options = SearchOptions.build(
            top_k=request.top_k if request.top_k is not None else cicada.config.default_top_k,
            min_score=request.min_score if request.min_score is not None else cicada.config.default_min_score,
            episode_ids=request.episode_ids,
            character=request.character,
            chapter_id=request.chapter_id,
            metadata=request.metadata,
        )
        response = cicada.search(request.query, options, group=request.group_by_episode)
        return _to_response_model(request.query, response)

    @app.get("/stats", response_model=StatsResponse, tags=["Management"])
    def get_stats():
        """Get corpus and embedding cache statistics."""
        return StatsResponse(**get_engine().get_stats())

    @app.post("/cache/clear", tags=["Cache"])
    def clear_cache():
        """Clear the query embedding cache."""
        cache = get_engine().embedder.cache
        size = cache.stats()["size"]
        cache.clear()
        return {"cleared": True, "entries_cleared": size}

    @app.get("/health", tags=["Health"])
    def health_check():
        return {"status": "healthy", "service": "cicada"}

    return app


# Default app for `uvicorn cicada.api:app`
app = create_app()
