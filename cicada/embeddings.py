"""Query embedding providers with caching and retries."""

import hashlib
import logging
import os
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Dict, List, Optional, Tuple, Union

from openai import OpenAI
from tenacity import retry, stop_after_attempt, wait_exponential

from .errors import ProviderError

logger = logging.getLogger(__name__)


class EmbeddingCache:
    """LRU cache for embeddings to avoid redundant API calls."""

    def __init__(self, maxsize: int = 1000):
        self._cache: "OrderedDict[str, List[float]]" = OrderedDict()
        self._maxsize = maxsize
        self._hits = 0
        self._misses = 0

    def _hash_text(self, text: str, model: str) -> str:
        return hashlib.sha256(f"{model}:{text}".encode()).hexdigest()[:16]

    def get(self, text: str, model: str) -> Optional[List[float]]:
        key = self._hash_text(text, model)
        if key in self._cache:
            self._hits += 1
            self._cache.move_to_end(key)
            return self._cache[key]
        self._misses += 1
        return None

    def set(self, text: str, model: str, embedding: List[float]) -> None:
        key = self._hash_text(text, model)
        if key not in self._cache and len(self._cache) >= self._maxsize:
            self._cache.popitem(last=False)
        self._cache[key] = embedding
        self._cache.move_to_end(key)

    def stats(self) -> Dict[str, float]:
        """Return cache statistics."""
        total = self._hits + self._misses
        return {
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": self._hits / total if total > 0 else 0,
            "size": len(self._cache),
            "maxsize": self._maxsize,
        }

    def clear(self) -> None:
        self._cache.clear()
        self._hits = 0
        self._misses = 0


class BaseEmbeddingProvider(ABC):
    """Abstract base class for embedding providers."""

    name = "base"

    def __init__(self, model: str, use_cache: bool = True, cache: Optional[EmbeddingCache] = None):
        self.model = model
        self.use_cache = use_cache
        self.cache = cache if cache is not None else EmbeddingCache()

    @abstractmethod
    def _embed_batch(self, texts: List[str]) -> List[List[float]]:
        """Generate embeddings for a batch of texts (provider-specific)."""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Return embedding dimension for this model."""

    def _call_provider(self, texts: List[str]) -> List[List[float]]:
        try:
            return self._embed_batch(texts)
        except (ProviderError, ImportError):
            # Missing optional dependencies surface unchanged
            raise
        except Exception as exc:
            logger.error("Embedding generation failed via %s (%s): %s", self.name, self.model, exc)
            raise ProviderError(
                f"{self.name} embedding request failed: {exc}", provider=self.name
            ) from exc

    def embed(self, texts: Union[str, List[str]]) -> List[List[float]]:
        """
        Generate embeddings with caching.

        Args:
            texts: Single text or list of texts

        Returns:
            List of embedding vectors, in input order

        Raises:
            ProviderError: if the underlying provider call fails
        """
        if isinstance(texts, str):
            texts = [texts]

        if not self.use_cache:
            return self._call_provider(texts)

        results: List[Optional[List[float]]] = [None] * len(texts)
        texts_to_embed: List[Tuple[int, str]] = []

        for i, text in enumerate(texts):
            cached = self.cache.get(text, self.model)
            if cached is not None:
                results[i] = cached
            else:
                texts_to_embed.append((i, text))

        if texts_to_embed:
            indices, uncached_texts = zip(*texts_to_embed)
            new_embeddings = self._call_provider(list(uncached_texts))

            for idx, text, embedding in zip(indices, uncached_texts, new_embeddings):
                self.cache.set(text, self.model, embedding)
                results[idx] = embedding

        return results  # type: ignore

    def embed_query(self, text: str) -> List[float]:
        """Embed a single query string."""
        return self.embed(text)[0]


class EmbeddingProvider(BaseEmbeddingProvider):
    """OpenAI embedding provider with retries and caching."""

    name = "openai"

    MODEL_DIMENSIONS = {
        "text-embedding-3-large": 3072,
        "text-embedding-3-small": 1536,
        "text-embedding-ada-002": 1536,
    }

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        openai_api_key: Optional[str] = None,
        use_cache: bool = True,
        cache: Optional[EmbeddingCache] = None,
    ):
        super().__init__(model, use_cache, cache)
        self.api_key = openai_api_key or os.environ.get("OPENAI_API_KEY")
        if not self.api_key:
            raise ValueError(
                "OpenAI API key required. Set OPENAI_API_KEY environment variable "
                "or pass openai_api_key parameter."
            )
        self.client = OpenAI(api_key=self.api_key)

    @property
    def dimension(self) -> int:
        return self.MODEL_DIMENSIONS.get(self.model, 1536)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _embed_batch(self, texts: List[str]) -> List[List[float]]:
        response = self.client.embeddings.create(
            model=self.model,
            input=texts,
        )

        # The API may return items out of order
        embeddings = sorted(response.data, key=lambda x: x.index)
        return [emb.embedding for emb in embeddings]


OpenAIEmbedding = EmbeddingProvider


class HuggingFaceEmbedding(BaseEmbeddingProvider):
    """
    HuggingFace sentence-transformers embedding provider (local, free).

    Requires: pip install sentence-transformers

    The corpus must have been embedded with the same model, otherwise every
    search fails with a dimension mismatch.
    """

    name = "huggingface"

    MODEL_DIMENSIONS = {
        "all-MiniLM-L6-v2": 384,
        "all-mpnet-base-v2": 768,
        "BAAI/bge-small-en-v1.5": 384,
        "BAAI/bge-base-en-v1.5": 768,
        "BAAI/bge-large-en-v1.5": 1024,
    }

    def __init__(
        self,
        model: str = "all-MiniLM-L6-v2",
        hf_token: Optional[str] = None,
        use_cache: bool = True,
        cache: Optional[EmbeddingCache] = None,
    ):
        super().__init__(model, use_cache, cache)
        self.hf_token = hf_token or os.environ.get("HF_TOKEN")
        self._model = None
        self._dimension: Optional[int] = None

    def _load_model(self):
        """Lazy-load the model."""
        if self._model is None:
            try:
                from sentence_transformers import SentenceTransformer
            except ImportError as exc:
                raise ImportError(
                    "sentence-transformers not installed. "
                    "Run: pip install 'cicada-retrieval[huggingface]'"
                ) from exc
            self._model = SentenceTransformer(self.model, token=self.hf_token)
            self._dimension = self._model.get_sentence_embedding_dimension()
        return self._model

    @property
    def dimension(self) -> int:
        if self._dimension is not None:
            return self._dimension
        if self.model in self.MODEL_DIMENSIONS:
            return self.MODEL_DIMENSIONS[self.model]
        self._load_model()
        return self._dimension or 384

    def _embed_batch(self, texts: List[str]) -> List[List[float]]:
        model = self._load_model()
        embeddings = model.encode(texts, convert_to_numpy=True)
        return embeddings.tolist()


class JinaEmbedding(BaseEmbeddingProvider):
    """
    Jina AI embedding provider (API-based).

    Requires: JINA_API_KEY environment variable
    """

    name = "jina"
    API_URL = "https://api.jina.ai/v1/embeddings"

    MODEL_DIMENSIONS = {
        "jina-embeddings-v3": 1024,
        "jina-embeddings-v2-base-en": 768,
        "jina-embeddings-v2-small-en": 512,
    }

    def __init__(
        self,
        model: str = "jina-embeddings-v3",
        jina_api_key: Optional[str] = None,
        use_cache: bool = True,
        task: Optional[str] = "retrieval.query",
        cache: Optional[EmbeddingCache] = None,
    ):
        super().__init__(model, use_cache, cache)
        self.api_key = jina_api_key or os.environ.get("JINA_API_KEY")
        if not self.api_key:
            raise ValueError(
                "Jina API key required. Set JINA_API_KEY environment variable "
                "or pass jina_api_key parameter."
            )
        self.task = task

    @property
    def dimension(self) -> int:
        return self.MODEL_DIMENSIONS.get(self.model, 1024)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _embed_batch(self, texts: List[str]) -> List[List[float]]:
        import requests

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        payload = {"model": self.model, "input": texts}
        if self.task:
            payload["task"] = self.task

        response = requests.post(self.API_URL, headers=headers, json=payload, timeout=30)
        response.raise_for_status()
        return [item["embedding"] for item in response.json()["data"]]


def create_embedding_provider(
    provider: str = "openai",
    model: Optional[str] = None,
    **kwargs
) -> BaseEmbeddingProvider:
    """
    Factory function to create embedding providers.

    Args:
        provider: Provider name ('openai', 'huggingface', 'jina')
        model: Model name (uses provider default if not specified)
        **kwargs: Additional provider-specific arguments

    Example:
        >>> embedder = create_embedding_provider("openai", "text-embedding-3-small")
    """
    provider = provider.lower()

    if provider in ("openai", "openai-embedding"):
        return EmbeddingProvider(model or "text-embedding-3-small", **kwargs)

    elif provider in ("huggingface", "hf", "sentence-transformers"):
        return HuggingFaceEmbedding(model or "all-MiniLM-L6-v2", **kwargs)

    elif provider in ("jina", "jina-ai"):
        return JinaEmbedding(model or "jina-embeddings-v3", **kwargs)

    else:
        raise ValueError(
            f"Unknown provider: {provider}. "
            f"Supported: 'openai', 'huggingface', 'jina'"
        )
